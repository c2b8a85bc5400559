from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    SmallInteger,
    String,
    Text,
    Time,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db import Base

HARI = ("Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu")
PILIHAN_STATUS = ("pending", "approved", "rejected")


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nisn_nip: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    nama: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(100))
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(Enum("voter", "admin", name="user_role"), nullable=False, default="voter")
    kelas: Mapped[Optional[str]] = mapped_column(String(10))
    jurusan: Mapped[Optional[str]] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class Vote(Base):
    """One polarity vote per (user, target); re-casting overwrites vote_type."""

    __tablename__ = "vote"
    __table_args__ = (
        UniqueConstraint("user_id", "target_id", name="uq_vote_user_target"),
        CheckConstraint("vote_type IN (1, -1)", name="ck_vote_type_polarity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    target_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    vote_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class Kandidat(Base):
    __tablename__ = "kandidat"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nama_kandidat: Mapped[str] = mapped_column(String(100), nullable=False)
    nomor_kandidat: Mapped[int] = mapped_column(Integer, nullable=False)
    img_url: Mapped[Optional[str]] = mapped_column(String(255))
    calon: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    tagline: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class Ballot(Base):
    """Category ballot: one candidate per (user, pemilihan); duplicates rejected."""

    __tablename__ = "pemilihan"
    __table_args__ = (
        UniqueConstraint("user_id", "pemilihan", name="uq_pemilihan_user_category"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    pemilihan: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    kandidat_id: Mapped[int] = mapped_column(ForeignKey("kandidat.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class Eskul(Base):
    __tablename__ = "eskul"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nama_eskul: Mapped[str] = mapped_column(String(100), nullable=False)
    deskripsi: Mapped[Optional[str]] = mapped_column(Text)
    logo: Mapped[Optional[str]] = mapped_column(String(255))
    kontak_center: Mapped[Optional[str]] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class EskulPilihan(Base):
    __tablename__ = "eskul_pilihan"
    __table_args__ = (
        UniqueConstraint("user_id", "eskul_id", name="uq_eskul_pilihan_user_eskul"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    eskul_id: Mapped[int] = mapped_column(ForeignKey("eskul.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(
        Enum(*PILIHAN_STATUS, name="pilihan_status"), nullable=False, default="pending"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class SchoolInfo(Base):
    __tablename__ = "school_info"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nama_sekolah: Mapped[str] = mapped_column(String(100), nullable=False)
    alamat: Mapped[Optional[str]] = mapped_column(Text)
    telepon: Mapped[Optional[str]] = mapped_column(String(20))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    website: Mapped[Optional[str]] = mapped_column(String(100))
    deskripsi: Mapped[Optional[str]] = mapped_column(Text)
    jurusan: Mapped[Optional[str]] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())


class Jadwal(Base):
    __tablename__ = "jadwal"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hari: Mapped[str] = mapped_column(Enum(*HARI, name="hari"), nullable=False)
    jam_mulai: Mapped[time] = mapped_column(Time, nullable=False)
    jam_selesai: Mapped[time] = mapped_column(Time, nullable=False)
    mata_pelajaran: Mapped[str] = mapped_column(String(100), nullable=False)
    guru: Mapped[Optional[str]] = mapped_column(String(100))
    kelas: Mapped[Optional[str]] = mapped_column(String(10))
    jurusan: Mapped[Optional[str]] = mapped_column(String(50))
    gambar: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class Ujian(Base):
    __tablename__ = "ujian"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nama_ujian: Mapped[str] = mapped_column(String(100), nullable=False)
    link_ujian: Mapped[str] = mapped_column(Text, nullable=False)
    deskripsi: Mapped[Optional[str]] = mapped_column(Text)
    tanggal_mulai: Mapped[Optional[datetime]] = mapped_column(DateTime)
    tanggal_selesai: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
