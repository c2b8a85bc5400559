import re
from datetime import datetime, time
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator, model_validator

from app.db_models import HARI


class StrictPayload(BaseModel):
    # unknown keys are rejected, never coalesced into a known field
    model_config = ConfigDict(extra="forbid")


class OrmOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------------- Accounts ----------------
class RegisterPayload(StrictPayload):
    nama: str = Field(min_length=1, max_length=100)
    nisn_nip: str = Field(min_length=3, max_length=20)
    password: str = Field(min_length=8, max_length=128)
    email: Optional[EmailStr] = None
    kelas: Optional[str] = Field(default=None, max_length=10)
    jurusan: Optional[str] = Field(default=None, max_length=50)

    @field_validator("nisn_nip")
    @classmethod
    def _nisn_nip_rules(cls, v: str) -> str:
        if not re.fullmatch(r"[A-Za-z0-9]+", v):
            raise ValueError("nisn_nip must be alphanumeric")
        return v

    @field_validator("password")
    @classmethod
    def _password_rules(cls, v: str) -> str:
        if any(ord(ch) < 32 for ch in v):
            raise ValueError("password contains control characters")
        if v.strip() != v:
            raise ValueError("password must not have surrounding spaces")
        if not re.search(r"[A-Za-z]", v) or not re.search(r"\d", v):
            raise ValueError("password must include a letter and a digit")
        return v


class LoginPayload(StrictPayload):
    nisn_nip: str = Field(min_length=1, max_length=20)
    password: str = Field(min_length=1, max_length=128)


class UserOut(OrmOut):
    id: int
    nisn_nip: str
    nama: str
    email: Optional[str] = None
    role: str
    kelas: Optional[str] = None
    jurusan: Optional[str] = None


class ProfileUpdate(StrictPayload):
    nama: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    kelas: Optional[str] = Field(default=None, max_length=10)
    jurusan: Optional[str] = Field(default=None, max_length=50)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


# ---------------- Polarity votes ----------------
class VoteRequest(StrictPayload):
    # loosely typed on purpose: normalization and its 400 live in the ledger
    target_id: Any = None
    vote_type: Any = None


class VoteOut(BaseModel):
    id: int
    user_id: int
    target_id: str
    vote_type: int
    created_at: Optional[datetime] = None


class VoteResults(BaseModel):
    target_id: str
    upvotes: int
    downvotes: int
    score: int
    total: int
    percent_up: float
    percent_down: float


# ---------------- Category ballots ----------------
class BallotRequest(StrictPayload):
    pemilihan: Any = None
    kandidat_id: Any = None


class BallotOut(BaseModel):
    id: int
    user_id: int
    pemilihan: str
    kandidat_id: int
    created_at: Optional[datetime] = None


class BallotAdminOut(BaseModel):
    id: int
    created_at: Optional[datetime] = None
    pemilihan: str
    user_id: int
    nisn_nip: str
    nama_user: str
    kandidat_id: int
    nama_kandidat: str


# ---------------- Kandidat ----------------
class KandidatCreate(StrictPayload):
    nama_kandidat: str = Field(min_length=1, max_length=100)
    nomor_kandidat: int = Field(ge=1)
    calon: str = Field(min_length=1, max_length=50)
    img_url: Optional[str] = Field(default=None, max_length=255)
    tagline: Optional[str] = None


class KandidatUpdate(StrictPayload):
    nama_kandidat: Optional[str] = Field(default=None, min_length=1, max_length=100)
    nomor_kandidat: Optional[int] = Field(default=None, ge=1)
    calon: Optional[str] = Field(default=None, min_length=1, max_length=50)
    img_url: Optional[str] = Field(default=None, max_length=255)
    tagline: Optional[str] = None


class KandidatOut(OrmOut):
    id: int
    nama_kandidat: str
    nomor_kandidat: int
    img_url: Optional[str] = None
    calon: str
    tagline: Optional[str] = None
    created_at: Optional[datetime] = None


# ---------------- Eskul ----------------
class EskulPayload(StrictPayload):
    nama_eskul: str = Field(min_length=1, max_length=100)
    deskripsi: Optional[str] = None
    logo: Optional[str] = Field(default=None, max_length=255)
    kontak_center: Optional[str] = Field(default=None, max_length=100)


class EskulOut(OrmOut):
    id: int
    nama_eskul: str
    deskripsi: Optional[str] = None
    logo: Optional[str] = None
    kontak_center: Optional[str] = None
    created_at: Optional[datetime] = None


class EskulPilihRequest(StrictPayload):
    eskul_id: int = Field(ge=1)


class EskulPilihanOut(BaseModel):
    id: int
    user_id: int
    eskul_id: int
    status: str
    created_at: Optional[datetime] = None
    nama_eskul: str
    deskripsi: Optional[str] = None
    logo: Optional[str] = None


# ---------------- School info ----------------
class SchoolInfoPayload(StrictPayload):
    nama_sekolah: str = Field(min_length=1, max_length=100)
    alamat: Optional[str] = None
    telepon: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, max_length=100)
    website: Optional[str] = Field(default=None, max_length=100)
    deskripsi: Optional[str] = None
    jurusan: Optional[str] = None


class SchoolInfoOut(OrmOut):
    id: int
    nama_sekolah: str
    alamat: Optional[str] = None
    telepon: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    deskripsi: Optional[str] = None
    jurusan: Optional[str] = None
    updated_at: Optional[datetime] = None


# ---------------- Jadwal ----------------
Hari = Literal[HARI]


class JadwalPayload(StrictPayload):
    hari: Hari
    jam_mulai: time
    jam_selesai: time
    mata_pelajaran: str = Field(min_length=1, max_length=100)
    guru: Optional[str] = Field(default=None, max_length=100)
    kelas: Optional[str] = Field(default=None, max_length=10)
    jurusan: Optional[str] = Field(default=None, max_length=50)
    gambar: Optional[str] = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def _ends_after_start(self) -> "JadwalPayload":
        if self.jam_selesai <= self.jam_mulai:
            raise ValueError("jam_selesai must be after jam_mulai")
        return self


class JadwalOut(OrmOut):
    id: int
    hari: str
    jam_mulai: time
    jam_selesai: time
    mata_pelajaran: str
    guru: Optional[str] = None
    kelas: Optional[str] = None
    jurusan: Optional[str] = None
    gambar: Optional[str] = None


# ---------------- Ujian ----------------
class UjianPayload(StrictPayload):
    nama_ujian: str = Field(min_length=1, max_length=100)
    link_ujian: HttpUrl
    deskripsi: Optional[str] = None
    tanggal_mulai: Optional[datetime] = None
    tanggal_selesai: Optional[datetime] = None

    @model_validator(mode="after")
    def _window_is_ordered(self) -> "UjianPayload":
        if self.tanggal_mulai and self.tanggal_selesai and self.tanggal_selesai < self.tanggal_mulai:
            raise ValueError("tanggal_selesai must not be before tanggal_mulai")
        return self


class UjianOut(OrmOut):
    id: int
    nama_ujian: str
    link_ujian: str
    deskripsi: Optional[str] = None
    tanggal_mulai: Optional[datetime] = None
    tanggal_selesai: Optional[datetime] = None
    created_at: Optional[datetime] = None
