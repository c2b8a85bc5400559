from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.crud import apply_changes, get_or_404, remove, save
from app.db import get_db
from app.db_models import HARI, Jadwal, SchoolInfo, Ujian
from app.errors import NotFound
from app.models import (
    JadwalOut,
    JadwalPayload,
    SchoolInfoOut,
    SchoolInfoPayload,
    UjianOut,
    UjianPayload,
)
from app.security import CurrentUser, require_role

router = APIRouter(prefix="/api", tags=["school"])

# weekday order, not alphabetical
_DAY_INDEX = {hari: i for i, hari in enumerate(HARI)}


# ---------------- School info ----------------
def _current_info(db: Session) -> Optional[SchoolInfo]:
    return db.execute(select(SchoolInfo).order_by(SchoolInfo.id.desc()).limit(1)).scalars().first()


@router.get("/school-info", response_model=SchoolInfoOut)
def get_school_info(db: Session = Depends(get_db)):
    info = _current_info(db)
    if info is None:
        raise NotFound("School info has not been set")
    return info


@router.put("/school-info", response_model=SchoolInfoOut)
def put_school_info(
    payload: SchoolInfoPayload,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    info = _current_info(db) or SchoolInfo()
    apply_changes(info, payload.model_dump())
    save(db, info)
    return info


# ---------------- Jadwal ----------------
@router.get("/jadwal", response_model=List[JadwalOut])
def list_jadwal(
    kelas: Optional[str] = Query(default=None),
    jurusan: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    stmt = select(Jadwal)
    if kelas:
        stmt = stmt.where(Jadwal.kelas == kelas)
    if jurusan:
        stmt = stmt.where(Jadwal.jurusan == jurusan)
    rows = db.execute(stmt).scalars().all()
    return sorted(rows, key=lambda j: (j.kelas or "", j.jurusan or "", _DAY_INDEX[j.hari], j.jam_mulai))


@router.post("/jadwal", response_model=JadwalOut, status_code=status.HTTP_201_CREATED)
def create_jadwal(
    payload: JadwalPayload,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    jadwal = Jadwal(**payload.model_dump())
    save(db, jadwal)
    return jadwal


@router.put("/jadwal/{jadwal_id}", response_model=JadwalOut)
def update_jadwal(
    jadwal_id: int,
    payload: JadwalPayload,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    jadwal = get_or_404(db, Jadwal, jadwal_id, "Jadwal")
    apply_changes(jadwal, payload.model_dump())
    save(db, jadwal)
    return jadwal


@router.delete("/jadwal/{jadwal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_jadwal(
    jadwal_id: int,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
) -> Response:
    remove(db, get_or_404(db, Jadwal, jadwal_id, "Jadwal"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------- Ujian ----------------
def _ujian_values(payload: UjianPayload) -> dict:
    values = payload.model_dump()
    values["link_ujian"] = str(payload.link_ujian)
    return values


@router.get("/ujian", response_model=List[UjianOut])
def list_ujian(db: Session = Depends(get_db)):
    stmt = select(Ujian).order_by(Ujian.tanggal_mulai.desc(), Ujian.id.desc())
    return db.execute(stmt).scalars().all()


@router.post("/ujian", response_model=UjianOut, status_code=status.HTTP_201_CREATED)
def create_ujian(
    payload: UjianPayload,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    ujian = Ujian(**_ujian_values(payload))
    save(db, ujian)
    return ujian


@router.put("/ujian/{ujian_id}", response_model=UjianOut)
def update_ujian(
    ujian_id: int,
    payload: UjianPayload,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    ujian = get_or_404(db, Ujian, ujian_id, "Ujian")
    apply_changes(ujian, _ujian_values(payload))
    save(db, ujian)
    return ujian


@router.delete("/ujian/{ujian_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ujian(
    ujian_id: int,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
) -> Response:
    remove(db, get_or_404(db, Ujian, ujian_id, "Ujian"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
