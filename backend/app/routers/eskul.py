from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.crud import apply_changes, delete_where, get_or_404, remove, save
from app.db import get_db
from app.db_models import Eskul, EskulPilihan
from app.errors import NotFound
from app.models import EskulOut, EskulPayload, EskulPilihanOut, EskulPilihRequest
from app.security import CurrentUser, get_current_user, require_role
from app.security.logger import eskul_logger as logger

router = APIRouter(prefix="/api/eskul", tags=["eskul"])


@router.get("", response_model=List[EskulOut])
def list_eskul(db: Session = Depends(get_db)):
    return db.execute(select(Eskul).order_by(Eskul.nama_eskul)).scalars().all()


@router.post("", response_model=EskulOut, status_code=status.HTTP_201_CREATED)
def create_eskul(
    payload: EskulPayload,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    eskul = Eskul(**payload.model_dump())
    save(db, eskul)
    return eskul


# ---------------- Student choices ----------------
# declared before "/{eskul_id}" routes so the literal paths win
@router.post("/pilih", response_model=EskulPilihanOut, status_code=status.HTTP_201_CREATED)
def choose_eskul(
    payload: EskulPilihRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    eskul = get_or_404(db, Eskul, payload.eskul_id, "Eskul")
    pilihan = EskulPilihan(user_id=user.id, eskul_id=eskul.id)
    save(db, pilihan, conflict_message="Eskul already chosen")
    logger.info(f"Eskul chosen user={user.id} eskul={eskul.id}")
    return EskulPilihanOut(
        id=pilihan.id,
        user_id=pilihan.user_id,
        eskul_id=pilihan.eskul_id,
        status=pilihan.status,
        created_at=pilihan.created_at,
        nama_eskul=eskul.nama_eskul,
        deskripsi=eskul.deskripsi,
        logo=eskul.logo,
    )


@router.get("/pilihan", response_model=List[EskulPilihanOut])
def my_eskul_choices(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    stmt = (
        select(
            EskulPilihan.id,
            EskulPilihan.user_id,
            EskulPilihan.eskul_id,
            EskulPilihan.status,
            EskulPilihan.created_at,
            Eskul.nama_eskul,
            Eskul.deskripsi,
            Eskul.logo,
        )
        .join(Eskul, EskulPilihan.eskul_id == Eskul.id)
        .where(EskulPilihan.user_id == user.id)
        .order_by(EskulPilihan.id)
    )
    return [EskulPilihanOut(**row._mapping) for row in db.execute(stmt)]


@router.delete("/pilihan/{pilihan_id}", status_code=status.HTTP_204_NO_CONTENT)
def drop_eskul_choice(
    pilihan_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    # scoped to the caller; someone else's choice reads as missing
    removed = delete_where(
        db, delete(EskulPilihan).where(EskulPilihan.id == pilihan_id, EskulPilihan.user_id == user.id)
    )
    if not removed:
        raise NotFound(f"Eskul choice {pilihan_id} not found")
    logger.info(f"Eskul choice dropped user={user.id} pilihan={pilihan_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------- Admin maintenance ----------------
@router.put("/{eskul_id}", response_model=EskulOut)
def update_eskul(
    eskul_id: int,
    payload: EskulPayload,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    eskul = get_or_404(db, Eskul, eskul_id, "Eskul")
    apply_changes(eskul, payload.model_dump())
    save(db, eskul)
    return eskul


@router.delete("/{eskul_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_eskul(
    eskul_id: int,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
) -> Response:
    remove(db, get_or_404(db, Eskul, eskul_id, "Eskul"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
