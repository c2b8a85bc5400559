from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.crud import apply_changes, get_or_404, remove, save
from app.db import get_db
from app.db_models import Kandidat
from app.errors import InvalidInput
from app.models import KandidatCreate, KandidatOut, KandidatUpdate
from app.security import CurrentUser, require_role

router = APIRouter(prefix="/api/kandidat", tags=["kandidat"])


@router.get("", response_model=List[KandidatOut])
def list_kandidat(calon: Optional[str] = Query(default=None), db: Session = Depends(get_db)):
    stmt = select(Kandidat).order_by(Kandidat.nomor_kandidat, Kandidat.id)
    if calon:
        stmt = stmt.where(Kandidat.calon == calon)
    return db.execute(stmt).scalars().all()


@router.post("", response_model=KandidatOut, status_code=status.HTTP_201_CREATED)
def create_kandidat(
    payload: KandidatCreate,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    kandidat = Kandidat(**payload.model_dump())
    save(db, kandidat)
    return kandidat


@router.patch("/{kandidat_id}", response_model=KandidatOut)
def update_kandidat(
    kandidat_id: int,
    payload: KandidatUpdate,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    kandidat = get_or_404(db, Kandidat, kandidat_id, "Kandidat")
    changes = payload.model_dump(exclude_unset=True)
    for required in ("nama_kandidat", "nomor_kandidat", "calon"):
        if required in changes and changes[required] is None:
            raise InvalidInput(f"{required} cannot be null")
    apply_changes(kandidat, changes)
    save(db, kandidat)
    return kandidat


@router.delete("/{kandidat_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_kandidat(
    kandidat_id: int,
    user: CurrentUser = Depends(require_role("admin")),
    db: Session = Depends(get_db),
) -> Response:
    remove(db, get_or_404(db, Kandidat, kandidat_id, "Kandidat"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
