"""Small helpers shared by the reference-data routers."""

from __future__ import annotations

from typing import Any, Dict, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db import Base
from app.errors import Conflict, NotFound, StoreUnavailable

ModelT = TypeVar("ModelT", bound=Base)


def get_or_404(db: Session, model: Type[ModelT], obj_id: int, label: str) -> ModelT:
    obj = db.get(model, obj_id)
    if obj is None:
        raise NotFound(f"{label} {obj_id} not found")
    return obj


def save(db: Session, obj: Base, conflict_message: str = "Resource conflict") -> None:
    """Add, commit and refresh ``obj``, translating store failures into domain errors."""
    db.add(obj)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict(conflict_message) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreUnavailable(f"write failed ({exc.__class__.__name__})") from exc
    db.refresh(obj)


def apply_changes(obj: Base, changes: Dict[str, Any]) -> None:
    for field, value in changes.items():
        setattr(obj, field, value)


def delete_where(db: Session, stmt) -> int:
    """Run a bulk ``DELETE`` and commit; returns the number of rows removed."""
    try:
        result = db.execute(stmt)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreUnavailable(f"delete failed ({exc.__class__.__name__})") from exc
    return result.rowcount


def remove(db: Session, obj: Base) -> None:
    db.delete(obj)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreUnavailable(f"delete failed ({exc.__class__.__name__})") from exc


__all__ = ["get_or_404", "save", "apply_changes", "delete_where", "remove"]
