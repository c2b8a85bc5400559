"""
Relational store adapters for the voting core.

The ledger and aggregators only talk to the ``VoteStore`` / ``BallotStore``
protocols, so a request handler hands them a SQLAlchemy-backed store while unit
tests hand them an in-memory fake. Every SQLAlchemy failure surfaces as
``StoreUnavailable``; nothing is retried here.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db_models import Ballot, Kandidat, User, Vote
from app.errors import DuplicateVote, NotFound, PortalError, StoreUnavailable


@dataclass(frozen=True)
class VoteRecord:
    id: int
    user_id: int
    target_id: str
    vote_type: int
    created_at: Optional[datetime]


@dataclass(frozen=True)
class BallotRecord:
    id: int
    user_id: int
    pemilihan: str
    kandidat_id: int
    created_at: Optional[datetime]


class VoteStore(Protocol):
    def upsert_vote(self, user_id: int, target_id: str, vote_type: int) -> Tuple[VoteRecord, bool]:
        """Insert or overwrite the vote for (user_id, target_id); return (record, is_new)."""

    def votes_for_user(self, user_id: int) -> List[VoteRecord]:
        ...

    def vote_types_for_target(self, target_id: str) -> List[int]:
        ...


class BallotStore(Protocol):
    def kandidat_exists(self, kandidat_id: int) -> bool:
        ...

    def insert_ballot(self, user_id: int, pemilihan: str, kandidat_id: int) -> BallotRecord:
        """Insert a ballot, raising ``DuplicateVote`` when the category is already taken."""

    def delete_ballot(self, user_id: int, pemilihan: str) -> bool:
        ...

    def ballots_for_user(self, user_id: int) -> List[BallotRecord]:
        ...

    def count_by_kandidat(self, pemilihan: str) -> Dict[int, int]:
        ...

    def list_all(self) -> List[Dict[str, Any]]:
        ...


def _vote_record(row: Vote) -> VoteRecord:
    return VoteRecord(
        id=row.id,
        user_id=row.user_id,
        target_id=row.target_id,
        vote_type=row.vote_type,
        created_at=row.created_at,
    )


def _ballot_record(row: Ballot) -> BallotRecord:
    return BallotRecord(
        id=row.id,
        user_id=row.user_id,
        pemilihan=row.pemilihan,
        kandidat_id=row.kandidat_id,
        created_at=row.created_at,
    )


def upsert_vote_statement(dialect_name: str, values: Dict[str, Any]):
    """Build the single-statement insert-or-update keyed by ``uq_vote_user_target``."""
    if dialect_name in ("sqlite", "postgresql"):
        insert = sqlite.insert if dialect_name == "sqlite" else postgresql.insert
        stmt = insert(Vote).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=["user_id", "target_id"],
            set_={"vote_type": stmt.excluded.vote_type},
        )
    if dialect_name in ("mysql", "mariadb"):
        stmt = mysql.insert(Vote).values(**values)
        return stmt.on_duplicate_key_update(vote_type=stmt.inserted.vote_type)
    raise StoreUnavailable(f"No atomic upsert available for dialect {dialect_name!r}")


class _SqlStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreUnavailable(f"{action} failed ({exc.__class__.__name__})") from exc
        except PortalError:
            self.db.rollback()
            raise


class SqlVoteStore(_SqlStore):
    def _find(self, user_id: int, target_id: str) -> Optional[Vote]:
        stmt = select(Vote).where(Vote.user_id == user_id, Vote.target_id == target_id)
        return self.db.scalars(stmt).first()

    def _lock_voter(self, user_id: int, dialect: str) -> None:
        """Serialize every vote write of one voter until the transaction ends.

        SQLite has no row locks, so a no-op write on the voter row takes the
        database write lock instead of ``SELECT ... FOR UPDATE``.
        """
        if dialect == "sqlite":
            stmt = update(User).where(User.id == user_id).values(nama=User.nama)
            found = self.db.execute(stmt.execution_options(synchronize_session=False)).rowcount
        else:
            found = self.db.scalar(select(User.id).where(User.id == user_id).with_for_update()) is not None
        if not found:
            raise NotFound(f"Voter {user_id} not found")

    def upsert_vote(self, user_id: int, target_id: str, vote_type: int) -> Tuple[VoteRecord, bool]:
        with self._guard("vote upsert"):
            dialect = self.db.get_bind().dialect.name
            self._lock_voter(user_id, dialect)
            # exact under the voter lock; the unique key still guards the one-row invariant
            existed = self._find(user_id, target_id) is not None
            values = {"user_id": user_id, "target_id": target_id, "vote_type": vote_type}
            self.db.execute(upsert_vote_statement(dialect, values))
            self.db.commit()
            row = self._find(user_id, target_id)
            if row is None:
                raise StoreUnavailable("vote upsert returned no row")
            return _vote_record(row), not existed

    def votes_for_user(self, user_id: int) -> List[VoteRecord]:
        with self._guard("vote listing"):
            stmt = select(Vote).where(Vote.user_id == user_id).order_by(Vote.id)
            return [_vote_record(row) for row in self.db.scalars(stmt)]

    def vote_types_for_target(self, target_id: str) -> List[int]:
        with self._guard("vote results"):
            stmt = select(Vote.vote_type).where(Vote.target_id == target_id)
            return list(self.db.scalars(stmt))


class SqlBallotStore(_SqlStore):
    def kandidat_exists(self, kandidat_id: int) -> bool:
        with self._guard("kandidat lookup"):
            return self.db.get(Kandidat, kandidat_id) is not None

    def insert_ballot(self, user_id: int, pemilihan: str, kandidat_id: int) -> BallotRecord:
        with self._guard("ballot insert"):
            ballot = Ballot(user_id=user_id, pemilihan=pemilihan, kandidat_id=kandidat_id)
            self.db.add(ballot)
            try:
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                raise DuplicateVote(f"Already voted in election {pemilihan!r}") from exc
            self.db.refresh(ballot)
            return _ballot_record(ballot)

    def delete_ballot(self, user_id: int, pemilihan: str) -> bool:
        with self._guard("ballot revoke"):
            result = self.db.execute(
                delete(Ballot).where(Ballot.user_id == user_id, Ballot.pemilihan == pemilihan)
            )
            self.db.commit()
            return bool(result.rowcount)

    def ballots_for_user(self, user_id: int) -> List[BallotRecord]:
        with self._guard("ballot listing"):
            stmt = select(Ballot).where(Ballot.user_id == user_id).order_by(Ballot.id)
            return [_ballot_record(row) for row in self.db.scalars(stmt)]

    def count_by_kandidat(self, pemilihan: str) -> Dict[int, int]:
        with self._guard("ballot tally"):
            stmt = (
                select(Ballot.kandidat_id, func.count(Ballot.id))
                .where(Ballot.pemilihan == pemilihan)
                .group_by(Ballot.kandidat_id)
            )
            return {kandidat_id: int(count) for kandidat_id, count in self.db.execute(stmt)}

    def list_all(self) -> List[Dict[str, Any]]:
        with self._guard("ballot admin listing"):
            stmt = (
                select(
                    Ballot.id,
                    Ballot.created_at,
                    Ballot.pemilihan,
                    User.id.label("user_id"),
                    User.nisn_nip,
                    User.nama.label("nama_user"),
                    Kandidat.id.label("kandidat_id"),
                    Kandidat.nama_kandidat,
                )
                .join(User, Ballot.user_id == User.id)
                .join(Kandidat, Ballot.kandidat_id == Kandidat.id)
                .order_by(Ballot.created_at.desc(), Ballot.id.desc())
            )
            return [dict(row._mapping) for row in self.db.execute(stmt)]


__all__ = [
    "VoteRecord",
    "BallotRecord",
    "VoteStore",
    "BallotStore",
    "SqlVoteStore",
    "SqlBallotStore",
    "upsert_vote_statement",
]
