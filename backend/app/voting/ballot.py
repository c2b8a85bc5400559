"""
Category ballots for the student-council election.

Unlike polarity votes, a ballot is binding: one candidate per voter per
election category (``pemilihan``), a second attempt is rejected with
``DuplicateVote`` and only an explicit revoke frees the category again. The
rows live in their own ``pemilihan`` table.
"""

from __future__ import annotations

from typing import Any, Dict, List

from app.errors import DuplicateVote, InvalidInput, NotFound
from app.security.logger import vote_logger as logger
from app.voting.store import BallotRecord, BallotStore

PEMILIHAN_MAX_LENGTH = 50


def normalize_pemilihan(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("pemilihan is required")
    pemilihan = value.strip()
    if len(pemilihan) > PEMILIHAN_MAX_LENGTH:
        raise InvalidInput(f"pemilihan must be at most {PEMILIHAN_MAX_LENGTH} characters")
    return pemilihan


def normalize_kandidat_id(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        raise InvalidInput("kandidat_id is required")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int) or value <= 0:
        raise InvalidInput("kandidat_id must be a positive integer")
    return value


class CategoryBallot:
    def __init__(self, store: BallotStore) -> None:
        self.store = store

    def cast(self, user_id: int, pemilihan: Any, kandidat_id: Any) -> BallotRecord:
        category = normalize_pemilihan(pemilihan)
        candidate = normalize_kandidat_id(kandidat_id)
        if not self.store.kandidat_exists(candidate):
            raise InvalidInput(f"kandidat {candidate} does not exist")

        try:
            record = self.store.insert_ballot(user_id, category, candidate)
        except DuplicateVote:
            logger.warning(f"Duplicate ballot rejected user={user_id} pemilihan={category}")
            raise
        logger.info(f"Ballot cast user={user_id} pemilihan={category} kandidat={candidate}")
        return record

    def revoke(self, user_id: int, pemilihan: Any) -> None:
        category = normalize_pemilihan(pemilihan)
        if not self.store.delete_ballot(user_id, category):
            raise NotFound(f"No ballot to revoke for pemilihan {category!r}")
        logger.info(f"Ballot revoked user={user_id} pemilihan={category}")

    def ballots_for_user(self, user_id: int) -> List[BallotRecord]:
        return self.store.ballots_for_user(user_id)

    def tally(self, pemilihan: Any) -> Dict[int, int]:
        """Ballot counts per candidate; candidates without ballots are absent."""
        return self.store.count_by_kandidat(normalize_pemilihan(pemilihan))

    def list_all(self) -> List[Dict[str, Any]]:
        return self.store.list_all()


__all__ = ["CategoryBallot", "normalize_kandidat_id", "normalize_pemilihan"]
