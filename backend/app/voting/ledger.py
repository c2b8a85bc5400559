"""
Write path for polarity votes.

A voter holds at most one opinion per target. Casting again for the same
``(user_id, target_id)`` overwrites the stored polarity; the store performs
the insert-or-update as one atomic statement keyed by the unique pair.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from app.errors import InvalidInput
from app.security.logger import vote_logger as logger
from app.voting.store import VoteRecord, VoteStore

VOTE_UP = 1
VOTE_DOWN = -1
TARGET_ID_MAX_LENGTH = 64


def normalize_vote_type(value: Any) -> Optional[int]:
    """Return ``1`` or ``-1`` for an acceptable polarity, ``None`` for anything else.

    Accepts ints, integral floats and numeric strings; booleans are rejected even
    though they are ints in Python.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        numeric = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        numeric = int(value)
    elif isinstance(value, str):
        try:
            numeric = int(value.strip())
        except ValueError:
            return None
    else:
        return None
    return numeric if numeric in (VOTE_UP, VOTE_DOWN) else None


def normalize_target_id(value: Any) -> str:
    if value is None or isinstance(value, bool):
        raise InvalidInput("target_id is required")
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str):
        raise InvalidInput("target_id must be a string or integer")
    target = value.strip()
    if not target:
        raise InvalidInput("target_id is required")
    if len(target) > TARGET_ID_MAX_LENGTH:
        raise InvalidInput(f"target_id must be at most {TARGET_ID_MAX_LENGTH} characters")
    return target


class VoteLedger:
    def __init__(self, store: VoteStore) -> None:
        self.store = store

    def cast_vote(self, user_id: int, target_id: Any, vote_type: Any) -> Tuple[VoteRecord, bool]:
        target = normalize_target_id(target_id)
        polarity = normalize_vote_type(vote_type)
        if polarity is None:
            raise InvalidInput("vote_type must be 1 or -1")

        record, is_new = self.store.upsert_vote(user_id, target, polarity)
        logger.info(
            f"Vote {'cast' if is_new else 'overwritten'} user={user_id} target={target} vote_type={polarity}"
        )
        return record, is_new

    def votes_for_user(self, user_id: int) -> List[VoteRecord]:
        return self.store.votes_for_user(user_id)


__all__ = [
    "VOTE_UP",
    "VOTE_DOWN",
    "VoteLedger",
    "normalize_target_id",
    "normalize_vote_type",
]
