"""Read path: tallies are recomputed from the stored rows on every request."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any

from app.voting.ledger import VOTE_DOWN, VOTE_UP, normalize_target_id
from app.voting.store import VoteStore


@dataclass(frozen=True)
class ResultSummary:
    target_id: str
    upvotes: int
    downvotes: int
    score: int
    total: int
    percent_up: float
    percent_down: float


def percentage(part: int, total: int) -> float:
    if not total:
        return 0.0
    return round(part / total * 100, 2)


class ResultAggregator:
    def __init__(self, store: VoteStore) -> None:
        self.store = store

    def compute_results(self, target_id: Any) -> ResultSummary:
        target = normalize_target_id(target_id)
        counts = Counter(self.store.vote_types_for_target(target))
        upvotes = counts[VOTE_UP]
        downvotes = counts[VOTE_DOWN]
        total = upvotes + downvotes
        return ResultSummary(
            target_id=target,
            upvotes=upvotes,
            downvotes=downvotes,
            score=upvotes - downvotes,
            total=total,
            percent_up=percentage(upvotes, total),
            percent_down=percentage(downvotes, total),
        )


__all__ = ["ResultAggregator", "ResultSummary", "percentage"]
