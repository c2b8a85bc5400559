from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models import VoteOut, VoteRequest, VoteResults
from app.security import CurrentUser, get_current_user, require_role
from app.voting import ResultAggregator, SqlVoteStore, VoteLedger

router = APIRouter(prefix="/api/vote", tags=["vote"])


def get_vote_ledger(db: Session = Depends(get_db)) -> VoteLedger:
    return VoteLedger(SqlVoteStore(db))


def get_result_aggregator(db: Session = Depends(get_db)) -> ResultAggregator:
    return ResultAggregator(SqlVoteStore(db))


@router.post("", response_model=VoteOut, status_code=status.HTTP_201_CREATED)
def cast_vote(
    payload: VoteRequest,
    response: Response,
    user: CurrentUser = Depends(require_role("voter")),
    ledger: VoteLedger = Depends(get_vote_ledger),
):
    record, is_new = ledger.cast_vote(user.id, payload.target_id, payload.vote_type)
    if not is_new:
        response.status_code = status.HTTP_200_OK
    return VoteOut(**asdict(record))


@router.get("/me", response_model=List[VoteOut])
def my_votes(
    user: CurrentUser = Depends(get_current_user),
    ledger: VoteLedger = Depends(get_vote_ledger),
):
    return [VoteOut(**asdict(record)) for record in ledger.votes_for_user(user.id)]


@router.get("/results", response_model=VoteResults)
def vote_results(
    target_id: Optional[str] = Query(default=None),
    aggregator: ResultAggregator = Depends(get_result_aggregator),
):
    return VoteResults(**asdict(aggregator.compute_results(target_id)))
