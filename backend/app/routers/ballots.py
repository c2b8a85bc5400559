from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models import BallotOut, BallotRequest
from app.security import CurrentUser, get_current_user, require_role
from app.voting import CategoryBallot, SqlBallotStore

router = APIRouter(prefix="/api/pemilihan", tags=["pemilihan"])


def get_category_ballot(db: Session = Depends(get_db)) -> CategoryBallot:
    return CategoryBallot(SqlBallotStore(db))


@router.post("", response_model=BallotOut, status_code=status.HTTP_201_CREATED)
def cast_ballot(
    payload: BallotRequest,
    user: CurrentUser = Depends(require_role("voter")),
    ballot: CategoryBallot = Depends(get_category_ballot),
):
    record = ballot.cast(user.id, payload.pemilihan, payload.kandidat_id)
    return BallotOut(**asdict(record))


@router.get("/me", response_model=List[BallotOut])
def my_ballots(
    user: CurrentUser = Depends(get_current_user),
    ballot: CategoryBallot = Depends(get_category_ballot),
):
    return [BallotOut(**asdict(record)) for record in ballot.ballots_for_user(user.id)]


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def revoke_ballot(
    pemilihan: Optional[str] = Query(default=None),
    user: CurrentUser = Depends(get_current_user),
    ballot: CategoryBallot = Depends(get_category_ballot),
) -> Response:
    ballot.revoke(user.id, pemilihan)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/hasil", response_model=Dict[str, int])
def ballot_results(
    pemilihan: Optional[str] = Query(default=None),
    ballot: CategoryBallot = Depends(get_category_ballot),
):
    return {str(kandidat_id): count for kandidat_id, count in ballot.tally(pemilihan).items()}
