from typing import List

from fastapi import APIRouter, Depends

from app.models import BallotAdminOut
from app.routers.ballots import get_category_ballot
from app.security import CurrentUser, require_role
from app.voting import CategoryBallot

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/pemilihan", response_model=List[BallotAdminOut])
def list_admin_ballots(
    user: CurrentUser = Depends(require_role("admin")),
    ballot: CategoryBallot = Depends(get_category_ballot),
):
    return [BallotAdminOut(**row) for row in ballot.list_all()]
