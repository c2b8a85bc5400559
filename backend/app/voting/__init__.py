from app.voting.ballot import CategoryBallot
from app.voting.ledger import VoteLedger
from app.voting.results import ResultAggregator, ResultSummary
from app.voting.store import BallotRecord, SqlBallotStore, SqlVoteStore, VoteRecord

__all__ = [
    "BallotRecord",
    "CategoryBallot",
    "ResultAggregator",
    "ResultSummary",
    "SqlBallotStore",
    "SqlVoteStore",
    "VoteLedger",
    "VoteRecord",
]
