import itertools
import threading
from collections import Counter
from datetime import datetime
from typing import Dict, List, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.core.settings import get_settings
from app.db import build_engine, get_db, init_db
from app.db_models import User
from app.errors import DuplicateVote, StoreUnavailable
from app.main import app
from app.security.tokens import create_access_token
from app.voting.store import BallotRecord, VoteRecord


# ---------------- In-memory stores ----------------
class InMemoryVoteStore:
    """Fake store keyed by (user_id, target_id), mirroring the unique constraint."""

    def __init__(self) -> None:
        self.rows: Dict[Tuple[int, str], VoteRecord] = {}
        self.fail = False
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _check(self) -> None:
        if self.fail:
            raise StoreUnavailable("store offline")

    def upsert_vote(self, user_id, target_id, vote_type):
        self._check()
        with self._lock:
            key = (user_id, target_id)
            existing = self.rows.get(key)
            if existing is None:
                record = VoteRecord(next(self._ids), user_id, target_id, vote_type, datetime(2024, 1, 1))
            else:
                record = VoteRecord(existing.id, user_id, target_id, vote_type, existing.created_at)
            self.rows[key] = record
            return record, existing is None

    def votes_for_user(self, user_id):
        self._check()
        return sorted((r for r in self.rows.values() if r.user_id == user_id), key=lambda r: r.id)

    def vote_types_for_target(self, target_id):
        self._check()
        return [r.vote_type for r in self.rows.values() if r.target_id == target_id]


class InMemoryBallotStore:
    def __init__(self, kandidat_ids=(1, 2, 3)) -> None:
        self.kandidat_ids = set(kandidat_ids)
        self.rows: Dict[Tuple[int, str], BallotRecord] = {}
        self._ids = itertools.count(1)

    def kandidat_exists(self, kandidat_id):
        return kandidat_id in self.kandidat_ids

    def insert_ballot(self, user_id, pemilihan, kandidat_id):
        key = (user_id, pemilihan)
        if key in self.rows:
            raise DuplicateVote()
        record = BallotRecord(next(self._ids), user_id, pemilihan, kandidat_id, datetime(2024, 1, 1))
        self.rows[key] = record
        return record

    def delete_ballot(self, user_id, pemilihan):
        return self.rows.pop((user_id, pemilihan), None) is not None

    def ballots_for_user(self, user_id):
        return [r for r in self.rows.values() if r.user_id == user_id]

    def count_by_kandidat(self, pemilihan):
        return dict(Counter(r.kandidat_id for r in self.rows.values() if r.pemilihan == pemilihan))

    def list_all(self) -> List[dict]:
        return []


@pytest.fixture
def vote_store():
    return InMemoryVoteStore()


@pytest.fixture
def ballot_store():
    return InMemoryBallotStore()


# ---------------- Database + HTTP client ----------------
@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'portal.sqlite3'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def _reset_limits():
    limiter = getattr(app.state, "limiter", None)
    if limiter is not None:
        limiter.reset()
    yield


@pytest.fixture
def client(session_factory):
    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(user_id: int, role: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


@pytest.fixture
def make_user(session_factory):
    """Insert a user directly and return (id, auth headers); no password login needed."""
    counter = itertools.count(1)

    def _make(role: str = "voter", nama: str = None):
        n = next(counter)
        with session_factory() as db:
            user = User(
                nisn_nip=f"{role[0].upper()}{n:05d}",
                nama=nama or f"{role} {n}",
                password_hash="!",
                role=role,
            )
            db.add(user)
            db.commit()
            return user.id, bearer(user.id, role)

    return _make


@pytest.fixture
def admin_headers(make_user):
    return make_user("admin")[1]


@pytest.fixture
def settings_env(monkeypatch):
    """Set env vars and reload cached settings; the cache is cleared again afterwards."""

    def _set(**values):
        for key, value in values.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()

    yield _set
    monkeypatch.undo()
    get_settings.cache_clear()
