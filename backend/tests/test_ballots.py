import pytest

from app.errors import DuplicateVote, InvalidInput, NotFound
from app.voting import CategoryBallot


# ---------------- Ballot core ----------------
def test_ballot_is_binding_until_revoked(ballot_store):
    ballot = CategoryBallot(ballot_store)
    ballot.cast(1, "osis", 1)

    with pytest.raises(DuplicateVote):
        ballot.cast(1, "osis", 2)
    assert ballot.tally("osis") == {1: 1}

    ballot.revoke(1, "osis")
    ballot.cast(1, "osis", 2)
    assert ballot.tally("osis") == {2: 1}


def test_ballot_rejects_bad_input(ballot_store):
    ballot = CategoryBallot(ballot_store)
    with pytest.raises(InvalidInput):
        ballot.cast(1, "", 1)
    with pytest.raises(InvalidInput):
        ballot.cast(1, "osis", 0)
    with pytest.raises(InvalidInput):
        ballot.cast(1, "osis", 99)
    assert ballot_store.rows == {}


def test_revoke_without_ballot_is_not_found(ballot_store):
    with pytest.raises(NotFound):
        CategoryBallot(ballot_store).revoke(1, "osis")


# ---------------- HTTP ----------------
@pytest.fixture
def kandidat_ids(client, admin_headers):
    ids = []
    for nomor, nama in enumerate(["Rina", "Bagas", "Dewi"], start=1):
        r = client.post(
            "/api/kandidat",
            json={"nama_kandidat": nama, "nomor_kandidat": nomor, "calon": "ketua"},
            headers=admin_headers,
        )
        assert r.status_code == 201
        ids.append(r.json()["id"])
    return ids


def test_cast_and_duplicate(client, make_user, kandidat_ids):
    _, headers = make_user("voter")
    first = client.post("/api/pemilihan", json={"pemilihan": "osis", "kandidat_id": kandidat_ids[0]}, headers=headers)
    assert first.status_code == 201
    assert first.json()["pemilihan"] == "osis"

    again = client.post("/api/pemilihan", json={"pemilihan": "osis", "kandidat_id": kandidat_ids[1]}, headers=headers)
    assert again.status_code == 409
    assert again.json()["error"] == "duplicate_vote"

    other = client.post("/api/pemilihan", json={"pemilihan": "mpk", "kandidat_id": kandidat_ids[1]}, headers=headers)
    assert other.status_code == 201

    mine = client.get("/api/pemilihan/me", headers=headers).json()
    assert sorted(b["pemilihan"] for b in mine) == ["mpk", "osis"]


def test_revoke_then_vote_again(client, make_user, kandidat_ids):
    _, headers = make_user("voter")
    body = {"pemilihan": "osis", "kandidat_id": kandidat_ids[0]}
    assert client.post("/api/pemilihan", json=body, headers=headers).status_code == 201

    assert client.delete("/api/pemilihan", params={"pemilihan": "osis"}, headers=headers).status_code == 204
    assert client.delete("/api/pemilihan", params={"pemilihan": "osis"}, headers=headers).status_code == 404

    body["kandidat_id"] = kandidat_ids[2]
    assert client.post("/api/pemilihan", json=body, headers=headers).status_code == 201


def test_tally_counts_only_candidates_with_ballots(client, make_user, kandidat_ids):
    for kandidat_id in (kandidat_ids[0], kandidat_ids[0], kandidat_ids[1]):
        _, headers = make_user("voter")
        r = client.post("/api/pemilihan", json={"pemilihan": "osis", "kandidat_id": kandidat_id}, headers=headers)
        assert r.status_code == 201

    r = client.get("/api/pemilihan/hasil", params={"pemilihan": "osis"})
    assert r.status_code == 200
    assert r.json() == {str(kandidat_ids[0]): 2, str(kandidat_ids[1]): 1}

    assert client.get("/api/pemilihan/hasil", params={"pemilihan": "mpk"}).json() == {}
    assert client.get("/api/pemilihan/hasil").status_code == 400


def test_unknown_kandidat_is_invalid(client, make_user, kandidat_ids):
    _, headers = make_user("voter")
    r = client.post("/api/pemilihan", json={"pemilihan": "osis", "kandidat_id": 9999}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_input"


def test_admin_listing_joins_names(client, make_user, admin_headers, kandidat_ids):
    user_id, headers = make_user("voter", nama="Siti Aminah")
    client.post("/api/pemilihan", json={"pemilihan": "osis", "kandidat_id": kandidat_ids[1]}, headers=headers)

    r = client.get("/api/admin/pemilihan", headers=admin_headers)
    assert r.status_code == 200
    rows = r.json()
    assert len(rows) == 1
    assert rows[0]["user_id"] == user_id
    assert rows[0]["nama_user"] == "Siti Aminah"
    assert rows[0]["nama_kandidat"] == "Bagas"
    assert rows[0]["pemilihan"] == "osis"


def test_deleting_a_kandidat_removes_its_ballots(client, make_user, admin_headers, kandidat_ids):
    _, headers = make_user("voter")
    body = {"pemilihan": "osis", "kandidat_id": kandidat_ids[0]}
    assert client.post("/api/pemilihan", json=body, headers=headers).status_code == 201

    assert client.delete(f"/api/kandidat/{kandidat_ids[0]}", headers=admin_headers).status_code == 204

    assert client.get("/api/pemilihan/hasil", params={"pemilihan": "osis"}).json() == {}
    assert client.get("/api/pemilihan/me", headers=headers).json() == []
    assert client.get("/api/admin/pemilihan", headers=admin_headers).json() == []

    # the category is free again
    body["kandidat_id"] = kandidat_ids[1]
    assert client.post("/api/pemilihan", json=body, headers=headers).status_code == 201
