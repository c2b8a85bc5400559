def _vote(client, headers, target_id, vote_type):
    return client.post("/api/vote", json={"target_id": target_id, "vote_type": vote_type}, headers=headers)


def _results(client, target_id):
    r = client.get("/api/vote/results", params={"target_id": target_id})
    assert r.status_code == 200
    return r.json()


def test_first_vote_creates_then_recast_overwrites(client, make_user):
    user_id, headers = make_user("voter")

    created = _vote(client, headers, "berita-12", 1)
    assert created.status_code == 201
    assert created.json()["user_id"] == user_id
    assert created.json()["vote_type"] == 1

    updated = _vote(client, headers, "berita-12", -1)
    assert updated.status_code == 200
    assert updated.json()["id"] == created.json()["id"]
    assert updated.json()["vote_type"] == -1

    mine = client.get("/api/vote/me", headers=headers).json()
    assert [(v["target_id"], v["vote_type"]) for v in mine] == [("berita-12", -1)]


def test_two_voters_two_targets(client, make_user):
    _, alice = make_user("voter")
    _, bob = make_user("voter")

    assert _vote(client, alice, "A", 1).status_code == 201
    assert _vote(client, bob, "A", 1).status_code == 201
    assert _vote(client, alice, "B", -1).status_code == 201
    assert _results(client, "A") == {
        "target_id": "A",
        "upvotes": 2,
        "downvotes": 0,
        "score": 2,
        "total": 2,
        "percent_up": 100.0,
        "percent_down": 0.0,
    }

    assert _vote(client, bob, "A", -1).status_code == 200
    a = _results(client, "A")
    assert (a["upvotes"], a["downvotes"], a["score"], a["percent_up"]) == (1, 1, 0, 50.0)

    b = _results(client, "B")
    assert (b["upvotes"], b["downvotes"], b["score"], b["percent_down"]) == (0, 1, -1, 100.0)


def test_numeric_target_and_string_polarity_are_normalized(client, make_user):
    _, headers = make_user("voter")
    r = _vote(client, headers, 42, "-1")
    assert r.status_code == 201
    assert r.json()["target_id"] == "42"
    assert r.json()["vote_type"] == -1


def test_invalid_vote_type_is_rejected_without_writing(client, make_user):
    _, headers = make_user("voter")
    for bad in ("up", 0, None, True):
        r = _vote(client, headers, "A", bad)
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_input"
    assert _results(client, "A")["total"] == 0
    assert client.get("/api/vote/me", headers=headers).json() == []


def test_missing_target_is_rejected(client, make_user):
    _, headers = make_user("voter")
    r = client.post("/api/vote", json={"vote_type": 1}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_input"


def test_unknown_fields_are_rejected(client, make_user):
    _, headers = make_user("voter")
    r = client.post("/api/vote", json={"target_id": "A", "vote_type": 1, "user_id": 99}, headers=headers)
    assert r.status_code == 400


def test_vote_requires_authentication(client):
    r = _vote(client, {}, "A", 1)
    assert r.status_code == 401


def test_results_require_target_id(client):
    r = client.get("/api/vote/results")
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_input"


def test_results_for_unvoted_target_are_zero(client):
    assert _results(client, "sepi") == {
        "target_id": "sepi",
        "upvotes": 0,
        "downvotes": 0,
        "score": 0,
        "total": 0,
        "percent_up": 0.0,
        "percent_down": 0.0,
    }
