"""HTTP boundary tests: authorization and status mapping."""

import pytest

from scoreboard.config import settings

# Matches the token the client fixture installs.
ADMIN = {"X-Admin-Token": "test-admin-token"}


def _as(username: str) -> dict[str, str]:
    return {"X-Auth-User": username}


def _register(client, username: str) -> None:
    response = client.post("/v1/users", json={"username": username}, headers=_as(username))
    assert response.status_code == 201


def _unlock(client, username: str, flag_key: str, points: int):
    return client.post(
        f"/v1/users/{username}/flags",
        json={"flag_key": flag_key, "points": points},
        headers=_as(username),
    )


def test_health(client):
    assert client.get("/health/live").json() == {"status": "alive"}


def test_register_and_read(client):
    _register(client, "alice")
    body = client.get("/v1/users/alice").json()
    assert body["username"] == "alice"
    assert body["total_score"] == 0
    assert body["has_claimed_prize"] is False
    assert body["flags_count"] == 0
    assert "credential_ref" not in body


def test_register_requires_matching_identity(client):
    assert client.post("/v1/users", json={"username": "alice"}).status_code == 401
    assert client.post("/v1/users", json={"username": "alice"}, headers=_as("bob")).status_code == 403


def test_register_conflict(client):
    _register(client, "alice")
    response = client.post("/v1/users", json={"username": "alice"}, headers=_as("alice"))
    assert response.status_code == 409


def test_unknown_user_is_404(client):
    assert client.get("/v1/users/ghost").status_code == 404
    assert client.get("/v1/users/ghost/flags").status_code == 404
    assert client.get("/v1/users/ghost/rank").status_code == 404


def test_unlock_flow(client):
    _register(client, "alice")

    created = _unlock(client, "alice", "flag1", 50)
    assert created.status_code == 201
    assert created.json()["status"] == "created"
    assert created.json()["total_score"] == 50
    assert created.json()["unlock"]["flag_key"] == "flag1"

    duplicate = _unlock(client, "alice", "flag1", 50)
    assert duplicate.status_code == 200
    assert duplicate.json()["status"] == "duplicate"
    assert duplicate.json()["total_score"] == 50

    _unlock(client, "alice", "flag2", 30)
    flags = client.get("/v1/users/alice/flags").json()
    assert flags["count"] == 2
    assert [f["flag_key"] for f in flags["items"]] == ["flag1", "flag2"]
    assert client.get("/v1/users/alice").json()["total_score"] == 80


def test_unlock_only_for_own_user(client):
    _register(client, "alice")
    response = client.post(
        "/v1/users/alice/flags",
        json={"flag_key": "flag1", "points": 50},
        headers=_as("mallory"),
    )
    assert response.status_code == 403
    assert client.get("/v1/users/alice").json()["total_score"] == 0


def test_unlock_validation(client):
    _register(client, "alice")
    assert _unlock(client, "alice", "", 10).status_code == 400
    assert _unlock(client, "alice", "flag1", -5).status_code == 400
    assert _unlock(client, "alice", "flag1", 2**63).status_code == 400
    assert client.get("/v1/users/alice").json()["total_score"] == 0


def test_unlock_unknown_user(client, monkeypatch):
    monkeypatch.setattr(settings, "AUTO_REGISTER_ON_UNLOCK", False)
    assert _unlock(client, "ghost", "flag1", 10).status_code == 404


def test_unlock_auto_register(client, monkeypatch):
    monkeypatch.setattr(settings, "AUTO_REGISTER_ON_UNLOCK", True)
    assert _unlock(client, "newbie", "flag1", 10).status_code == 201
    assert client.get("/v1/users/newbie").json()["total_score"] == 10


def test_rank_and_leaderboard(client):
    for username, points in [("alice", 80), ("bob", 80), ("charlie", 10)]:
        _register(client, username)
        _unlock(client, username, "flag1", points)

    assert client.get("/v1/users/charlie/rank").json() == {"username": "charlie", "rank": 3, "total_score": 10}
    assert client.get("/v1/users/alice/rank").json() == {"username": "alice", "rank": 1, "total_score": 80}

    board = client.get("/v1/leaderboard").json()
    assert board["count"] == 3
    assert [(i["username"], i["rank"]) for i in board["items"]] == [("alice", 1), ("bob", 1), ("charlie", 3)]
    assert board["items"][0]["flags_count"] == 1

    assert client.get("/v1/leaderboard", params={"limit": 1}).json()["count"] == 1


def test_claim_prize(client):
    _register(client, "alice")

    assert client.post("/v1/users/alice/claim").status_code == 401
    assert client.post("/v1/users/alice/claim", headers=_as("bob")).status_code == 403

    first = client.post("/v1/users/alice/claim", headers=_as("alice"))
    assert first.status_code == 200
    assert first.json() == {"username": "alice", "status": "accepted", "accepted": True}

    second = client.post("/v1/users/alice/claim", headers=_as("alice"))
    assert second.json() == {"username": "alice", "status": "already_claimed", "accepted": False}
    assert client.get("/v1/users/alice").json()["has_claimed_prize"] is True


def test_claim_unknown_user(client):
    assert client.post("/v1/users/ghost/claim", headers=_as("ghost")).status_code == 404


def test_admin_requires_token(client):
    _register(client, "alice")
    assert client.delete("/v1/admin/users/alice").status_code == 403
    assert client.delete("/v1/admin/users/alice", headers={"X-Admin-Token": "wrong"}).status_code == 403


def test_admin_remove_flag(client):
    _register(client, "alice")
    _unlock(client, "alice", "flag1", 50)
    _unlock(client, "alice", "flag2", 30)

    response = client.delete("/v1/admin/users/alice/flags/flag1", headers=ADMIN)
    assert response.json()["removed"] is True
    assert client.get("/v1/users/alice").json()["total_score"] == 30

    again = client.delete("/v1/admin/users/alice/flags/flag1", headers=ADMIN)
    assert again.json()["removed"] is False

    consistency = client.get("/v1/admin/users/alice/consistency", headers=ADMIN).json()
    assert consistency == {"username": "alice", "total_score": 30, "ledger_total": 30, "consistent": True}


def test_admin_delete_user_and_audit(client):
    _register(client, "alice")
    _unlock(client, "alice", "flag1", 50)
    client.post("/v1/users/alice/claim", headers=_as("alice"))

    assert client.delete("/v1/admin/users/alice", headers=ADMIN).status_code == 200
    assert client.get("/v1/users/alice").status_code == 404
    assert client.delete("/v1/admin/users/alice", headers=ADMIN).status_code == 404

    audit = client.get("/v1/admin/audit", params={"username": "alice"}, headers=ADMIN).json()
    actions = [item["action"] for item in audit["items"]]
    assert "claim_prize" in actions
    assert "delete_user" in actions
    deleted = next(item for item in audit["items"] if item["action"] == "delete_user")
    assert deleted["payload"]["before"]["total_score"] == 50


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("post", "/v1/users/alice/claim"),
        ("get", "/v1/leaderboard"),
        ("get", "/v1/users/alice/rank"),
        ("get", "/v1/users/alice/flags"),
        ("get", "/v1/users/alice"),
    ],
)
def test_store_unavailable_maps_to_503(tmp_path, method, path):
    import api_main
    from fastapi.testclient import TestClient
    from scoreboard.api.deps import get_db
    from scoreboard.db import make_engine, make_session_factory

    broken = make_engine(f"sqlite:///{tmp_path / 'missing' / 'scoreboard.db'}")
    factory = make_session_factory(broken)

    def _get_db():
        session = factory()
        try:
            yield session
        finally:
            session.close()

    api_main.app.dependency_overrides[get_db] = _get_db
    try:
        response = TestClient(api_main.app).request(method.upper(), path, headers=_as("alice"))
    finally:
        api_main.app.dependency_overrides.clear()
        broken.dispose()

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"
