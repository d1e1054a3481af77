import re
from datetime import date

from sqlalchemy import func, select

from app.core.config import get_settings
from app.models import League, LeagueMember, Match
from app.services import leagues as registry

from conftest import auth, create_league, register


def test_create_private_league_returns_join_code(client):
    """A private league gets a 6 character code and its owner as only member."""
    token, user_id = register(client, "owner@example.com", "Owner")
    created = create_league(client, token)

    code = created["join_code"]
    assert re.fullmatch(r"[A-Z0-9]{6}", code)

    detail = client.get(f"/leagues/{created['league_id']}", headers=auth(token)).json()
    assert detail["owner_user_id"] == user_id
    assert detail["active_members_count"] == 1
    assert detail["max_users"] == 18
    assert detail["team_size"] == 11
    assert detail["join_code"] == code
    assert detail["is_owner"] is True
    assert detail["update_policy"] == "LOCK_PER_GAMEWEEK"


def test_create_league_window_bounds(client):
    """Dates map to the start and end of the day."""
    token, _ = register(client, "owner@example.com")
    created = create_league(client, token, start_date="2026-04-01", end_date="2026-04-01")
    detail = client.get(f"/leagues/{created['league_id']}", headers=auth(token)).json()
    assert detail["start_ts"].startswith("2026-04-01T00:00:00")
    assert detail["end_ts"].startswith("2026-04-01T23:59:59")


def test_create_public_league_has_no_code(client):
    """Public leagues are joined by id, never by code."""
    token, _ = register(client, "owner@example.com")
    created = create_league(client, token, visibility="public")
    assert created["join_code"] is None


def test_create_league_validation_errors(client):
    """Invalid settings are reported as a list of codes."""
    token, _ = register(client, "owner@example.com")
    response = client.post(
        "/leagues",
        headers=auth(token),
        json={
            "name": " ",
            "start_date": "2026-02-01",
            "end_date": "2026-01-01",
            "max_users": 1,
            "update_policy": "SOMETIMES",
        },
    )
    assert response.status_code == 400
    assert response.json()["detail"] == [
        "name_required",
        "max_users_too_small",
        "invalid_date_range",
        "invalid_update_policy",
    ]


def test_create_league_requires_auth(client):
    """Anonymous callers are rejected with 401."""
    response = client.post(
        "/leagues", json={"name": "x", "start_date": "2026-01-01", "end_date": "2026-01-02"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "missing_token"


def test_join_code_collision_retries(client, monkeypatch):
    """A taken code is regenerated instead of failing."""
    token, _ = register(client, "owner@example.com")
    first = create_league(client, token)
    codes = iter([first["join_code"], "ZZZ999"])
    monkeypatch.setattr(registry, "_generate_code", lambda length: next(codes))
    second = create_league(client, token, name="Second")
    assert second["join_code"] == "ZZZ999"


def test_join_code_taken_at_insert_retries(client, monkeypatch):
    """A code claimed after the lookup is regenerated when the insert collides."""
    token, _ = register(client, "owner@example.com")
    first = create_league(client, token)
    codes = iter([first["join_code"], "ZZZ998"])
    monkeypatch.setattr(registry, "_generate_code", lambda length: next(codes))
    monkeypatch.setattr(registry, "_code_taken", lambda db, code: False)

    second = create_league(client, token, name="Second")
    assert second["join_code"] == "ZZZ998"
    assert len(client.get("/leagues/mine", headers=auth(token)).json()) == 2


def test_join_by_code_normalizes_input(client):
    """Codes are trimmed and upper-cased before lookup."""
    owner, _ = register(client, "owner@example.com")
    guest, guest_id = register(client, "guest@example.com")
    created = create_league(client, owner)

    response = client.post(
        "/leagues/join", headers=auth(guest), json={"code": f"  {created['join_code'].lower()} "}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == guest_id
    assert body["status"] == "ACTIVE"


def test_join_by_unknown_code_creates_nothing(client, db):
    """An unknown code is a 404 and leaves memberships untouched."""
    owner, _ = register(client, "owner@example.com")
    guest, _ = register(client, "guest@example.com")
    create_league(client, owner)

    response = client.post("/leagues/join", headers=auth(guest), json={"code": "NOPE00"})
    assert response.status_code == 404
    assert response.json()["detail"] == "league_not_found"
    assert db.execute(select(func.count()).select_from(LeagueMember)).scalar_one() == 1


def test_join_twice_is_conflict(client):
    """An active member cannot join again."""
    owner, _ = register(client, "owner@example.com")
    guest, _ = register(client, "guest@example.com")
    created = create_league(client, owner)
    client.post("/leagues/join", headers=auth(guest), json={"code": created["join_code"]})

    response = client.post("/leagues/join", headers=auth(guest), json={"code": created["join_code"]})
    assert response.status_code == 409
    assert response.json()["detail"] == "already_member"


def test_private_league_capacity_scenario(client):
    """Owner counts as the first member; the third user hits the cap."""
    owner, _ = register(client, "owner@example.com")
    second, _ = register(client, "second@example.com")
    third, _ = register(client, "third@example.com")
    created = create_league(client, owner, max_users=2)
    league_id = created["league_id"]

    detail = client.get(f"/leagues/{league_id}", headers=auth(owner)).json()
    assert detail["active_members_count"] == 1

    response = client.post("/leagues/join", headers=auth(second), json={"code": created["join_code"]})
    assert response.status_code == 200
    detail = client.get(f"/leagues/{league_id}", headers=auth(owner)).json()
    assert detail["active_members_count"] == 2

    response = client.post("/leagues/join", headers=auth(third), json={"code": created["join_code"]})
    assert response.status_code == 409
    assert response.json()["detail"] == "league_full"


def test_join_public_capacity(client):
    """Public joins enforce the same cap."""
    owner, _ = register(client, "owner@example.com")
    second, _ = register(client, "second@example.com")
    third, _ = register(client, "third@example.com")
    league_id = create_league(client, owner, visibility="PUBLIC", max_users=2)["league_id"]

    assert client.post(f"/leagues/{league_id}/join", headers=auth(second)).status_code == 200
    response = client.post(f"/leagues/{league_id}/join", headers=auth(third))
    assert response.status_code == 409
    assert response.json()["detail"] == "league_full"


def test_join_public_rejects_private_league(client):
    """Private leagues look absent to the public join path."""
    owner, _ = register(client, "owner@example.com")
    guest, _ = register(client, "guest@example.com")
    league_id = create_league(client, owner)["league_id"]

    response = client.post(f"/leagues/{league_id}/join", headers=auth(guest))
    assert response.status_code == 404
    assert client.post("/leagues/999/join", headers=auth(guest)).status_code == 404


def test_join_by_code_rate_limited(client, monkeypatch):
    """Repeated code guesses are throttled per user."""
    monkeypatch.setattr(get_settings(), "JOIN_RATE_LIMIT_MAX", 2)
    guest, _ = register(client, "guest@example.com")
    for _ in range(2):
        response = client.post("/leagues/join", headers=auth(guest), json={"code": "GUESS1"})
        assert response.status_code == 404
    response = client.post("/leagues/join", headers=auth(guest), json={"code": "GUESS1"})
    assert response.status_code == 429
    assert response.json()["detail"] == "rate_limited"


def test_discover_and_mine(client):
    """Discovery lists public leagues only; mine lists active memberships."""
    owner, _ = register(client, "owner@example.com", "Owner")
    guest, _ = register(client, "guest@example.com")
    public_id = create_league(client, owner, name="Open", visibility="PUBLIC")["league_id"]
    private = create_league(client, owner, name="Closed")

    public = client.get("/leagues/public", headers=auth(guest)).json()
    assert [item["league_id"] for item in public] == [public_id]
    assert public[0]["owner_display_name"] == "Owner"
    assert public[0]["active_members_count"] == 1

    client.post("/leagues/join", headers=auth(guest), json={"code": private["join_code"]})
    mine = client.get("/leagues/mine", headers=auth(guest)).json()
    assert [item["league_id"] for item in mine] == [private["league_id"]]
    assert mine[0]["my_status"] == "ACTIVE"
    assert mine[0]["is_owner"] is False
    assert mine[0]["active_members_count"] == 2

    owner_mine = client.get("/leagues/mine", headers=auth(owner)).json()
    assert {item["league_id"] for item in owner_mine} == {public_id, private["league_id"]}


def test_private_detail_hidden_from_outsiders(client):
    """Outsiders cannot read a private league, so its code never leaks."""
    owner, _ = register(client, "owner@example.com")
    outsider, _ = register(client, "outsider@example.com")
    league_id = create_league(client, owner)["league_id"]

    response = client.get(f"/leagues/{league_id}", headers=auth(outsider))
    assert response.status_code == 403
    assert response.json()["detail"] == "not_league_member"


def test_public_detail_for_outsider(client):
    """Public leagues are readable by anyone signed in."""
    owner, _ = register(client, "owner@example.com")
    outsider, _ = register(client, "outsider@example.com")
    league_id = create_league(client, owner, visibility="PUBLIC")["league_id"]

    detail = client.get(f"/leagues/{league_id}", headers=auth(outsider)).json()
    assert detail["is_member"] is False
    assert detail["join_code"] is None


def test_join_code_predicate():
    """Only active members of a private league may see the code."""
    private = League(visibility="PRIVATE", join_code="ABC123")
    public = League(visibility="PUBLIC", join_code=None)
    active = LeagueMember(status="ACTIVE")
    removed = LeagueMember(status="REMOVED")

    assert registry.can_view_join_code(private, active) is True
    assert registry.can_view_join_code(private, removed) is False
    assert registry.can_view_join_code(private, None) is False
    assert registry.can_view_join_code(public, active) is False


def test_leave_league(client):
    """A member can leave and later rejoin with the same row."""
    owner, _ = register(client, "owner@example.com")
    guest, guest_id = register(client, "guest@example.com")
    created = create_league(client, owner)
    league_id = created["league_id"]
    client.post("/leagues/join", headers=auth(guest), json={"code": created["join_code"]})

    response = client.post(f"/leagues/{league_id}/leave", headers=auth(guest))
    assert response.status_code == 200
    assert response.json()["status"] == "LEFT"
    assert client.get("/leagues/mine", headers=auth(guest)).json() == []

    response = client.post("/leagues/join", headers=auth(guest), json={"code": created["join_code"]})
    assert response.status_code == 200
    assert response.json()["user_id"] == guest_id
    assert response.json()["status"] == "ACTIVE"


def test_owner_cannot_leave(client):
    """The owner deletes the league instead of leaving it."""
    owner, _ = register(client, "owner@example.com")
    league_id = create_league(client, owner)["league_id"]
    response = client.post(f"/leagues/{league_id}/leave", headers=auth(owner))
    assert response.status_code == 400
    assert response.json()["detail"] == ["owner_cannot_leave"]


def test_league_matches_filtered(client, db):
    """Matches are limited to the window, formats and competitions of the league."""
    db.add_all(
        [
            Match(id=1, match_date=date.fromisoformat("2026-01-05"), format="T20", competition_id=7, match_name="A v B"),
            Match(id=2, match_date=date.fromisoformat("2026-01-06"), format="ODI", competition_id=7, match_name="C v D"),
            Match(id=3, match_date=date.fromisoformat("2026-01-07"), format="T20", competition_id=8, match_name="E v F"),
            Match(id=4, match_date=date.fromisoformat("2026-05-01"), format="T20", competition_id=7, match_name="G v H"),
        ]
    )
    db.commit()
    owner, _ = register(client, "owner@example.com")
    league_id = create_league(
        client, owner, allowed_formats=["t20"], competition_ids=[7]
    )["league_id"]

    matches = client.get(f"/leagues/{league_id}/matches", headers=auth(owner)).json()
    assert [match["match_id"] for match in matches] == [1]