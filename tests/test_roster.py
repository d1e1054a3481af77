from datetime import date

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from app.db.base import Base
from app.models import LeagueCard, LeagueTeam, LeagueTeamCard, User
from app.services import roster
from app.services.inventory import grant_league_card
from app.services.leagues import create_league as create_league_service
from app.services.leagues import get_league, join_public

from conftest import auth, create_league, give_cards, make_user, register, seed_players


def _member_with_cards(client, db, count=3, **fields):
    owner, _ = register(client, "owner@example.com")
    player, player_id = register(client, "player@example.com")
    created = create_league(client, owner, **fields)
    client.post("/leagues/join", headers=auth(player), json={"code": created["join_code"]})
    give_cards(db, player_id, seed_players(db, count))
    cards = client.get(f"/leagues/{created['league_id']}/team/cards", headers=auth(player)).json()
    return created["league_id"], player, [card["league_card_id"] for card in cards]


def _select(client, token, league_id, card_ids):
    return client.put(
        f"/leagues/{league_id}/team/cards", headers=auth(token), json={"league_card_ids": card_ids}
    )


def _captains(client, token, league_id, captain, vice):
    return client.put(
        f"/leagues/{league_id}/team/captains",
        headers=auth(token),
        json={"captain_league_card_id": captain, "vice_captain_league_card_id": vice},
    )


def test_ensure_team_is_idempotent(client, db):
    """Creating the team twice returns the same submission."""
    owner, _ = register(client, "owner@example.com")
    league_id = create_league(client, owner)["league_id"]

    first = client.post(f"/leagues/{league_id}/team", headers=auth(owner)).json()
    second = client.post(f"/leagues/{league_id}/team", headers=auth(owner)).json()
    assert first["submission_id"] == second["submission_id"]
    assert first["league_card_ids"] == []
    assert db.execute(select(func.count()).select_from(LeagueTeam)).scalar_one() == 1


def test_ensure_team_race_returns_existing_row(db, monkeypatch):
    """A losing insert falls back to the row the winner created."""
    owner = make_user(db, "owner@example.com")
    league = create_league_service(
        db, owner, name="Race", start_date=date(2026, 1, 1), end_date=date(2026, 1, 30)
    )
    existing = roster.ensure_team(db, league.id, owner)

    real_find = roster._find_team
    calls = []

    def stale_find(session, league_id, user_id):
        calls.append(league_id)
        if len(calls) == 1:
            return None
        return real_find(session, league_id, user_id)

    monkeypatch.setattr(roster, "_find_team", stale_find)
    team = roster.ensure_team(db, league.id, owner)

    assert team.id == existing.id
    assert len(calls) == 2
    assert db.execute(select(func.count()).select_from(LeagueTeam)).scalar_one() == 1


def test_concurrent_first_visits_share_minted_cards(tmp_path, monkeypatch):
    """A caller that loses the minting race reuses the winner's cards and team."""
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)

    with Session() as setup:
        owner = make_user(setup, "owner@example.com")
        league = create_league_service(
            setup, owner, name="Race", start_date=date(2026, 1, 1), end_date=date(2026, 1, 30)
        )
        give_cards(setup, owner.id, seed_players(setup, 2))
        league_id, owner_id = league.id, owner.id

    first, second = Session(), Session()
    real_sync = roster.sync_league_cards
    winner = {}

    def sync_then_lose_race(session, league_id, user_id):
        added = real_sync(session, league_id, user_id)
        if session is first and not winner:
            winner["team"] = roster.ensure_team(second, league_id, second.get(User, user_id))
        return added

    monkeypatch.setattr(roster, "sync_league_cards", sync_then_lose_race)
    try:
        team = roster.ensure_team(first, league_id, first.get(User, owner_id))

        assert team.id == winner["team"].id
        assert first.execute(select(func.count()).select_from(LeagueCard)).scalar_one() == 2
        assert first.execute(select(func.count()).select_from(LeagueTeam)).scalar_one() == 1
    finally:
        first.close()
        second.close()
        engine.dispose()


def test_ensure_team_requires_membership(client):
    """Outsiders cannot create a team."""
    owner, _ = register(client, "owner@example.com")
    outsider, _ = register(client, "outsider@example.com")
    league_id = create_league(client, owner, visibility="PUBLIC")["league_id"]

    response = client.post(f"/leagues/{league_id}/team", headers=auth(outsider))
    assert response.status_code == 403
    assert response.json()["detail"] == "not_league_member"


def test_get_team_before_creation(client):
    """Reading a team that was never created is a 404."""
    owner, _ = register(client, "owner@example.com")
    league_id = create_league(client, owner)["league_id"]
    response = client.get(f"/leagues/{league_id}/team", headers=auth(owner))
    assert response.status_code == 404
    assert response.json()["detail"] == "team_not_found"


def test_eligible_cards_minted_once(client, db):
    """Owned cards become league cards once, sorted by display name."""
    league_id, player, card_ids = _member_with_cards(client, db)
    assert len(card_ids) == 3

    cards = client.get(f"/leagues/{league_id}/team/cards", headers=auth(player)).json()
    assert [card["league_card_id"] for card in cards] == card_ids
    assert [card["player_name_display"] for card in cards] == ["Player A", "Player B", "Player C"]
    assert all(card["source_kind"] == "OWNED" for card in cards)
    assert all(card["country_short_name"] == "IND" for card in cards)
    assert not any(card["is_selected"] for card in cards)
    assert db.execute(select(func.count()).select_from(LeagueCard)).scalar_one() == 3


def test_selection_flags_cards(client, db):
    """Selected cards are flagged with their selection time."""
    league_id, player, card_ids = _member_with_cards(client, db)
    response = _select(client, player, league_id, card_ids[:2])
    assert response.status_code == 200
    assert response.json()["league_card_ids"] == sorted(card_ids[:2])

    cards = client.get(f"/leagues/{league_id}/team/cards", headers=auth(player)).json()
    flags = {card["league_card_id"]: card["is_selected"] for card in cards}
    assert flags == {card_ids[0]: True, card_ids[1]: True, card_ids[2]: False}
    assert all(card["selected_at"] for card in cards if card["is_selected"])


def test_selection_keeps_selected_at_for_kept_cards(client, db):
    """Replacing the selection does not reset cards that stay."""
    league_id, player, card_ids = _member_with_cards(client, db)
    _select(client, player, league_id, card_ids[:2])
    before = {
        row.league_card_id: row.selected_at
        for row in db.execute(select(LeagueTeamCard)).scalars().all()
    }

    _select(client, player, league_id, card_ids[1:])
    db.expire_all()
    after = {
        row.league_card_id: row.selected_at
        for row in db.execute(select(LeagueTeamCard)).scalars().all()
    }
    assert set(after) == set(card_ids[1:])
    assert after[card_ids[1]] == before[card_ids[1]]


def test_selection_rejects_foreign_cards(client, db):
    """Cards of other users or leagues cannot be selected."""
    league_id, player, card_ids = _member_with_cards(client, db)
    response = _select(client, player, league_id, card_ids + [9999])
    assert response.status_code == 400
    assert response.json()["detail"] == ["cards_not_owned: 9999"]
    assert client.get(f"/leagues/{league_id}/team", headers=auth(player)).json()["league_card_ids"] == []


def test_selection_respects_team_size(client, db):
    """A league team size caps the selection."""
    league_id, player, card_ids = _member_with_cards(client, db, team_size=2)
    response = _select(client, player, league_id, card_ids)
    assert response.status_code == 400
    assert response.json()["detail"] == ["team_size_exceeded"]
    assert _select(client, player, league_id, card_ids[:2]).status_code == 200


def test_dropping_captain_clears_pointer(client, db):
    """Select A,B,C with captain A and vice B, then keep B,C: captain clears, vice stays."""
    league_id, player, (a, b, c) = _member_with_cards(client, db)
    _select(client, player, league_id, [a, b, c])
    assert _captains(client, player, league_id, a, b).status_code == 200

    team = _select(client, player, league_id, [b, c]).json()
    assert team["captain_league_card_id"] is None
    assert team["vice_captain_league_card_id"] == b
    assert a not in team["league_card_ids"]

    stored = client.get(f"/leagues/{league_id}/team", headers=auth(player)).json()
    assert stored["captain_league_card_id"] is None
    assert stored["vice_captain_league_card_id"] == b


def test_dropping_everything_clears_both(client, db):
    """An empty selection clears both pointers."""
    league_id, player, (a, b, _) = _member_with_cards(client, db)
    _select(client, player, league_id, [a, b])
    _captains(client, player, league_id, a, b)

    team = _select(client, player, league_id, []).json()
    assert team["captain_league_card_id"] is None
    assert team["vice_captain_league_card_id"] is None


def test_captain_equals_vice_leaves_team_unchanged(client, db):
    """Same card for both roles is refused without touching the team."""
    league_id, player, (a, b, _) = _member_with_cards(client, db)
    _select(client, player, league_id, [a, b])
    _captains(client, player, league_id, a, b)
    before = client.get(f"/leagues/{league_id}/team", headers=auth(player)).json()

    response = _captains(client, player, league_id, b, b)
    assert response.status_code == 400
    assert response.json()["detail"] == ["captain_and_vice_same_card"]

    after = client.get(f"/leagues/{league_id}/team", headers=auth(player)).json()
    assert after == before


def test_captains_must_be_selected(client, db):
    """Pointers outside the selection are refused together."""
    league_id, player, (a, b, c) = _member_with_cards(client, db)
    _select(client, player, league_id, [a])

    response = _captains(client, player, league_id, b, c)
    assert response.status_code == 400
    assert response.json()["detail"] == ["captain_not_in_selection", "vice_captain_not_in_selection"]


def test_captains_can_be_cleared(client, db):
    """Passing nulls clears both pointers."""
    league_id, player, (a, b, _) = _member_with_cards(client, db)
    _select(client, player, league_id, [a, b])
    _captains(client, player, league_id, a, b)

    team = _captains(client, player, league_id, None, None).json()
    assert team["captain_league_card_id"] is None
    assert team["vice_captain_league_card_id"] is None


def test_captains_without_team(client):
    """Captains need an existing team."""
    owner, _ = register(client, "owner@example.com")
    league_id = create_league(client, owner)["league_id"]
    response = _captains(client, owner, league_id, None, None)
    assert response.status_code == 404


def test_granted_cards_are_selectable(db):
    """Independent cards granted in a league count as owned there."""
    owner = make_user(db, "owner@example.com")
    member = make_user(db, "member@example.com")
    league = create_league_service(
        db, owner, name="Grants", start_date=date(2026, 1, 1), end_date=date(2026, 1, 30), visibility="PUBLIC"
    )
    join_public(db, member, league.id)
    player_ids = seed_players(db, 1)

    granted = grant_league_card(db, get_league(db, league.id), member.id, player_ids[0])
    assert granted.source_kind == "GRANT"
    assert granted.backing_card_id is None

    roster.ensure_team(db, league.id, member)
    team = roster.set_selection(db, league.id, member, [granted.id])
    assert roster.selected_card_ids(db, team.id) == [granted.id]
