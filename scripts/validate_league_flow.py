from __future__ import annotations

import os
import sys
import uuid
from pathlib import Path

from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
os.environ.setdefault("ENV_FILE", str(ROOT / ".env.test"))
os.environ.setdefault("APP_ENV", "test")
sys.path.append(str(ROOT))

from app.core.config import get_settings  # noqa: E402
from app.main import app  # noqa: E402

client = TestClient(app)
ADMIN_HEADERS = {"X-Admin-Token": get_settings().ADMIN_TOKEN}


def assert_status(label: str, response, expected: int = 200) -> dict:
    if response.status_code != expected:
        raise SystemExit(f"{label} failed: {response.status_code} {response.text}")
    return response.json()


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(email: str, password: str) -> str:
    response = client.post("/auth/register", json={"email": email, "password": password})
    return assert_status("register", response)["access_token"]


def me(token: str) -> dict:
    return assert_status("me", client.get("/auth/me", headers=auth(token)))


def create_league(token: str, name: str) -> dict:
    response = client.post(
        "/leagues",
        headers=auth(token),
        json={"name": name, "start_date": "2026-01-01", "end_date": "2026-12-31"},
    )
    return assert_status("create_league", response)


def join_league(token: str, code: str, expected: int = 200) -> dict:
    response = client.post("/leagues/join", headers=auth(token), json={"code": code})
    return assert_status("join_league", response, expected)


def seed_cards(user_id: int, suffix: str) -> None:
    base = int(suffix, 16) % 100000 * 10
    players = [
        {"id": base + offset, "full_name": f"QA Player {suffix} {offset}", "role": "BAT"}
        for offset in range(3)
    ]
    assert_status(
        "upsert_players",
        client.post("/admin/players", headers=ADMIN_HEADERS, json={"players": players}),
    )
    for player in players:
        assert_status(
            "award_card",
            client.post(
                "/admin/cards",
                headers=ADMIN_HEADERS,
                json={"user_id": user_id, "player_id": player["id"]},
            ),
        )


def main() -> None:
    suffix = uuid.uuid4().hex[:8]
    password = "Test1234!"
    token_a = register(f"qa_league_a_{suffix}@example.com", password)
    token_b = register(f"qa_league_b_{suffix}@example.com", password)
    user_b = me(token_b)

    league = create_league(token_a, f"QA League {suffix}")
    league_id = league["league_id"]
    join_league(token_b, league["join_code"])
    join_league(token_b, league["join_code"], expected=409)

    detail_b = assert_status("detail", client.get(f"/leagues/{league_id}", headers=auth(token_b)))
    if detail_b["join_code"] != league["join_code"]:
        raise SystemExit("member should see the join code")

    seed_cards(user_b["id"], suffix)
    cards = assert_status(
        "cards", client.get(f"/leagues/{league_id}/team/cards", headers=auth(token_b))
    )
    card_ids = [card["league_card_id"] for card in cards]
    if len(card_ids) != 3:
        raise SystemExit(f"expected 3 league cards, got {len(card_ids)}")

    assert_status(
        "selection",
        client.put(
            f"/leagues/{league_id}/team/cards",
            headers=auth(token_b),
            json={"league_card_ids": card_ids},
        ),
    )
    assert_status(
        "captains",
        client.put(
            f"/leagues/{league_id}/team/captains",
            headers=auth(token_b),
            json={"captain_league_card_id": card_ids[0], "vice_captain_league_card_id": card_ids[1]},
        ),
    )
    team = assert_status(
        "selection_drop_captain",
        client.put(
            f"/leagues/{league_id}/team/cards",
            headers=auth(token_b),
            json={"league_card_ids": card_ids[1:]},
        ),
    )
    if team["captain_league_card_id"] is not None:
        raise SystemExit("captain should be cleared with its card")

    assert_status(
        "kick",
        client.post(
            f"/leagues/{league_id}/members/{user_b['id']}/kick",
            headers=auth(token_a),
            json={"note": "qa"},
        ),
    )
    response = client.get(f"/leagues/{league_id}", headers=auth(token_b))
    assert_status("detail_after_kick", response, 403)

    assert_status(
        "delete",
        client.post(f"/leagues/{league_id}/delete", headers=auth(token_a), json={"note": "qa done"}),
    )
    assert_status("detail_after_delete", client.get(f"/leagues/{league_id}", headers=auth(token_a)), 404)

    print("OK: league create, join code, roster, captains, kick and delete")


if __name__ == "__main__":
    main()
