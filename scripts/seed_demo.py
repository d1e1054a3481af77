from __future__ import annotations

import argparse
from datetime import date, timedelta
from pathlib import Path
import sys

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from app.core.config import get_settings
from app.db.session import SessionLocal
from app.models import Country, Match, Player

COUNTRIES = [
    (1, "IND", "India"),
    (2, "AUS", "Australia"),
    (3, "ENG", "England"),
]
ROLES = ["BAT", "BOWL", "AR", "WK"]
FORMATS = ["T20", "ODI", "TEST"]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed a small catalog for local testing")
    parser.add_argument("--players-per-country", type=int, default=12)
    parser.add_argument("--matches", type=int, default=10)
    parser.add_argument("--start", type=date.fromisoformat, default=date.today())
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = get_settings()
    with SessionLocal() as db:
        created_players = 0
        for country_id, short_name, name in COUNTRIES:
            if not db.get(Country, country_id):
                db.add(Country(id=country_id, short_name=short_name, name=name))
            for index in range(args.players_per_country):
                player_id = country_id * 1000 + index
                if db.get(Player, player_id):
                    continue
                full_name = f"{name} Player {index + 1}"
                db.add(
                    Player(
                        id=player_id,
                        full_name=full_name,
                        name_display=full_name,
                        role=ROLES[index % len(ROLES)],
                        tier="A" if index < 3 else "B",
                        country_id=country_id,
                    )
                )
                created_players += 1

        created_matches = 0
        for index in range(args.matches):
            match_id = 900000 + index
            if db.get(Match, match_id):
                continue
            home = COUNTRIES[index % len(COUNTRIES)]
            away = COUNTRIES[(index + 1) % len(COUNTRIES)]
            db.add(
                Match(
                    id=match_id,
                    match_date=args.start + timedelta(days=index * 3),
                    format=FORMATS[index % len(FORMATS)],
                    competition_id=1,
                    competition="Demo Series",
                    match_name=f"{home[2]} vs {away[2]}",
                )
            )
            created_matches += 1

        db.commit()
        print(
            f"[seed_demo] env={settings.APP_ENV} created_players={created_players} "
            f"created_matches={created_matches}"
        )


if __name__ == "__main__":
    main()
