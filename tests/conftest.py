import os

os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.models import Card, Country, Player, User
from app.services.rate_limit import join_limiter

ADMIN_HEADERS = {"X-Admin-Token": get_settings().ADMIN_TOKEN}


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(engine)
    join_limiter.reset()
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, email: str, display_name: str | None = None) -> tuple[str, int]:
    payload = {"email": email, "password": "secret123"}
    if display_name:
        payload["display_name"] = display_name
    token = client.post("/auth/register", json=payload).json()["access_token"]
    user_id = client.get("/auth/me", headers=auth(token)).json()["id"]
    return token, user_id


def make_user(db, email: str, display_name: str | None = None) -> User:
    user = User(email=email, password_hash=get_password_hash("secret123"), display_name=display_name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def seed_players(db, count: int = 3, start_id: int = 100) -> list[int]:
    if not db.get(Country, 1):
        db.add(Country(id=1, short_name="IND", name="India"))
    ids = []
    for offset in range(count):
        player_id = start_id + offset
        name = f"Player {chr(ord('A') + offset)}"
        db.add(Player(id=player_id, full_name=name, name_display=name, role="BAT", country_id=1))
        ids.append(player_id)
    db.commit()
    return ids


def give_cards(db, user_id: int, player_ids: list[int]) -> list[int]:
    cards = [Card(user_id=user_id, player_id=player_id, card_type="BASE") for player_id in player_ids]
    db.add_all(cards)
    db.commit()
    return [card.id for card in cards]


def create_league(client: TestClient, token: str, **fields) -> dict:
    payload = {"name": "Weekend Cup", "start_date": "2026-01-01", "end_date": "2026-03-31"}
    payload.update(fields)
    response = client.post("/leagues", headers=auth(token), json=payload)
    assert response.status_code == 200, response.text
    return response.json()
