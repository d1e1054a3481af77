from __future__ import annotations

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(60), nullable=True)
    avatar_path = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Country(Base):
    __tablename__ = "countries"

    id = Column(Integer, primary_key=True, autoincrement=False)
    short_name = Column(String(10), nullable=True)
    name = Column(String(100), nullable=False)
    logo = Column(String(255), nullable=True)


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=False)
    full_name = Column(String(120), nullable=False)
    name_display = Column(String(80), nullable=False)
    role = Column(String(30), nullable=True)
    tier = Column(String(20), nullable=True)
    country_id = Column(Integer, ForeignKey("countries.id"), nullable=True)
    image = Column(String(255), nullable=True)


class Card(Base):
    __tablename__ = "cards"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    card_type = Column(String(30), nullable=True)
    edition = Column(String(30), nullable=True)
    minted_on = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Match(Base):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=False)
    match_date = Column(Date, nullable=False, index=True)
    format = Column(String(20), nullable=False)
    competition_id = Column(Integer, nullable=True)
    competition = Column(String(120), nullable=True)
    match_name = Column(String(160), nullable=False)
    venue = Column(String(120), nullable=True)


class League(Base):
    __tablename__ = "leagues"

    id = Column(Integer, primary_key=True)
    name = Column(String(80), nullable=False)
    description = Column(Text, nullable=True)
    visibility = Column(String(10), nullable=False, server_default="PRIVATE")
    owner_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    max_users = Column(Integer, nullable=False)
    start_ts = Column(DateTime(timezone=True), nullable=False)
    end_ts = Column(DateTime(timezone=True), nullable=False)
    allowed_formats = Column(JSON, nullable=True)
    rules = Column(JSON, nullable=True)
    update_policy = Column(String(20), nullable=False, server_default="LOCK_PER_GAMEWEEK")
    join_code = Column(String(10), nullable=True, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("max_users >= 2", name="ck_leagues_max_users"),
        CheckConstraint("start_ts <= end_ts", name="ck_leagues_window"),
    )


class LeagueMember(Base):
    __tablename__ = "league_members"

    league_id = Column(Integer, ForeignKey("leagues.id"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    status = Column(String(10), nullable=False, server_default="ACTIVE")
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    removed_at = Column(DateTime(timezone=True), nullable=True)
    removed_note = Column(Text, nullable=True)


class LeagueCard(Base):
    __tablename__ = "league_cards"

    id = Column(Integer, primary_key=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    source_kind = Column(String(10), nullable=False, server_default="OWNED")
    backing_card_id = Column(Integer, ForeignKey("cards.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("league_id", "backing_card_id"),)


class LeagueTeam(Base):
    __tablename__ = "league_teams"

    id = Column(Integer, primary_key=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    captain_league_card_id = Column(Integer, ForeignKey("league_cards.id"), nullable=True)
    vice_captain_league_card_id = Column(Integer, ForeignKey("league_cards.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("league_id", "user_id"),
        CheckConstraint(
            "captain_league_card_id IS NULL OR vice_captain_league_card_id IS NULL "
            "OR captain_league_card_id <> vice_captain_league_card_id",
            name="ck_league_teams_distinct_captains",
        ),
    )


class LeagueTeamCard(Base):
    __tablename__ = "league_team_cards"

    submission_id = Column(Integer, ForeignKey("league_teams.id"), primary_key=True)
    league_card_id = Column(Integer, ForeignKey("league_cards.id"), primary_key=True)
    selected_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class LeagueScore(Base):
    __tablename__ = "league_scores"

    id = Column(Integer, primary_key=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    total_points = Column(Numeric(10, 2), nullable=False, server_default="0")
    rank = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("league_id", "user_id"),)


class ActionLog(Base):
    __tablename__ = "action_logs"

    id = Column(Integer, primary_key=True)
    category = Column(String(30), nullable=False)
    action = Column(String(50), nullable=False)
    actor_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=True)
    target_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    details = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
