"""init league schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=60), nullable=True),
        sa.Column("avatar_path", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "countries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("short_name", sa.String(length=10), nullable=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("logo", sa.String(length=255), nullable=True),
    )

    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("full_name", sa.String(length=120), nullable=False),
        sa.Column("name_display", sa.String(length=80), nullable=False),
        sa.Column("role", sa.String(length=30), nullable=True),
        sa.Column("tier", sa.String(length=20), nullable=True),
        sa.Column("country_id", sa.Integer(), sa.ForeignKey("countries.id"), nullable=True),
        sa.Column("image", sa.String(length=255), nullable=True),
    )

    op.create_table(
        "cards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id"), nullable=False),
        sa.Column("card_type", sa.String(length=30), nullable=True),
        sa.Column("edition", sa.String(length=30), nullable=True),
        sa.Column("minted_on", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_cards_user_id", "cards", ["user_id"])

    op.create_table(
        "matches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("match_date", sa.Date(), nullable=False),
        sa.Column("format", sa.String(length=20), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=True),
        sa.Column("competition", sa.String(length=120), nullable=True),
        sa.Column("match_name", sa.String(length=160), nullable=False),
        sa.Column("venue", sa.String(length=120), nullable=True),
    )
    op.create_index("ix_matches_match_date", "matches", ["match_date"])

    op.create_table(
        "leagues",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("visibility", sa.String(length=10), server_default="PRIVATE", nullable=False),
        sa.Column("owner_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("max_users", sa.Integer(), nullable=False),
        sa.Column("start_ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("allowed_formats", sa.JSON(), nullable=True),
        sa.Column("rules", sa.JSON(), nullable=True),
        sa.Column("update_policy", sa.String(length=20), server_default="LOCK_PER_GAMEWEEK", nullable=False),
        sa.Column("join_code", sa.String(length=10), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("max_users >= 2", name="ck_leagues_max_users"),
        sa.CheckConstraint("start_ts <= end_ts", name="ck_leagues_window"),
    )
    op.create_index("ix_leagues_join_code", "leagues", ["join_code"], unique=True)

    op.create_table(
        "league_members",
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("leagues.id"), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("status", sa.String(length=10), server_default="ACTIVE", nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("removed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("removed_note", sa.Text(), nullable=True),
    )

    op.create_table(
        "league_cards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("leagues.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id"), nullable=False),
        sa.Column("source_kind", sa.String(length=10), server_default="OWNED", nullable=False),
        sa.Column("backing_card_id", sa.Integer(), sa.ForeignKey("cards.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("league_id", "backing_card_id"),
    )
    op.create_index("ix_league_cards_league_id", "league_cards", ["league_id"])

    op.create_table(
        "league_teams",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("leagues.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("captain_league_card_id", sa.Integer(), sa.ForeignKey("league_cards.id"), nullable=True),
        sa.Column("vice_captain_league_card_id", sa.Integer(), sa.ForeignKey("league_cards.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("league_id", "user_id"),
        sa.CheckConstraint(
            "captain_league_card_id IS NULL OR vice_captain_league_card_id IS NULL "
            "OR captain_league_card_id <> vice_captain_league_card_id",
            name="ck_league_teams_distinct_captains",
        ),
    )

    op.create_table(
        "league_team_cards",
        sa.Column("submission_id", sa.Integer(), sa.ForeignKey("league_teams.id"), primary_key=True),
        sa.Column("league_card_id", sa.Integer(), sa.ForeignKey("league_cards.id"), primary_key=True),
        sa.Column("selected_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "league_scores",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("leagues.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("total_points", sa.Numeric(10, 2), server_default="0", nullable=False),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("league_id", "user_id"),
    )
    op.create_index("ix_league_scores_league_id", "league_scores", ["league_id"])

    op.create_table(
        "action_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("category", sa.String(length=30), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("leagues.id"), nullable=True),
        sa.Column("target_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("action_logs")
    op.drop_index("ix_league_scores_league_id", table_name="league_scores")
    op.drop_table("league_scores")
    op.drop_table("league_team_cards")
    op.drop_table("league_teams")
    op.drop_index("ix_league_cards_league_id", table_name="league_cards")
    op.drop_table("league_cards")
    op.drop_table("league_members")
    op.drop_index("ix_leagues_join_code", table_name="leagues")
    op.drop_table("leagues")
    op.drop_index("ix_matches_match_date", table_name="matches")
    op.drop_table("matches")
    op.drop_index("ix_cards_user_id", table_name="cards")
    op.drop_table("cards")
    op.drop_table("players")
    op.drop_table("countries")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
