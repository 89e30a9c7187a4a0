"""initial roster schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("first_name", sa.String(length=80), nullable=False),
        sa.Column("last_name", sa.String(length=80), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("nationality", sa.String(length=80), nullable=True),
        sa.Column("photo_url", sa.String(length=500), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_players_organization_id", "players", ["organization_id"])
    op.create_index("ix_players_last_name", "players", ["last_name"])

    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("short_name", sa.String(length=20), nullable=False),
        sa.Column("city", sa.String(length=80), nullable=True),
        sa.Column("logo_url", sa.String(length=500), nullable=True),
        _created_at(),
        sa.UniqueConstraint("organization_id", "short_name", name="uq_teams_org_short_name"),
    )
    op.create_index("ix_teams_organization_id", "teams", ["organization_id"])
    op.create_index("ix_teams_name", "teams", ["name"])

    op.create_table(
        "seasons",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("season_start", sa.Date(), nullable=False),
        sa.Column("season_end", sa.Date(), nullable=False),
        sa.CheckConstraint("season_end >= season_start", name="ck_seasons_end_after_start"),
    )
    op.create_index("ix_seasons_organization_id", "seasons", ["organization_id"])
    op.create_index("ix_seasons_season_start", "seasons", ["season_start"])

    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("season_id", sa.Integer(), sa.ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False),
        sa.Column("home_team_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("away_team_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="scheduled"),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_games_organization_id", "games", ["organization_id"])
    op.create_index("ix_games_season_id", "games", ["season_id"])
    op.create_index("ix_games_home_team_id", "games", ["home_team_id"])
    op.create_index("ix_games_away_team_id", "games", ["away_team_id"])
    op.create_index("ix_games_status", "games", ["status"])

    op.create_table(
        "game_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("game_id", sa.Integer(), sa.ForeignKey("games.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_type", sa.String(length=20), nullable=False),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("period", sa.Integer(), nullable=False),
        sa.Column("time_minutes", sa.Integer(), nullable=False),
        sa.Column("time_seconds", sa.Integer(), nullable=False),
        sa.Column("penalty_player_id", sa.Integer(), sa.ForeignKey("players.id", ondelete="SET NULL"), nullable=True),
        sa.Column("penalty_minutes", sa.Integer(), nullable=True),
        sa.Column("penalty_description", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_game_events_organization_id", "game_events", ["organization_id"])
    op.create_index("ix_game_events_game_id", "game_events", ["game_id"])

    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id", ondelete="CASCADE"), nullable=False),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.String(length=20), nullable=False),
        sa.Column("jersey_number", sa.Integer(), nullable=True),
        sa.Column("start_season_id", sa.Integer(), sa.ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False),
        sa.Column("end_season_id", sa.Integer(), sa.ForeignKey("seasons.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("player_id", "team_id", "start_season_id", name="uq_contracts_player_team_start"),
    )
    op.create_index("ix_contracts_organization_id", "contracts", ["organization_id"])
    op.create_index("ix_contracts_player_id", "contracts", ["player_id"])
    op.create_index("ix_contracts_team_id", "contracts", ["team_id"])
    op.create_index("ix_contracts_start_season_id", "contracts", ["start_season_id"])
    op.create_index("ix_contracts_end_season_id", "contracts", ["end_season_id"])
    # At most one open contract per player.
    op.create_index(
        "uq_contracts_one_open_per_player",
        "contracts",
        ["organization_id", "player_id"],
        unique=True,
        postgresql_where=sa.text("end_season_id IS NULL"),
        sqlite_where=sa.text("end_season_id IS NULL"),
    )

    op.create_table(
        "suspensions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id", ondelete="CASCADE"), nullable=False),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("suspension_type", sa.String(length=40), nullable=False),
        sa.Column("suspended_games", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("served_games", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("game_id", sa.Integer(), sa.ForeignKey("games.id", ondelete="CASCADE"), nullable=True),
        sa.Column(
            "game_event_id", sa.Integer(), sa.ForeignKey("game_events.id", ondelete="SET NULL"), nullable=True
        ),
        _created_at(),
        sa.CheckConstraint("suspended_games >= 1", name="ck_suspensions_suspended_games_positive"),
        sa.CheckConstraint("served_games >= 0", name="ck_suspensions_served_games_non_negative"),
        sa.CheckConstraint("served_games <= suspended_games", name="ck_suspensions_served_within_suspended"),
    )
    op.create_index("ix_suspensions_organization_id", "suspensions", ["organization_id"])
    op.create_index("ix_suspensions_player_id", "suspensions", ["player_id"])
    op.create_index("ix_suspensions_team_id", "suspensions", ["team_id"])
    op.create_index("ix_suspensions_game_id", "suspensions", ["game_id"])
    op.create_index("ix_suspensions_game_event_id", "suspensions", ["game_event_id"])

    op.create_table(
        "suspension_accruals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column(
            "suspension_id", sa.Integer(), sa.ForeignKey("suspensions.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("game_id", sa.Integer(), sa.ForeignKey("games.id", ondelete="CASCADE"), nullable=False),
        sa.Column("applied_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("suspension_id", "game_id", name="uq_suspension_accruals_suspension_game"),
    )
    op.create_index("ix_suspension_accruals_organization_id", "suspension_accruals", ["organization_id"])
    op.create_index("ix_suspension_accruals_suspension_id", "suspension_accruals", ["suspension_id"])
    op.create_index("ix_suspension_accruals_game_id", "suspension_accruals", ["game_id"])


def downgrade() -> None:
    op.drop_table("suspension_accruals")
    op.drop_table("suspensions")
    op.drop_index("uq_contracts_one_open_per_player", table_name="contracts")
    op.drop_table("contracts")
    op.drop_table("game_events")
    op.drop_table("games")
    op.drop_table("seasons")
    op.drop_table("teams")
    op.drop_table("players")
