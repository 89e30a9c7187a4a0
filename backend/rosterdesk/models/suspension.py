from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rosterdesk.models.base import Base


class Suspension(Base):
    __tablename__ = "suspensions"
    __table_args__ = (
        CheckConstraint("suspended_games >= 1", name="suspended_games_positive"),
        CheckConstraint("served_games >= 0", name="served_games_non_negative"),
        CheckConstraint("served_games <= suspended_games", name="served_within_suspended"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    player_id: Mapped[int] = mapped_column(ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)
    # Team the player was playing for when the infraction happened.
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)

    suspension_type: Mapped[str] = mapped_column(String(40), nullable=False)
    suspended_games: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    served_games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Game the suspension was issued in; it never earns service from that game.
    game_id: Mapped[int | None] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"), nullable=True, index=True)
    game_event_id: Mapped[int | None] = mapped_column(
        ForeignKey("game_events.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    player: Mapped["Player"] = relationship("Player", back_populates="suspensions")
    team: Mapped["Team"] = relationship("Team")
    game_event: Mapped["GameEvent | None"] = relationship("GameEvent", back_populates="suspensions")

    @property
    def remaining_games(self) -> int:
        return max(self.suspended_games - self.served_games, 0)

    @property
    def is_active(self) -> bool:
        return self.served_games < self.suspended_games


class SuspensionAccrual(Base):
    """One row per (suspension, game) pair already credited as served."""

    __tablename__ = "suspension_accruals"
    __table_args__ = (
        UniqueConstraint("suspension_id", "game_id", name="uq_suspension_accruals_suspension_game"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    suspension_id: Mapped[int] = mapped_column(
        ForeignKey("suspensions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True)

    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
