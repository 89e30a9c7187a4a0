from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rosterdesk.models.base import Base

POSITIONS = ("forward", "defense", "goalie")


class Contract(Base):
    """A player's association with one team over a contiguous span of seasons.

    end_season_id is NULL while the contract is open (the player's current team).
    """

    __tablename__ = "contracts"
    __table_args__ = (
        UniqueConstraint("player_id", "team_id", "start_season_id", name="uq_contracts_player_team_start"),
        # At most one open contract per player.
        Index(
            "uq_contracts_one_open_per_player",
            "organization_id",
            "player_id",
            unique=True,
            postgresql_where=text("end_season_id IS NULL"),
            sqlite_where=text("end_season_id IS NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    player_id: Mapped[int] = mapped_column(ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)

    position: Mapped[str] = mapped_column(String(20), nullable=False)
    # Unique per team+season by convention only.
    jersey_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    start_season_id: Mapped[int] = mapped_column(ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False, index=True)
    end_season_id: Mapped[int | None] = mapped_column(
        ForeignKey("seasons.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    player: Mapped["Player"] = relationship("Player", back_populates="contracts")
    team: Mapped["Team"] = relationship("Team")
    start_season: Mapped["Season"] = relationship("Season", foreign_keys=[start_season_id])
    end_season: Mapped["Season | None"] = relationship("Season", foreign_keys=[end_season_id])

    @property
    def is_open(self) -> bool:
        return self.end_season_id is None
