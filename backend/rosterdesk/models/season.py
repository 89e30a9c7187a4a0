from __future__ import annotations

from datetime import date

from sqlalchemy import CheckConstraint, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from rosterdesk.models.base import Base


class Season(Base):
    """A league season. Seasons of one organization never overlap, so
    season_start alone totally orders them."""

    __tablename__ = "seasons"
    __table_args__ = (
        CheckConstraint("season_end >= season_start", name="end_after_start"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(80), nullable=False)
    season_start: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    season_end: Mapped[date] = mapped_column(Date, nullable=False)
