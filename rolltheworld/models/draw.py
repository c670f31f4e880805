"""Database models for daily draws and their population bounds."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base
from .id_type import BIG_INT

if TYPE_CHECKING:
    from .participant import Participant


class PopulationBound(Base):
    """Inclusive upper bound of the draw range for one day."""

    __tablename__ = "population_bounds"

    day_key: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    """Day encoded as ``YYYYMMDD``."""

    population: Mapped[int] = mapped_column(BIG_INT, nullable=False)
    """Largest value a draw may take on ``day_key``."""

    __table_args__ = (CheckConstraint("population > 0", name="population_positive"),)

    def __init__(self, day_key: int, population: int) -> None:
        self.day_key = day_key
        self.population = population

    @classmethod
    def for_day(cls, session: Session, day_key: int) -> Optional[int]:
        """Return the stored bound for ``day_key`` or ``None``."""

        return session.scalar(select(cls.population).where(cls.day_key == day_key))


class Draw(Base):
    """One participant's sampled value for one day.

    ``(participant_id, day_key)`` is the primary key, so the database itself
    refuses a second draw for the same identity on the same day. Rows are
    written once and never updated.
    """

    __tablename__ = "draws"

    participant_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("participants.participant_id"),
        primary_key=True,
    )
    day_key: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    value: Mapped[int] = mapped_column(BIG_INT, nullable=False)
    """Sampled value in ``[1, population]``."""

    created_at: Mapped[int] = mapped_column(BIG_INT, nullable=False)
    """Insertion time in epoch milliseconds."""

    participant: Mapped["Participant"] = relationship(back_populates="draws")

    __table_args__ = (
        CheckConstraint("value > 0", name="value_positive"),
        Index("idx_draws_day_value", "day_key", "value"),
    )

    def __init__(
        self,
        participant_id: str,
        day_key: int,
        value: int,
        created_at: int,
    ) -> None:
        self.participant_id = participant_id
        self.day_key = day_key
        self.value = value
        self.created_at = created_at

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Draw(participant_id={pid}..., day_key={day}, value={value})>".format(
            pid=self.participant_id[:8],
            day=self.day_key,
            value=self.value,
        )
