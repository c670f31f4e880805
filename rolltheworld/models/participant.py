from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base
from .id_type import BIG_INT

if TYPE_CHECKING:
    from .draw import Draw


class Participant(Base):
    """A device-bound identity allowed to draw once per day.

    The identifier is opaque to this package: it is derived and hashed by the
    identity provider and only ever used as a key here.
    """

    __tablename__ = "participants"

    participant_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    """Opaque identity string."""

    created_at: Mapped[int] = mapped_column(BIG_INT, nullable=False)
    """Registration time in epoch milliseconds."""

    draws: Mapped[list["Draw"]] = relationship(back_populates="participant")

    def __init__(self, participant_id: str, created_at: int) -> None:
        self.participant_id = participant_id
        self.created_at = created_at

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Participant(participant_id={self.participant_id[:8]}...)>"

    @classmethod
    def get(cls, session: Session, participant_id: str) -> Optional["Participant"]:
        return session.get(cls, participant_id)
