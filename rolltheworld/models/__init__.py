from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .participant import Participant  # noqa: F401
from .draw import Draw, PopulationBound  # noqa: F401

__all__ = [
    "Base",
    "Participant",
    "Draw",
    "PopulationBound",
]
