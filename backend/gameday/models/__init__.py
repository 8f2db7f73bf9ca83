from .base import Base
from .schedule import Schedule
from .teams import Team
from .players import Player

__all__ = [
    "Base",
    "Schedule",
    "Team",
    "Player",
]
