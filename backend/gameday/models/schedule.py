from sqlalchemy import Column, String, Integer, UniqueConstraint, Index
from gameday.domain import Game
from .base import Base, TimestampMixin

class Schedule(Base, TimestampMixin):
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    year = Column(Integer, nullable=False)
    week = Column(Integer, nullable=False)
    home_team = Column(String(3), nullable=False)
    away_team = Column(String(3), nullable=False)

    # Raw ESPN kickoff text, e.g. "Sun, September 7th at 4:05 PM EDT"
    time = Column(String(100), nullable=True)
    broadcast = Column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint('year', 'week', 'home_team', 'away_team', name='uq_schedules_year_week_teams'),
        Index('ix_schedules_year_week', 'year', 'week'),
    )

    def to_game(self) -> Game:
        return Game(
            id=str(self.id),
            year=int(self.year),
            week=int(self.week),
            home_team=str(self.home_team),
            away_team=str(self.away_team),
            time_display=str(self.time) if self.time else "",
            broadcast=str(self.broadcast) if self.broadcast else None,
            status="scheduled",  # the feed carries no live state
        )

    def __repr__(self):
        return f"<Schedule(year={self.year}, week={self.week}, {self.away_team}@{self.home_team})>"
