from sqlalchemy import Column, String, Integer, Float, UniqueConstraint
from gameday.domain import TeamRecord
from .base import Base, TimestampMixin

class Team(Base, TimestampMixin):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    espn_team_id = Column(Integer, nullable=False, index=True)
    name = Column(String(50), nullable=False)
    abbreviation = Column(String(3), nullable=False, index=True)
    season = Column(Integer, nullable=False)

    # Season-to-date record
    wins = Column(Integer, default=0, nullable=False)
    losses = Column(Integer, default=0, nullable=False)
    ties = Column(Integer, default=0, nullable=False)
    win_percentage = Column(Float, default=0.0, nullable=False)

    logo_url = Column(String(200), nullable=True)

    __table_args__ = (
        UniqueConstraint('abbreviation', 'season', name='uq_teams_abbreviation_season'),
    )

    def to_record(self) -> TeamRecord:
        return TeamRecord(
            abbreviation=self.abbreviation,
            season=self.season,
            wins=self.wins or 0,
            losses=self.losses or 0,
            ties=self.ties or 0,
            win_percentage=self.win_percentage or 0.0,
        )

    def __repr__(self):
        return f"<Team(abbreviation={self.abbreviation}, season={self.season}, {self.wins}-{self.losses}-{self.ties})>"
