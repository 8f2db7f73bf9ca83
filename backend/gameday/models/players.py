from sqlalchemy import Column, String, Integer, Boolean, JSON, Index
from .base import Base, TimestampMixin

class Player(Base, TimestampMixin):
    __tablename__ = "players"

    # Sleeper player id
    player_id = Column(String(50), primary_key=True)

    # Basic player info
    full_name = Column(String(100), index=True)
    first_name = Column(String(50))
    last_name = Column(String(50))
    position = Column(String(10), index=True)
    team = Column(String(10), index=True)

    # Physical attributes
    age = Column(Integer)
    height = Column(String(10))
    weight = Column(String(10))
    college = Column(String(100))
    years_exp = Column(Integer)

    # Status
    status = Column(String(50))
    active = Column(Boolean, default=False, index=True)
    fantasy_positions = Column(JSON)
    injury_status = Column(String(50))
    injury_body_part = Column(String(50))
    injury_notes = Column(String(200))

    # Depth chart
    depth_chart_position = Column(String(10))
    depth_chart_order = Column(Integer)
    search_rank = Column(Integer)

    # External system IDs
    espn_id = Column(String(50))
    yahoo_id = Column(String(50))
    rotowire_id = Column(String(50))
    stats_id = Column(String(50))
    fantasy_data_id = Column(String(50))

    __table_args__ = (
        Index('ix_players_team_position', 'team', 'position'),
    )

    def __repr__(self):
        return f"<Player(id={self.player_id}, name={self.full_name}, team={self.team})>"

    def to_dict(self):
        return {
            'player_id': self.player_id,
            'full_name': self.full_name,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'position': self.position,
            'team': self.team,
            'status': self.status,
            'active': bool(self.active),
            'fantasy_positions': self.fantasy_positions or [],
            'injury_status': self.injury_status,
            'depth_chart_position': self.depth_chart_position,
            'depth_chart_order': self.depth_chart_order,
            'search_rank': self.search_rank,
        }
