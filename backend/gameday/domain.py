"""
Plain data types shared by the broadcast engine, the ranking client and the API layer.

These are request-scoped values built from database rows or request bodies; the
broadcast engine never touches the session directly.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

@dataclass(frozen=True)
class Game:
    """One scheduled contest as the schedule feed reports it"""
    id: str
    year: int
    week: int
    home_team: str
    away_team: str
    time_display: str
    broadcast: Optional[str] = None
    status: str = "scheduled"

    @property
    def matchup(self) -> str:
        return f"{self.away_team} @ {self.home_team}"

    @property
    def model_game_id(self) -> str:
        """Identifier the ranking model uses, e.g. 2025W01-DAL@PHI"""
        return f"{self.year}W{self.week:02d}-{self.away_team}@{self.home_team}"

    def involves(self, teams) -> bool:
        return self.home_team in teams or self.away_team in teams

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "year": self.year,
            "week": self.week,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "time_display": self.time_display,
            "broadcast": self.broadcast,
            "matchup": self.matchup,
            "status": self.status,
        }

@dataclass(frozen=True)
class TeamRecord:
    abbreviation: str
    season: int
    wins: int = 0
    losses: int = 0
    ties: int = 0
    win_percentage: float = 0.0

@dataclass(frozen=True)
class TeamConfig:
    """Static per-team settings driving local-team rules and ranking features"""
    abbreviation: str
    display_name: str = ""
    espn_team_id: Optional[int] = None
    is_local_team: bool = False
    in_state_team: bool = False
    division_rivals: FrozenSet[str] = frozenset()

@dataclass(frozen=True)
class GamePrediction:
    game_id: str
    probability: float
    score: float
    probability_all: float

@dataclass
class GroupPrediction:
    """Ranking endpoint answer for one bucket"""
    top_game_id: Optional[str]
    top_probability: Optional[float]
    predictions: Dict[str, GamePrediction] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
    local_enforced: bool = False

@dataclass
class RankedGame:
    """A game as it is shown inside a bucket"""
    game: Game
    prediction: Optional[GamePrediction] = None
    is_top_pick: bool = False
    local_override: bool = False

    def to_dict(self) -> Dict:
        data = self.game.to_dict()
        data["is_top_pick"] = self.is_top_pick
        data["local_override"] = self.local_override
        data["prediction"] = None
        if self.prediction:
            data["prediction"] = {
                "game_id": self.prediction.game_id,
                "probability": self.prediction.probability,
                "score": self.prediction.score,
                "probability_all": self.prediction.probability_all,
            }
        return data

@dataclass
class Bucket:
    key: str
    games: List[RankedGame]
    is_tbd: bool = False
    ranking_error: Optional[str] = None
    local_enforced: bool = False

    @property
    def display_name(self) -> str:
        if len(self.games) == 1:
            return self.key
        return f"{self.key} ({len(self.games)})"

    def to_dict(self) -> Dict:
        return {
            "key": self.key,
            "display_name": self.display_name,
            "is_tbd": self.is_tbd,
            "ranking_error": self.ranking_error,
            "local_enforced": self.local_enforced,
            "games": [g.to_dict() for g in self.games],
        }
