"""Shared fixtures: in-memory database, team configuration and an API client."""

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gameday.database import get_db
from gameday.domain import Game
from gameday.main import app
from gameday.models import Base
from gameday.services.ranking_service import clear_prediction_cache
from gameday.services.sleeper_service import clear_nfl_state_cache
from gameday.services.team_config import build_team_configs


@pytest.fixture(autouse=True)
def _clear_caches():
    clear_prediction_cache()
    clear_nfl_state_cache()
    yield
    clear_prediction_cache()
    clear_nfl_state_cache()
    app.dependency_overrides.clear()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def team_configs():
    """A small configuration with DAL as the local team."""
    return build_team_configs({
        "DAL": {"displayName": "Dallas Cowboys", "espnTeamId": 6, "isLocalTeam": True,
                "inStateTeams": True, "divisionRivals": ["NYG", "PHI", "WSH"]},
        "HOU": {"displayName": "Houston Texans", "espnTeamId": 34, "isLocalTeam": False,
                "inStateTeams": True, "divisionRivals": ["IND", "JAX", "TEN"]},
        "PHI": {"displayName": "Philadelphia Eagles", "espnTeamId": 21, "isLocalTeam": False,
                "inStateTeams": False, "divisionRivals": ["DAL", "NYG", "WSH"]},
        "NYG": {"displayName": "New York Giants", "espnTeamId": 19, "isLocalTeam": False,
                "inStateTeams": False, "divisionRivals": ["DAL", "PHI", "WSH"]},
        "WSH": {"displayName": "Washington Commanders", "espnTeamId": 28, "isLocalTeam": False,
                "inStateTeams": False, "divisionRivals": ["DAL", "NYG", "PHI"]},
        "KC": {"displayName": "Kansas City Chiefs", "espnTeamId": 12, "isLocalTeam": False,
               "inStateTeams": False, "divisionRivals": ["DEN", "LAC", "LV"]},
        "BUF": {"displayName": "Buffalo Bills", "espnTeamId": 2, "isLocalTeam": False,
                "inStateTeams": False, "divisionRivals": ["MIA", "NE", "NYJ"]},
    })


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    return TestClient(app)


def make_game(
    away: str,
    home: str,
    time_display: str,
    broadcast: str = None,
    game_id: str = None,
    year: int = 2025,
    week: int = 1,
) -> Game:
    return Game(
        id=game_id or f"{away}-{home}",
        year=year,
        week=week,
        home_team=home,
        away_team=away,
        time_display=time_display,
        broadcast=broadcast,
    )


def json_transport(handler):
    """MockTransport whose handler returns (status, body) tuples."""
    def _handle(request: httpx.Request) -> httpx.Response:
        status, body = handler(request)
        return httpx.Response(status, json=body)
    return httpx.MockTransport(_handle)
