import os
from pydantic_settings import BaseSettings

DEFAULT_TEAM_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "data", "team_config.json")

class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./gameday.db"

    # Sleeper API (no key required)
    sleeper_api_base: str = "https://api.sleeper.app/v1"

    # ESPN public APIs
    espn_site_api_base: str = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"
    espn_core_api_base: str = "https://sports.core.api.espn.com/v2/sports/football/leagues/nfl"

    # Broadcast ranking model
    ranking_api_url: str = "https://broadcastmlmodel.onrender.com/predict_top"
    ranking_timeout_seconds: float = 20.0
    ranking_max_attempts: int = 3
    ranking_backoff_seconds: float = 0.5
    ranking_cache_ttl_seconds: int = 300

    # Team configuration (local team, division rivals, in-state teams)
    team_config_path: str = DEFAULT_TEAM_CONFIG_PATH

    # Broadcast board behaviour
    promote_single_game_groups: bool = False

    # Season Configuration
    default_season: str = "2025"
    regular_season_weeks: int = 18

    # Environment
    environment: str = "development"
    debug: bool = True

    class Config:
        env_file = ".env"

settings = Settings()
