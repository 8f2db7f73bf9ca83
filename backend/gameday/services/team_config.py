import json
import logging
from functools import lru_cache
from typing import Dict, Iterable, List, Set
from gameday.config import settings
from gameday.domain import TeamConfig

logger = logging.getLogger(__name__)

# Mapping from Sleeper team abbreviations to ESPN team abbreviations
TEAM_ABBREVIATION_MAP = {
    'WAS': 'WSH',  # Washington Commanders
}

SLEEPER_ABBREVIATION_MAP = {espn: sleeper for sleeper, espn in TEAM_ABBREVIATION_MAP.items()}

TeamConfigMap = Dict[str, TeamConfig]

def normalize_team(team: str) -> str:
    """Uppercase a team code and map Sleeper spellings onto ESPN's"""
    team = (team or '').strip().upper()
    return TEAM_ABBREVIATION_MAP.get(team, team)

def to_sleeper_team(team: str) -> str:
    """Map a team code onto the spelling Sleeper uses for player rows"""
    team = normalize_team(team)
    return SLEEPER_ABBREVIATION_MAP.get(team, team)

def parse_team_list(teams: str) -> List[str]:
    """Parse a comma separated query value such as "dal, phi,WAS" """
    if not teams:
        return []
    return [normalize_team(t) for t in teams.split(',') if t.strip()]

def build_team_configs(raw: Dict[str, Dict]) -> TeamConfigMap:
    """Turn the JSON document (keyed by abbreviation) into TeamConfig values"""
    configs = {}
    for abbreviation, entry in raw.items():
        abbreviation = abbreviation.upper()
        configs[abbreviation] = TeamConfig(
            abbreviation=abbreviation,
            display_name=entry.get('displayName', abbreviation),
            espn_team_id=entry.get('espnTeamId'),
            is_local_team=bool(entry.get('isLocalTeam', False)),
            in_state_team=bool(entry.get('inStateTeams', False)),
            division_rivals=frozenset(r.upper() for r in entry.get('divisionRivals', [])),
        )

    local = [c.abbreviation for c in configs.values() if c.is_local_team]
    if len(local) != 1:
        logger.warning(f"Expected exactly one local team in team config, found {len(local)}: {local}")

    return configs

def load_team_configs(path: str) -> TeamConfigMap:
    """Load team configuration from a JSON file"""
    with open(path, encoding='utf-8') as f:
        raw = json.load(f)
    configs = build_team_configs(raw)
    logger.info(f"Loaded configuration for {len(configs)} teams from {path}")
    return configs

@lru_cache(maxsize=1)
def get_team_configs() -> TeamConfigMap:
    """Dependency returning the process-wide team configuration, loaded once"""
    return load_team_configs(settings.team_config_path)

def local_teams(configs: TeamConfigMap) -> Set[str]:
    return {abbr for abbr, config in configs.items() if config.is_local_team}

def is_divisional(configs: TeamConfigMap, home_team: str, away_team: str) -> bool:
    home = configs.get(home_team)
    away = configs.get(away_team)
    return bool(
        (home and away_team in home.division_rivals) or
        (away and home_team in away.division_rivals)
    )

def any_flag(configs: TeamConfigMap, teams: Iterable[str], attr: str) -> bool:
    return any(getattr(configs[t], attr) for t in teams if t in configs)
