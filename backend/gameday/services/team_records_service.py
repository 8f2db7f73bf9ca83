from typing import Dict, List, Optional, Any, Tuple
import asyncio
import logging
from sqlalchemy.orm import Session
from gameday.domain import TeamRecord
from gameday.integrations.espn_api import ESPNAPIClient
from gameday.models.teams import Team
from gameday.services.team_config import TeamConfigMap

logger = logging.getLogger(__name__)

def compute_win_percentage(wins: int, losses: int, ties: int) -> float:
    """(wins + 0.5 * ties) / games played, rounded to 3 places; 0 before any games"""
    total = wins + losses + ties
    if total <= 0:
        return 0.0
    return round((wins + 0.5 * ties) / total, 3)

def parse_record_summary(summary: str) -> Tuple[int, int, int]:
    """Parse ESPN's "W-L" or "W-L-T" summary"""
    parts = []
    for part in (summary or '').split('-')[:3]:
        try:
            parts.append(int(part.strip()))
        except ValueError:
            parts.append(0)
    parts += [0] * (3 - len(parts))
    return parts[0], parts[1], parts[2]

def overall_summary(data: Dict[str, Any]) -> Optional[str]:
    for item in data.get('items') or []:
        if item.get('name') == 'overall':
            return item.get('summary')
    return None

class TeamRecordsService:
    """Service for team rows and their season-to-date records"""

    def __init__(self, db: Session, client: Optional[ESPNAPIClient] = None):
        self.db = db
        self._client = client

    @property
    def client(self) -> ESPNAPIClient:
        if self._client is None:
            self._client = ESPNAPIClient()
        return self._client

    def seed_teams(self, team_configs: TeamConfigMap, season: int) -> int:
        """Create a team row per configured team for a season (existing rows are kept)"""
        created = 0
        for abbreviation, config in team_configs.items():
            if config.espn_team_id is None:
                logger.warning(f"No ESPN team id configured for {abbreviation}, not seeding")
                continue

            exists = self.db.query(Team).filter(
                Team.abbreviation == abbreviation,
                Team.season == season
            ).first()
            if exists:
                continue

            self.db.add(Team(
                espn_team_id=config.espn_team_id,
                name=config.display_name or abbreviation,
                abbreviation=abbreviation,
                season=season
            ))
            created += 1

        self.db.commit()
        logger.info(f"Seeded {created} teams for season {season}")
        return created

    async def sync_records(self, season: int, record_season: Optional[int] = None, delay_seconds: float = 0.1) -> Dict[str, Any]:
        """Refresh wins/losses/ties for every team row of a season from ESPN

        record_season selects which ESPN season the record is read from and
        defaults to season.
        """
        record_season = record_season or season
        teams = self.db.query(Team).filter(Team.season == season).all()
        if not teams:
            raise ValueError(f"No teams found for season {season}. Run team seeding first.")

        success_count = 0
        errors = []
        for team in teams:
            try:
                data = await self.client.get_team_record(record_season, team.espn_team_id)
                summary = overall_summary(data)
                if summary is None:
                    raise ValueError("Overall record not found")

                wins, losses, ties = parse_record_summary(summary)
                team.wins = wins
                team.losses = losses
                team.ties = ties
                team.win_percentage = compute_win_percentage(wins, losses, ties)
                self.db.commit()

                logger.info(f"{team.abbreviation}: {summary} ({team.win_percentage * 100:.1f}%)")
                success_count += 1
            except Exception as e:
                logger.error(f"Failed to sync record for {team.abbreviation}: {e}")
                self.db.rollback()
                errors.append(f"{team.abbreviation}: {e}")

            if delay_seconds:
                await asyncio.sleep(delay_seconds)

        return {
            'total_teams': len(teams),
            'success_count': success_count,
            'error_count': len(errors),
            'errors': errors
        }

    def get_records(self, teams: Optional[List[str]] = None, season: Optional[int] = None) -> List[TeamRecord]:
        """Team records, optionally filtered by abbreviation and season, ordered by abbreviation"""
        query = self.db.query(Team)
        if teams:
            query = query.filter(Team.abbreviation.in_(teams))
        if season:
            query = query.filter(Team.season == season)
        return [team.to_record() for team in query.order_by(Team.abbreviation.asc()).all()]

    async def close(self):
        if self._client is not None:
            await self._client.close()
