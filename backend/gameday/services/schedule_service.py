from typing import Dict, List, Optional, Any
import asyncio
import logging
from sqlalchemy import or_
from sqlalchemy.orm import Session
from gameday.config import settings
from gameday.domain import Game
from gameday.integrations.espn_api import ESPNAPIClient
from gameday.models.schedule import Schedule

logger = logging.getLogger(__name__)

def parse_scoreboard_event(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Pull home/away, kickoff text and network out of an ESPN scoreboard event

    Returns None for events that do not have exactly two competitors.
    """
    competitions = event.get('competitions') or [{}]
    competition = competitions[0] or {}
    competitors = competition.get('competitors') or []
    if len(competitors) != 2:
        return None

    home_team = None
    away_team = None
    for comp in competitors:
        abbreviation = (comp.get('team') or {}).get('abbreviation')
        if comp.get('homeAway') == 'home':
            home_team = abbreviation
        else:
            away_team = abbreviation

    if not home_team or not away_team:
        return None

    status_type = (competition.get('status') or {}).get('type') or {}
    broadcasts = competition.get('broadcasts') or [{}]
    names = (broadcasts[0] or {}).get('names') or [None]

    return {
        'home_team': home_team.upper(),
        'away_team': away_team.upper(),
        'time': status_type.get('detail') or event.get('date'),
        'broadcast': names[0],
    }

class ScheduleService:
    """Service for syncing and reading the NFL schedule"""

    def __init__(self, db: Session, client: Optional[ESPNAPIClient] = None):
        self.db = db
        self._client = client

    @property
    def client(self) -> ESPNAPIClient:
        if self._client is None:
            self._client = ESPNAPIClient()
        return self._client

    async def sync_week(self, year: int, week: int) -> Dict[str, int]:
        """Sync schedule data for a specific week from ESPN API to database"""
        data = await self.client.get_scoreboard(year, week)
        events = data.get('events') or []
        logger.info(f"Fetched {len(events)} ESPN events for {year} week {week}")

        synced_count = 0
        skipped_count = 0
        try:
            for event in events:
                row = parse_scoreboard_event(event)
                if row is None:
                    logger.warning(f"Skipping malformed ESPN event {event.get('id')} in week {week}")
                    skipped_count += 1
                    continue

                self._upsert_schedule(year, week, row)
                synced_count += 1

            self.db.commit()
        except Exception as e:
            logger.error(f"Failed to store schedule for {year} week {week}: {e}")
            self.db.rollback()
            raise

        logger.info(f"Synced {synced_count} schedule entries for week {week} ({skipped_count} skipped)")
        return {'synced': synced_count, 'skipped': skipped_count}

    async def sync_remaining_weeks(self, season: int, from_week: int, delay_seconds: float = 1.0) -> List[Dict[str, Any]]:
        """Sync every week from from_week through the end of the regular season

        A failing week is recorded and the loop moves on to the next one.
        """
        results = []
        for week in range(max(1, from_week), settings.regular_season_weeks + 1):
            try:
                result = await self.sync_week(season, week)
                results.append({'week': week, 'success': True, **result})
            except Exception as e:
                logger.error(f"Failed to sync week {week}: {e}")
                results.append({'week': week, 'success': False, 'synced': 0, 'skipped': 0, 'error': str(e)})

            # Be nice to ESPN's API
            if delay_seconds:
                await asyncio.sleep(delay_seconds)

        return results

    def _upsert_schedule(self, year: int, week: int, row: Dict[str, Any]) -> Schedule:
        """Insert or update a schedule row"""
        existing = self.db.query(Schedule).filter(
            Schedule.year == year,
            Schedule.week == week,
            Schedule.home_team == row['home_team'],
            Schedule.away_team == row['away_team']
        ).first()

        if existing:
            existing.time = row['time']
            existing.broadcast = row['broadcast']
            return existing

        entry = Schedule(
            year=year,
            week=week,
            home_team=row['home_team'],
            away_team=row['away_team'],
            time=row['time'],
            broadcast=row['broadcast']
        )
        self.db.add(entry)
        return entry

    def get_games(self, year: Optional[int] = None, week: Optional[int] = None, teams: Optional[List[str]] = None) -> List[Game]:
        """Read games for a week, optionally only those involving the given teams"""
        query = self.db.query(Schedule)

        if year:
            query = query.filter(Schedule.year == year)
        if week:
            query = query.filter(Schedule.week == week)
        if teams:
            query = query.filter(or_(Schedule.home_team.in_(teams), Schedule.away_team.in_(teams)))

        rows = query.order_by(Schedule.year.asc(), Schedule.week.asc(), Schedule.time.asc()).all()
        logger.debug(f"Found {len(rows)} games for year={year} week={week} teams={teams}")
        return [row.to_game() for row in rows]

    async def close(self):
        if self._client is not None:
            await self._client.close()
