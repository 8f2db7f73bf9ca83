#!/usr/bin/env python3
"""
Sync commands for schedule, team and player data

Usage examples:
    python sync_commands.py schedule --week 3
    python sync_commands.py schedule --week 3 --season 2024
    python sync_commands.py schedule-remaining --week 5
    python sync_commands.py teams
    python sync_commands.py records --record-season 2024
    python sync_commands.py players
    python sync_commands.py all --week 1
"""

import asyncio
import argparse
import sys
from gameday.database import SessionLocal, create_tables
from gameday.services.schedule_service import ScheduleService
from gameday.services.sleeper_service import SleeperService
from gameday.services.team_config import get_team_configs
from gameday.services.team_records_service import TeamRecordsService
from gameday.config import settings

class SyncCommands:
    def __init__(self):
        self.db = None
        self.schedule = None
        self.records = None
        self.sleeper = None

    async def _setup(self):
        """Initialize database connection and services"""
        create_tables()
        self.db = SessionLocal()
        self.schedule = ScheduleService(self.db)
        self.records = TeamRecordsService(self.db)
        self.sleeper = SleeperService(self.db)

    async def _cleanup(self):
        """Clean up connections"""
        for service in (self.schedule, self.records, self.sleeper):
            if service:
                await service.close()
        if self.db:
            self.db.close()

    async def sync_schedule(self, week: int, season: int) -> int:
        """Sync the schedule for one week"""
        try:
            print(f"🏈 Syncing schedule for Week {week}, {season} season...")
            result = await self.schedule.sync_week(season, week)
            print(f"✅ Synced {result['synced']} games ({result['skipped']} skipped)")
            return result['synced']
        except Exception as e:
            print(f"❌ Error syncing schedule: {e}")
            return 0

    async def sync_remaining_schedule(self, from_week: int, season: int) -> int:
        """Sync the schedule from a week through the end of the regular season"""
        print(f"📅 Syncing schedule for Weeks {from_week}-{settings.regular_season_weeks}, {season} season...")
        results = await self.schedule.sync_remaining_weeks(season, from_week)

        total = 0
        for result in results:
            if result['success']:
                print(f"   ✅ Week {result['week']}: {result['synced']} games")
                total += result['synced']
            else:
                print(f"   ❌ Week {result['week']}: {result['error']}")

        failed = [r['week'] for r in results if not r['success']]
        print(f"✅ Synced {total} games across {len(results) - len(failed)} weeks")
        if failed:
            print(f"⚠️  Failed weeks: {failed}")
        return total

    def seed_teams(self, season: int) -> int:
        """Create team rows from the team configuration"""
        try:
            print(f"🏟️  Seeding teams for {season} season...")
            created = self.records.seed_teams(get_team_configs(), season)
            print(f"✅ Created {created} teams")
            return created
        except Exception as e:
            print(f"❌ Error seeding teams: {e}")
            return 0

    async def sync_records(self, season: int, record_season: int = None) -> int:
        """Refresh team records from ESPN"""
        record_season = record_season or season
        try:
            print(f"📊 Syncing team records for {season} teams from the {record_season} season...")
            result = await self.records.sync_records(season, record_season)
            print(f"✅ Updated {result['success_count']}/{result['total_teams']} teams")
            for error in result['errors']:
                print(f"   ❌ {error}")
            return result['success_count']
        except Exception as e:
            print(f"❌ Error syncing team records: {e}")
            return 0

    async def sync_players(self) -> int:
        """Sync every NFL player from Sleeper"""
        try:
            print("👥 Syncing players from Sleeper...")
            count = await self.sleeper.sync_players()
            print(f"✅ Successfully synced {count} players")
            return count
        except Exception as e:
            print(f"❌ Error syncing players: {e}")
            return 0

    async def sync_all(self, week: int, season: int, record_season: int = None) -> int:
        """Seed teams, then sync records, the remaining schedule and players"""
        print(f"🔄 Syncing everything from Week {week}, {season} season")

        total = self.seed_teams(season)
        total += await self.sync_records(season, record_season)
        total += await self.sync_remaining_schedule(week, season)
        total += await self.sync_players()

        print(f"\n🎉 Sync complete! Total records synced: {total}")
        return total

async def main():
    parser = argparse.ArgumentParser(description='Sync schedule, team and player data')
    parser.add_argument('command', choices=['schedule', 'schedule-remaining', 'teams', 'records', 'players', 'all'],
                       help='What to sync')
    parser.add_argument('--week', '-w', type=int,
                       help='NFL week number (required for schedule; start week for schedule-remaining/all)')
    parser.add_argument('--season', '-s', type=int, default=int(settings.default_season),
                       help=f'NFL season (default: {settings.default_season})')
    parser.add_argument('--record-season', '-r', type=int,
                       help='Season to read team records from (default: --season)')

    args = parser.parse_args()

    # Validation
    if args.command == 'schedule' and not args.week:
        parser.error("--week is required for schedule")
    if args.week is not None and not 1 <= args.week <= settings.regular_season_weeks:
        parser.error(f"--week must be between 1 and {settings.regular_season_weeks}")

    sync = SyncCommands()

    try:
        await sync._setup()

        if args.command == 'schedule':
            await sync.sync_schedule(args.week, args.season)
        elif args.command == 'schedule-remaining':
            await sync.sync_remaining_schedule(args.week or 1, args.season)
        elif args.command == 'teams':
            sync.seed_teams(args.season)
        elif args.command == 'records':
            await sync.sync_records(args.season, args.record_season)
        elif args.command == 'players':
            await sync.sync_players()
        elif args.command == 'all':
            await sync.sync_all(args.week or 1, args.season, args.record_season)

    except KeyboardInterrupt:
        print("\n⏹️  Sync cancelled by user")
    except Exception as e:
        print(f"❌ Sync failed: {e}")
        sys.exit(1)
    finally:
        await sync._cleanup()

if __name__ == "__main__":
    asyncio.run(main())
