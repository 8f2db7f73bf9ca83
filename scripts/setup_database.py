#!/usr/bin/env python3
"""
Database setup script for the Gameday broadcast API
Run this to create the tables and seed one team row per configured team
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'backend'))

from gameday.config import settings
from gameday.database import SessionLocal, create_tables
from gameday.services.team_config import load_team_configs
from gameday.services.team_records_service import TeamRecordsService

def create_database():
    """Create database tables"""
    create_tables()
    print("✅ Database tables created successfully")

def populate_initial_data(season: int):
    """Seed team rows from the team configuration file"""
    db = SessionLocal()

    try:
        team_configs = load_team_configs(settings.team_config_path)
        created = TeamRecordsService(db).seed_teams(team_configs, season)

        if created == 0:
            print("📊 Teams already exist, skipping population")
            return

        print("✅ Initial data populated successfully")
        print(f"   - Added {created} NFL teams for {season}")

    except Exception as e:
        db.rollback()
        print(f"❌ Error populating initial data: {e}")
        raise
    finally:
        db.close()

def main():
    """Main setup function"""
    season = int(sys.argv[1]) if len(sys.argv) > 1 else int(settings.default_season)
    print(f"🏈 Setting up Gameday database ({settings.database_url})...")

    try:
        create_database()
        populate_initial_data(season)
        print("\n🎉 Database setup completed successfully!")
        print("\nNext steps:")
        print(f"1. Run: python backend/sync_commands.py all --week 1 --season {season}")
        print("2. Run: uvicorn gameday.main:app --reload --app-dir backend")
        print("3. Visit: http://localhost:8000/docs for API documentation")

    except Exception as e:
        print(f"\n❌ Setup failed: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
