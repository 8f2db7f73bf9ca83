from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from gameday.config import settings

def build_engine(database_url: str):
    """Engine for the configured URL; SQLite connections are shared across FastAPI's threadpool"""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False, connect_args={"check_same_thread": False})
    return create_engine(database_url, echo=False, pool_pre_ping=True)

engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def create_tables():
    """Create the schedules, teams and players tables if they are missing"""
    from gameday.models import Base
    Base.metadata.create_all(bind=engine)

def get_db():
    """Request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
