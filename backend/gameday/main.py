from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from gameday.database import get_db, create_tables
from gameday.config import settings
from gameday.api import broadcasts, predictions, schedule, team_records, sleeper, players

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    create_tables()
    yield

# Create FastAPI application
app = FastAPI(
    title="Gameday Broadcast API",
    description="NFL broadcast board, TBD slot ranking and Sleeper league browsing",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(schedule.router, prefix="/api/v1/schedule", tags=["schedule"])
app.include_router(team_records.router, prefix="/api/v1/team-records", tags=["team-records"])
app.include_router(broadcasts.router, prefix="/api/v1/broadcasts", tags=["broadcasts"])
app.include_router(predictions.router, prefix="/api/v1/ml-predictions", tags=["ml-predictions"])
app.include_router(sleeper.router, prefix="/api/v1/sleeper", tags=["sleeper"])
app.include_router(players.router, prefix="/api/v1/players", tags=["players"])

@app.get("/")
async def root():
    return {
        "message": "Gameday Broadcast API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "schedule": "/api/v1/schedule",
            "team-records": "/api/v1/team-records",
            "broadcasts": "/api/v1/broadcasts",
            "ml-predictions": "/api/v1/ml-predictions",
            "sleeper": "/api/v1/sleeper",
            "players": "/api/v1/players"
        }
    }

@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except SQLAlchemyError as e:
        return {"status": "unhealthy", "error": str(e)}
