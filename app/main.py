"""
Main FastAPI application for the Youth Basketball Playing-Time Scheduler.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import routes
from app.core.config import CORS_ORIGINS
from app.core.logging_config import setup_logging

setup_logging()

app = FastAPI(
    title="Youth Basketball Playing-Time API",
    description="API for building and adjusting fair playing-time schedules during games",
    version="1.0.0"
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(routes.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Youth Basketball Playing-Time API",
        "version": "1.0.0",
        "endpoints": {
            "attendance": "/api/teams/{team_id}/games/{game_id}/attendance",
            "schedule": "/api/teams/{team_id}/games/{game_id}/schedule",
            "health": "/api/health"
        }
    }
