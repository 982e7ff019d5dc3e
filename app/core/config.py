"""
Configuration constants for the Youth Basketball Playing-Time Scheduler.
All configurable settings are defined here.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Game Grid
TOTAL_PERIODS = 8
PLAYERS_PER_PERIOD = 5  # Basketball has 5 players on the court
PERIODS_PER_QUARTER = 2  # Midpoint substitution splits each quarter in two
TOTAL_QUARTERS = TOTAL_PERIODS // PERIODS_PER_QUARTER
LATE_PERIOD_START = 7  # Final quarter (periods 7-8)

# Period lifecycle
PERIOD_STATUSES = ["not_started", "started", "completed"]

# Rest Rules
# Roster size -> maximum number of periods any single player may appear in.
# Roster sizes not listed here are unbounded.
MAX_SEGMENTS_BY_ROSTER_SIZE = {
    7: 6,
    8: 5,
    9: 5,
    10: 4,
}
AVOID_STREAK_MIN_PLAYERS = 7  # Avoid three periods in a row from this roster size up
STREAK_LENGTH = 3

# Priority given to a star when no grade or level is recorded
STAR_PRIORITY = 1

# Box-score stats tracked per period
VALID_STATS = [
    "threePointer",
    "fieldGoal",
    "freeThrow",
    "assist",
    "steal",
    "rebound",
    "turnover",
    "block",
    "foul",
]

# Supabase Configuration
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", os.getenv("SUPABASE_ANON_KEY", ""))
SUPABASE_GAMES_TABLE = os.getenv("SUPABASE_GAMES_TABLE", "games")
SUPABASE_PLAYERS_TABLE = os.getenv("SUPABASE_PLAYERS_TABLE", "players")

# Redis / Celery
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
CELERY_QUEUE = os.getenv("CELERY_QUEUE", "schedules")

# API
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("PORT", "8000"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
