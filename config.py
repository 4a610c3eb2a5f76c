"""
Application configuration
"""
import os


class Config:
    """Application configuration"""
    # Bet tracker backend
    BET_TRACKER_API_URL = os.environ.get('BET_TRACKER_API_URL', 'http://localhost:3000').rstrip('/')
    API_TIMEOUT = 10  # seconds

    # Polling
    POLL_INTERVAL_SECONDS = int(os.environ.get('POLL_INTERVAL_SECONDS', 10))
    ITEMS_PER_PAGE = 20
    # Last known state of a session is forgotten after this long without a refresh
    SESSION_IDLE_SECONDS = int(os.environ.get('SESSION_IDLE_SECONDS', 3600))

    # Leagues tracked by the backend
    LEAGUE_NAMES = {
        23114: 'GT League',
        37298: 'H2H GG League',
        38439: 'Battle Volta',
        22614: 'Battle 8min',
    }

    # Target goal line per league
    TARGET_GOAL_LINES = {
        23114: 2.5,
        37298: 1.5,
        38439: 3.5,
        22614: 3.5,
    }
    DEFAULT_TARGET_LINE = 1.5

    # Strategy evaluation
    STANDARD_ODDS = 1.90
    BREAK_EVEN_HIT_RATE = 52.63  # 100 / 1.90

    # Login form
    MIN_PASSWORD_LENGTH = 6

    # Flask config
    FLASK_HOST = '0.0.0.0'
    FLASK_PORT = int(os.environ.get('PORT', 5173))
    FLASK_DEBUG = os.environ.get('FLASK_DEBUG', '').lower() in ('1', 'true', 'yes')

    # Session cookie signing
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me-in-production')

    # Logging
    LOG_FILE = os.environ.get('BET_DASHBOARD_LOG_FILE', 'logs.txt')
