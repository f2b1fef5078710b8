import os


def _csv(name, default):
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(',') if item.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///blockgame.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Block store backend: 'sql' or 'memory'
    GRID_STORE = os.environ.get('GRID_STORE', 'sql')
    GRID_ROWS = int(os.environ.get('GRID_ROWS', '10'))
    GRID_COLS = int(os.environ.get('GRID_COLS', '10'))
    # Round length; the grid is cleared when it runs out
    ROUND_DURATION_MS = int(os.environ.get('ROUND_DURATION_MS', '30000'))
    ROUND_CHECK_INTERVAL_SEC = float(os.environ.get('ROUND_CHECK_INTERVAL_SEC', '1'))
    # Per-observer event buffer; oldest events are dropped when full
    BROADCAST_QUEUE_SIZE = int(os.environ.get('BROADCAST_QUEUE_SIZE', '100'))
    CORS_ORIGINS = _csv('CORS_ORIGINS', ['http://localhost:3000', 'http://127.0.0.1:3000'])
    USER_COLORS = _csv('USER_COLORS', ['#6C63FF', '#4CAF50', '#2196F3', '#FF5252', '#FFB300', '#00BCD4'])
