import os

DEFAULT_SQLITE_PATH = "vehicles.db"
DEFAULT_PORT = 3001


def is_production() -> bool:
    """Detects if running in production via PRODUCTION variable"""
    return os.getenv("PRODUCTION", "false").strip().lower() == "true"


def get_database_url() -> str | None:
    """Connection string for the networked (PostgreSQL) backend"""
    return os.getenv("DATABASE_URL") or None


def get_sqlite_path() -> str:
    """File used by the embedded (SQLite) backend"""
    return os.getenv("SQLITE_PATH") or DEFAULT_SQLITE_PATH


def get_port() -> int:
    return int(os.getenv("PORT") or DEFAULT_PORT)


def get_host() -> str:
    return os.getenv("HOST") or "0.0.0.0"


def get_log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "INFO").upper()
