"""Database initialization script."""

from src.idvault.core.services.database.db_session import DbSessionService
from src.idvault.runtime.config.config_data import ConfigData
from src.idvault.runtime.context import get_config


def init_db(config: ConfigData | None = None) -> None:
    """Create all database tables."""
    db_service = DbSessionService((config or get_config()).database)
    try:
        db_service.create_all()
    finally:
        db_service.dispose()


if __name__ == "__main__":
    init_db()
