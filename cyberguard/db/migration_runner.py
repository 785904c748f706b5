from __future__ import annotations

import threading
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Engine

from cyberguard.logging_config import logger
from cyberguard.settings import settings

_MIGRATION_LOCK = threading.Lock()
_MIGRATION_APPLIED = False


def _is_postgres(url: str) -> bool:
    return url.lower().startswith("postgres")


def _should_auto_apply() -> bool:
    """
    Alembic runs only against PostgreSQL; SQLite databases are built from metadata.
    """
    return settings.auto_apply_db_migrations and _is_postgres(settings.database_url)


def _build_alembic_config(base_dir: Path) -> Config:
    cfg = Config(str(base_dir / "alembic.ini"))
    cfg.set_main_option("script_location", str(base_dir / "alembic"))
    cfg.set_main_option("version_locations", str(base_dir / "alembic" / "versions"))
    cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return cfg


def auto_upgrade_database() -> None:
    """
    Bring the PostgreSQL schema to the latest revision once per process.
    """
    global _MIGRATION_APPLIED
    if _MIGRATION_APPLIED or not _should_auto_apply():
        return

    with _MIGRATION_LOCK:
        if _MIGRATION_APPLIED:
            return

        project_dir = Path(__file__).resolve().parents[2]
        alembic_ini = project_dir / "alembic.ini"
        if not alembic_ini.exists():
            logger.warning(
                "Alembic config %s not found; skipping automatic migration.",
                alembic_ini,
            )
            _MIGRATION_APPLIED = True
            return

        logger.info("Running Alembic migrations to head...")
        try:
            command.upgrade(_build_alembic_config(project_dir), "head")
        except Exception:
            logger.exception(
                "Automatic Alembic migration failed; run 'alembic upgrade head' manually."
            )
            raise
        logger.info("Database migrations complete.")
        _MIGRATION_APPLIED = True


def init_database(engine: Engine | None = None) -> None:
    """
    Make sure the sessions/messages tables exist before serving requests.
    """
    if _is_postgres(settings.database_url) and settings.auto_apply_db_migrations:
        auto_upgrade_database()
        return

    from cyberguard.db.session import engine as default_engine
    from cyberguard.models import Base

    target = engine or default_engine
    Base.metadata.create_all(bind=target)
    logger.info("Database tables ready (%s)", target.dialect.name)


__all__ = ["auto_upgrade_database", "init_database"]
