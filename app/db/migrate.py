"""
Alembic migration runner, used on startup when RUN_MIGRATIONS=1.
"""
import logging
import os
from typing import Optional
from alembic.config import Config
from alembic import command
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection

from app.db.session import engine_options

logger = logging.getLogger(__name__)

# Serializes migrations when several API replicas boot at once (PostgreSQL only)
ADVISORY_LOCK_ID = 482910337

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
ALEMBIC_INI_PATH = os.path.join(PROJECT_ROOT, "alembic.ini")


def get_alembic_config(database_url: str) -> Config:
    alembic_cfg = Config(ALEMBIC_INI_PATH)
    alembic_cfg.set_main_option("script_location", os.path.join(PROJECT_ROOT, "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    return alembic_cfg


def get_current_revision(conn: Connection) -> Optional[str]:
    """Revision stamped in the database, or None for an empty schema."""
    return MigrationContext.configure(conn).get_current_revision()


def run_migrations(database_url: Optional[str] = None):
    """
    Upgrade the schema to the head revision.

    On PostgreSQL the upgrade runs under an advisory lock so concurrent
    replicas apply it once; the others wait and then find nothing to do.
    """
    from app.core import config as app_config

    database_url = database_url or app_config.DATABASE_URL
    if not database_url:
        raise ValueError("DATABASE_URL is not set")

    alembic_cfg = get_alembic_config(database_url)
    is_postgres = database_url.startswith("postgresql")

    engine = create_engine(database_url, **engine_options(database_url))
    lock_conn = None

    try:
        lock_conn = engine.connect()
        if is_postgres:
            lock_conn.execute(text(f"SELECT pg_advisory_lock({ADVISORY_LOCK_ID})"))
            lock_conn.commit()
            logger.info("Migration lock acquired")

        before = get_current_revision(lock_conn)
        logger.info(f"Running alembic upgrade head (current revision: {before or 'none'})")
        lock_conn.commit()

        command.upgrade(alembic_cfg, "head")

        after = get_current_revision(lock_conn)
        logger.info(f"Migrations complete (revision: {after})")

    except Exception:
        logger.exception("Migration failed")
        raise
    finally:
        if lock_conn is not None:
            try:
                if is_postgres:
                    lock_conn.execute(text(f"SELECT pg_advisory_unlock({ADVISORY_LOCK_ID})"))
                    lock_conn.commit()
            finally:
                lock_conn.close()
        engine.dispose()
