"""
Tests for the Alembic baseline and migration runner.
"""
from sqlalchemy import create_engine, inspect, text

from app.db.migrate import run_migrations


def test_baseline_migration_creates_schema(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"

    run_migrations(url)
    # Running again on an up-to-date schema is a no-op
    run_migrations(url)

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        assert {"auth_users", "app_users", "recruiting_events", "students", "interviews"} <= set(
            inspector.get_table_names()
        )
        index_names = {index["name"] for index in inspector.get_indexes("recruiting_events")}
        assert "uq_recruiting_events_single_active" in index_names

        with engine.connect() as conn:
            assert conn.execute(text("SELECT version_num FROM alembic_version")).scalar() == "5c1e2a7d9b40"
    finally:
        engine.dispose()
