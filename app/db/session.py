"""
Engine and session factory shared by the API, the migration runner and scripts.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core import config


def engine_options(database_url: str) -> dict:
    # SQLite connections are shared across FastAPI's worker threads
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": config.DB_POOL_SIZE,
        "max_overflow": config.DB_MAX_OVERFLOW,
    }


engine = create_engine(config.DATABASE_URL, **engine_options(config.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
