import os
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(PROJECT_ROOT / ".env")
ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")

DEV_SQLITE_PATH = PROJECT_ROOT / "shortlinks_dev.db"


def database_url(environment: str = ENVIRONMENT) -> str:
    """``DATABASE_URL`` if set; a local SQLite file outside prod."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if environment == "prod":
        raise RuntimeError("DATABASE_URL must be set in production")
    return f"sqlite:///{DEV_SQLITE_PATH}"


def make_engine(url: str):
    if url.startswith("sqlite"):
        # sessions are handed across FastAPI's threadpool
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=int(os.getenv("DB_POOL_SIZE", 5)),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", 10)),
        pool_recycle=1800,
    )


engine = make_engine(database_url())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None):
    # registers the tables on Base
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
