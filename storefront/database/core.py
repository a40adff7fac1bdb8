from typing import Annotated
from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
import logging

from ..core.config import settings

logger = logging.getLogger(__name__)

""" Get DATABASE_URL from environment variables """
DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    logger.warning("DATABASE_URL not found in environment variables, falling back to SQLite")
    DATABASE_URL = "sqlite:///./storefront.db"

logger.info("Using database: PostgreSQL" if DATABASE_URL.startswith("postgresql") else "Using database: SQLite")

# Create engine with appropriate settings for PostgreSQL vs SQLite
if DATABASE_URL.startswith("postgresql"):
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_timeout=settings.STORE_TIMEOUT_SECONDS,
        # Statements running past the bounded wait are cancelled server-side
        connect_args={"options": f"-c statement_timeout={settings.STORE_TIMEOUT_SECONDS * 1000}"},
        echo=False
    )
else:
    # SQLite configuration
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False, "timeout": settings.STORE_TIMEOUT_SECONDS},
        echo=False
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


DbSession = Annotated[Session, Depends(get_db)]
