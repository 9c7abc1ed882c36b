"""SQLAlchemy engine, session factories and declarative base."""
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from eventflow.config import settings


def _engine_for(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


engine = _engine_for(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Elevated-privilege sessions (bypass row-level policies); None when not configured.
ServiceSessionLocal: Optional[sessionmaker] = None
if settings.SERVICE_DATABASE_URL:
    ServiceSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=_engine_for(settings.SERVICE_DATABASE_URL)
    )

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_service_session() -> Optional[Session]:
    """Open an elevated-privilege session, or return None when unavailable."""
    if ServiceSessionLocal is None:
        return None
    return ServiceSessionLocal()
