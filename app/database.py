from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from app.config import settings

DATABASE_URL = f"sqlite:///{settings.DATABASE_PATH}"

engine = create_engine(DATABASE_URL, echo=False, connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(bind=engine)


class Base(DeclarativeBase):
    pass


def init_db():
    """Create the players and matches tables"""
    from app.models import player, match  # noqa
    Base.metadata.create_all(bind=engine)


def get_session():
    """Session for the CLI; the caller closes it"""
    return SessionLocal()


def get_session_factory():
    """Snapshot and stats saves run after the response and open their own sessions"""
    return SessionLocal


def get_db():
    """Request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
