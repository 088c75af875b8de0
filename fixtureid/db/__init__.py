"""Database layer for fixtureid with async SQLAlchemy."""

from fixtureid.db.connection import close_db, get_session, init_db
from fixtureid.db.models import Base, StoreFixtureModel
from fixtureid.db.repository import FixtureRepository, latest_by_fixture

__all__ = [
    "Base",
    "FixtureRepository",
    "StoreFixtureModel",
    "close_db",
    "get_session",
    "init_db",
    "latest_by_fixture",
]
