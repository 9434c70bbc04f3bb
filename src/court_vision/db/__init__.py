"""Database layer."""

from court_vision.db.models import Base, VideoJobModel
from court_vision.db.session import SessionLocal, engine, init_db

__all__ = [
    "Base",
    "SessionLocal",
    "VideoJobModel",
    "engine",
    "init_db",
]
