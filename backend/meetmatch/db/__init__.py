from meetmatch.db.base import Base
from meetmatch.db.session import get_db, engine, SessionLocal
from meetmatch.db.tables import ALL_TABLE_NAMES, ENGINE_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES", "ENGINE_TABLE_NAMES"]
