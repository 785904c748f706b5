from .session import SessionLocal, enable_sqlite_foreign_keys, engine, get_db_session

__all__ = ["SessionLocal", "enable_sqlite_foreign_keys", "engine", "get_db_session"]
