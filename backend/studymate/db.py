from __future__ import annotations
import logging

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url or "sqlite:///./studymate.db"

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args, future=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


# Columns added after the first release; (table, column, DDL type)
_LATE_COLUMNS = [
	("users", "profile_picture", "TEXT"),
	("users", "is_authenticated", "BOOLEAN DEFAULT 0 NOT NULL"),
	("quizzes", "difficulty", "VARCHAR(16)"),
	("quizzes", "time_spent", "INTEGER"),
	("chat_messages", "seq", "INTEGER DEFAULT 0 NOT NULL"),
]


# Best-effort lightweight migrations for development (SQLite-friendly)
def ensure_schema(bind=None) -> list[str]:
	bind = bind or engine
	try:
		inspector = inspect(bind)
		tables = set(inspector.get_table_names())
	except Exception:
		logger.warning("Could not inspect database schema", exc_info=True)
		return []
	added: list[str] = []
	with bind.begin() as conn:
		for table, column, ddl in _LATE_COLUMNS:
			if table not in tables:
				continue
			cols = {c["name"] for c in inspector.get_columns(table)}
			if column not in cols:
				conn.exec_driver_sql(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}")
				added.append(f"{table}.{column}")
	if added:
		logger.info("Added missing columns: %s", ", ".join(added))
	return added
