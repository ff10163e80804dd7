import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./pizzeria.db")

# For SQLite, enable check_same_thread=False for multithreading in FastAPI
if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False}, future=True)
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True, future=True)


def enable_sqlite_foreign_keys(bind):
    # Order items reference ingredient rows; SQLite only checks that with the pragma on
    @event.listens_for(bind, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if DATABASE_URL.startswith("sqlite"):
    enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def init_db(bind=None):
    """Create missing tables. In production, use Alembic."""
    from . import models  # noqa: F401  registers the tables on Base.metadata
    Base.metadata.create_all(bind=bind or engine)
