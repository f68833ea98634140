# app/db/session.py
# SQLAlchemy engine/session setup. The URL comes from DATABASE_URL.

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from app.config import settings

DATABASE_URL = settings.database_url

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")


def enable_sqlite_savepoints(engine):
    # let SQLAlchemy emit BEGIN so pysqlite honours SAVEPOINT (begin_nested)
    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


if DATABASE_URL.startswith("sqlite"):
    engine = enable_sqlite_savepoints(create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
    ))
else:
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,  # detect dropped connections
        pool_size=30,        # matches the Supabase session-mode pool
        max_overflow=0,
        pool_timeout=30,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db():
    # importing the models registers every table on Base.metadata
    from app.models import (  # noqa: F401
        answers,
        messages,
        profile,
        prompts,
        session_event,
        session_member,
        sessions,
    )

    Base.metadata.create_all(bind=engine)
