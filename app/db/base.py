"""
Shared DB base and session factory.
engine, SessionLocal and Base are defined once in app.db.session.
"""
from sqlalchemy import BigInteger, Integer

from app.db.session import engine, SessionLocal, Base, init_db

# bigint identity on Postgres; sqlite only autoincrements INTEGER primary keys
BigIntId = BigInteger().with_variant(Integer(), "sqlite")

__all__ = ["engine", "SessionLocal", "Base", "BigIntId", "init_db"]
