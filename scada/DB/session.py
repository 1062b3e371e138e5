"""
scada/DB/session.py
======================================
Database Session Configuration Module
======================================

Creates the SQLAlchemy engine and the session factory used throughout the
backend.

Session Configuration:
---------------------
- autocommit=False: Transactions must be explicitly committed
- autoflush=False: Changes are not flushed before queries
- bind=engine: Sessions are bound to the configured engine

SQLite Note:
    FastAPI runs synchronous endpoints in a threadpool, so a connection may be
    used from a different thread than the one that opened it. SQLite refuses
    that unless check_same_thread is disabled.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from scada.Core.config import settings


def _connect_args(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# ============================================================
# DATABASE ENGINE CONFIGURATION
# ============================================================
engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    pool_pre_ping=True,
)


# ============================================================
# SESSION FACTORY CONFIGURATION
# ============================================================
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)
