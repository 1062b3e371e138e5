# scada/DB/database.py

"""
Database Dependency Injection and Bootstrap Module

Provides the session generator used by FastAPI dependencies plus the
table-creation and admin-seeding steps executed once at startup.

Key Features:
- Automatic session creation and cleanup (get_db)
- Connectivity check run at startup
- Idempotent schema creation (no migrations; tables are created if missing)
- One-time seeding of the bootstrap admin user

Usage Examples:
    # FastAPI endpoint
    @router.get("/machines")
    def list_machines(db: Session = Depends(get_db)):
        ...

    # Startup
    create_all_tables()
    with SessionLocal() as db:
        seed_bootstrap_admin(db)
"""

from typing import Generator
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from scada.Core.config import settings
from scada.Core import log_ws
from scada.DB.session import SessionLocal, engine


# ============================================================
# Primary Database Session Generator
# ============================================================

def get_db() -> Generator[Session, None, None]:
    """
    Database session generator for FastAPI dependency injection.

    Each request gets its own session; the session is closed even if the
    handler raises. Nothing is committed automatically - writers commit
    explicitly.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ============================================================
# Database Health Check Utilities
# ============================================================

def test_db_connection() -> bool:
    """
    Test database connectivity with a simple query.

    Returns:
        bool: True if the database answered SELECT 1, False otherwise.
    """
    db = None
    try:
        db = next(get_db())
        result = db.execute(text("SELECT 1"))
        return result.scalar() == 1
    except Exception as e:
        print(f"[DB] ❌ Connection test failed: {e}")
        return False
    finally:
        if db:
            db.close()


# ============================================================
# Schema Management
# ============================================================

def create_all_tables():
    """
    Create all tables registered in scada/DB/base.py.

    Idempotent: existing tables are left untouched. There is no migration
    history; schema changes require recreating the database.
    """
    from scada.DB.base import Base
    print("[DB] 🔨 Creating all tables...")
    Base.metadata.create_all(bind=engine)
    print("[DB] ✅ Tables ready")


def drop_all_tables():
    """
    Drop all tables. DESTRUCTIVE - used by the test suite to reset state.
    """
    from scada.DB.base import Base
    print("[DB] 🗑️  Dropping all tables...")
    Base.metadata.drop_all(bind=engine)


# ============================================================
# Bootstrap Admin
# ============================================================

def seed_bootstrap_admin(db: Session) -> bool:
    """
    Insert the bootstrap admin user unless a user with ADMIN_USERNAME exists.

    The row is seeded once; later changes to ADMIN_PASSWORD or ADMIN_TOKEN do
    not rewrite it. A stale token is reported so operators know the seeded
    user's login no longer returns the sentinel.

    Returns:
        True if the user was inserted, False if it already existed.
    """
    from scada.Models.user import User

    existing = db.query(User).filter(User.username == settings.ADMIN_USERNAME).first()
    if existing is not None:
        if existing.token != settings.ADMIN_TOKEN:
            log_ws.log_from_thread(
                f"[BOOTSTRAP] User '{existing.username}' exists with a token that differs "
                f"from ADMIN_TOKEN; its login will not return the admin sentinel",
                "warning",
            )
        return False

    db.add(User(
        username=settings.ADMIN_USERNAME,
        password=settings.ADMIN_PASSWORD,
        role="admin",
        token=settings.ADMIN_TOKEN,
    ))
    try:
        db.commit()
    except IntegrityError:
        # Another worker seeded it first, or ADMIN_TOKEN already belongs to a user
        db.rollback()
        log_ws.log_from_thread("[BOOTSTRAP] Admin user not seeded: unique constraint", "warning")
        return False

    print(f"[BOOTSTRAP] ✅ Seeded admin user '{settings.ADMIN_USERNAME}'")
    return True


__all__ = [
    "get_db",
    "test_db_connection",
    "create_all_tables",
    "drop_all_tables",
    "seed_bootstrap_admin",
]
