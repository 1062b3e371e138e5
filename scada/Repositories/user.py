# scada/Repositories/user.py

from secrets import compare_digest
from sqlalchemy.orm import Session
from sqlalchemy import select
from scada.Models.user import User
from typing import List, Optional


def get_all_users(db: Session) -> List[User]:
    """All users ordered by username."""
    return db.query(User).order_by(User.username).all()


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def get_active_username_by_token(db: Session, token: str) -> Optional[str]:
    """
    Resolve a bearer token to the username of an active user.

    Returns:
        Username, or None if no active user holds this token
    """
    stmt = (
        select(User.username)
        .where(User.token == token, User.is_active == True)
        .limit(1)
    )
    return db.execute(stmt).scalar_one_or_none()


def authenticate(db: Session, username: str, password: str) -> Optional[User]:
    """
    Return the active user matching username and password, or None.

    Passwords are stored in plaintext; the comparison is constant-time.
    """
    user = get_user_by_username(db, username)
    if user is None or not user.is_active:
        return None
    if not compare_digest(user.password.encode("utf-8"), password.encode("utf-8")):
        return None
    return user


def create_user(db: Session, username: str, password: str, role: str, token: str) -> User:
    """
    Insert a new user.

    Raises:
        IntegrityError: If username or token already exists
    """
    new_user = User(username=username, password=password, role=role, token=token)
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return new_user
