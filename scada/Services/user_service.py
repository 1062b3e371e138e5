# scada/Services/user_service.py

"""
User Service

Login, creation and admin partial update of operator accounts.
"""

from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from scada.Core import log_ws
from scada.Core.errors import ConflictError, InternalStorageError, UnauthorizedError
from scada.Models.user import USER_ROLES, User
from scada.Repositories import user as user_repo
from scada.Repositories.common import describe_conflict, is_unique_violation
from scada.Schemas.user import User_create, User_update
from scada.Services.credentials import generate_user_token
from scada.Services.partial_update import (
    apply_update,
    assign,
    command,
    not_blank,
    one_of,
    project,
)


USER_UPDATE_RULES = {
    "password": assign("password", not_blank),
    "role": assign("role", one_of(USER_ROLES)),
    "is_active": assign("is_active"),
    "regenerate_token": command("token", generate_user_token),
}

USER_CONFLICTS = {
    "username": "Username already exists",
    "token": "Generated token collided, please retry",
}

validate_role = one_of(USER_ROLES)


def login(db: Session, username: str, password: str) -> User:
    """
    Raises:
        UnauthorizedError: unknown user, wrong password or inactive account
        InternalStorageError: storage failure
    """
    try:
        user = user_repo.authenticate(db, username, password)
    except SQLAlchemyError as e:
        raise InternalStorageError() from e

    if user is None:
        log_ws.log_from_thread(f"[AUTH] Failed login for '{username}'", "warning")
        raise UnauthorizedError("Invalid credentials")
    return user


def list_users(db: Session) -> List[User]:
    try:
        return user_repo.get_all_users(db)
    except SQLAlchemyError as e:
        raise InternalStorageError() from e


def create_user(db: Session, data: User_create) -> User:
    """
    Raises:
        InvalidFieldValue: role or password rejected
        ConflictError: username already exists
        InternalStorageError: any other storage failure
    """
    validate_role("role", data.role)
    not_blank("username", data.username)
    not_blank("password", data.password)

    try:
        user = user_repo.create_user(
            db,
            username=data.username,
            password=data.password,
            role=data.role,
            token=generate_user_token(),
        )
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            message = describe_conflict(e, USER_CONFLICTS, "User already exists")
            log_ws.log_from_thread(f"[USERS] Create rejected: {message}", "warning")
            raise ConflictError(message) from e
        raise InternalStorageError("Failed to create user") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalStorageError("Failed to create user") from e

    log_ws.log_from_thread(f"[USERS] Created user '{user.username}' ({user.role})")
    return user


def update_user(db: Session, user_id: int, data: User_update) -> User:
    assignments = project(data, USER_UPDATE_RULES)
    return apply_update(
        db, User, user_id, assignments,
        entity="User",
        conflict_messages=USER_CONFLICTS,
    )
