# scada/Services/token_classifier.py

"""
Token Classifier
================

Resolves a bearer token to exactly one identity:

    AdminIdentity            the token equals the ADMIN_TOKEN sentinel
    MachineIdentity(id)      the token is a machine's api_key
    UserIdentity(username)   the token belongs to an active user
    None                     anything else

Rules are evaluated in this order and the first match wins, so the sentinel
always takes precedence over a machine key or user token with the same literal
value, and a machine key can never be mistaken for a user token.

Every call queries storage again; nothing is cached. Deleting a user,
deactivating it or regenerating a credential takes effect on the next request.

A storage error during a lookup is treated as "not found" for that rule: it is
logged and classification moves on. A transient fault can therefore deny
access, but never attributes a token to the wrong identity.

Security Note:
    The ADMIN_TOKEN sentinel cannot be disabled. Treat it like a root
    password and override it in every deployment.
"""

from dataclasses import dataclass
from secrets import compare_digest
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scada.Core.config import settings
from scada.Core import log_ws
from scada.Repositories import machine as machine_repo
from scada.Repositories import user as user_repo


@dataclass(frozen=True)
class AdminIdentity:
    pass


@dataclass(frozen=True)
class UserIdentity:
    username: str


@dataclass(frozen=True)
class MachineIdentity:
    machine_id: int


Identity = Union[AdminIdentity, UserIdentity, MachineIdentity]

ADMIN = AdminIdentity()


def _is_admin_sentinel(token: str) -> bool:
    return compare_digest(token.encode("utf-8"), settings.ADMIN_TOKEN.encode("utf-8"))


def _lookup_machine(db: Session, token: str) -> Optional[int]:
    try:
        return machine_repo.get_machine_id_by_api_key(db, token)
    except SQLAlchemyError as e:
        db.rollback()
        log_ws.log_from_thread(f"[AUTH] Machine key lookup failed, treating as unknown: {e}", "error")
        return None


def _lookup_user(db: Session, token: str) -> Optional[str]:
    try:
        return user_repo.get_active_username_by_token(db, token)
    except SQLAlchemyError as e:
        db.rollback()
        log_ws.log_from_thread(f"[AUTH] User token lookup failed, treating as unknown: {e}", "error")
        return None


def classify(db: Session, token: Optional[str]) -> Optional[Identity]:
    """
    Classify a bearer token.

    Args:
        db: SQLAlchemy session
        token: Raw bearer token (without the "Bearer " scheme)

    Returns:
        AdminIdentity, MachineIdentity, UserIdentity or None

    Example:
        identity = classify(db, "machine_3f2a...")
        if isinstance(identity, MachineIdentity):
            ingest(db, identity.machine_id, 42.5)
    """
    if not token:
        return None

    # 1. Admin sentinel
    if _is_admin_sentinel(token):
        return ADMIN

    # 2. Machine API key namespace
    if token.startswith(settings.MACHINE_KEY_PREFIX):
        machine_id = _lookup_machine(db, token)
        if machine_id is not None:
            return MachineIdentity(machine_id=machine_id)

    # 3. User session token
    username = _lookup_user(db, token)
    if username is not None:
        return UserIdentity(username=username)

    return None
