# scada/Services/authorization.py

"""
Authorization Gate
==================

Maps a classified identity and a required capability to allow / deny.

| Capability       | Allowed identities                                   |
|------------------|------------------------------------------------------|
| ADMIN_ONLY       | Admin                                                |
| READ_FLEET       | Admin, User                                          |
| WRITE_TELEMETRY  | Machine (its own row only: the id comes from its key) |
| WRITE_COMMENT    | Admin, User                                          |

No identity at all raises UnauthorizedError; a recognized identity without
the capability raises ForbiddenError. Both render as HTTP 401 unless
SPLIT_FORBIDDEN_STATUS is enabled.
"""

from enum import Enum
from typing import Optional

from scada.Core.errors import ForbiddenError, UnauthorizedError
from scada.Services.token_classifier import (
    AdminIdentity,
    Identity,
    MachineIdentity,
    UserIdentity,
)


class Capability(str, Enum):
    ADMIN_ONLY = "admin_only"
    READ_FLEET = "read_fleet"
    WRITE_TELEMETRY = "write_telemetry"
    WRITE_COMMENT = "write_comment"


_ALLOWED = {
    Capability.ADMIN_ONLY: (AdminIdentity,),
    Capability.READ_FLEET: (AdminIdentity, UserIdentity),
    Capability.WRITE_TELEMETRY: (MachineIdentity,),
    Capability.WRITE_COMMENT: (AdminIdentity, UserIdentity),
}

_DENIED_MESSAGES = {
    Capability.ADMIN_ONLY: "Admin access required",
    Capability.READ_FLEET: "Invalid token",
    Capability.WRITE_TELEMETRY: "Invalid machine API key",
    Capability.WRITE_COMMENT: "Invalid token",
}

ADMIN_AUTHOR = "admin"


def is_allowed(identity: Optional[Identity], capability: Capability) -> bool:
    return identity is not None and isinstance(identity, _ALLOWED[capability])


def authorize(identity: Optional[Identity], capability: Capability) -> Identity:
    """
    Allow or deny.

    Returns:
        The identity, unchanged, when allowed

    Raises:
        UnauthorizedError: No identity (unknown token)
        ForbiddenError: Identity lacks the capability
    """
    if identity is None:
        raise UnauthorizedError(_DENIED_MESSAGES[capability])
    if not is_allowed(identity, capability):
        raise ForbiddenError(_DENIED_MESSAGES[capability])
    return identity


def comment_author(identity: Identity) -> str:
    """Name a comment is attributed to: "admin" for the sentinel, else the username."""
    if isinstance(identity, AdminIdentity):
        return ADMIN_AUTHOR
    if isinstance(identity, UserIdentity):
        return identity.username
    raise ForbiddenError(_DENIED_MESSAGES[Capability.WRITE_COMMENT])
