import pytest

from scada.Core.config import settings
from scada.Core.errors import ForbiddenError, UnauthorizedError, http_status_for
from scada.Services.authorization import Capability, authorize, comment_author, is_allowed
from scada.Services.token_classifier import ADMIN, MachineIdentity, UserIdentity


USER = UserIdentity(username="maria")
MACHINE = MachineIdentity(machine_id=3)


@pytest.mark.parametrize(
    "identity, capability, allowed",
    [
        (ADMIN, Capability.ADMIN_ONLY, True),
        (USER, Capability.ADMIN_ONLY, False),
        (MACHINE, Capability.ADMIN_ONLY, False),
        (ADMIN, Capability.READ_FLEET, True),
        (USER, Capability.READ_FLEET, True),
        (MACHINE, Capability.READ_FLEET, False),
        (ADMIN, Capability.WRITE_TELEMETRY, False),
        (USER, Capability.WRITE_TELEMETRY, False),
        (MACHINE, Capability.WRITE_TELEMETRY, True),
        (ADMIN, Capability.WRITE_COMMENT, True),
        (USER, Capability.WRITE_COMMENT, True),
        (MACHINE, Capability.WRITE_COMMENT, False),
    ],
)
def test_capability_table(identity, capability, allowed):
    assert is_allowed(identity, capability) is allowed


def test_authorize_returns_identity():
    assert authorize(MACHINE, Capability.WRITE_TELEMETRY) is MACHINE


def test_no_identity_is_unauthorized():
    with pytest.raises(UnauthorizedError) as exc:
        authorize(None, Capability.READ_FLEET)
    assert not isinstance(exc.value, ForbiddenError)
    assert exc.value.message == "Invalid token"


def test_wrong_identity_is_forbidden():
    with pytest.raises(ForbiddenError) as exc:
        authorize(USER, Capability.ADMIN_ONLY)
    assert exc.value.message == "Admin access required"


def test_forbidden_status_parity_and_split(monkeypatch):
    err = ForbiddenError("Admin access required")
    assert http_status_for(err) == 401

    monkeypatch.setattr(settings, "SPLIT_FORBIDDEN_STATUS", True)
    assert http_status_for(err) == 403
    assert http_status_for(UnauthorizedError()) == 401


def test_comment_author():
    assert comment_author(ADMIN) == "admin"
    assert comment_author(USER) == "maria"
    with pytest.raises(ForbiddenError):
        comment_author(MACHINE)
