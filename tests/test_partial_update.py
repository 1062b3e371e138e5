import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from scada.Core.errors import (
    ConflictError,
    InternalStorageError,
    InvalidFieldValue,
    NoFieldsProvided,
    NotFoundError,
    PostUpdateReadFailed,
)
from scada.Models.machine import Machine
from scada.Schemas.machine import Machine_create, Machine_update
from scada.Schemas.user import User_create, User_update
from scada.Services import machine_service, partial_update, user_service
from scada.Services.machine_service import MACHINE_UPDATE_RULES
from scada.Services.user_service import USER_UPDATE_RULES
from scada.Services.partial_update import assign, command, not_blank, one_of, project


@pytest.fixture
def line1(db):
    return machine_service.create_machine(db, Machine_create(name="Line1", code="L1"))


# ============================================================
# project()
# ============================================================

def test_project_only_provided_fields():
    assignments = project(Machine_update(location="Hall B"), MACHINE_UPDATE_RULES)
    assert assignments == [("location", "Hall B")]


def test_project_treats_null_as_absent():
    assert project(Machine_update(name=None, location=None), MACHINE_UPDATE_RULES) == []
    assert project(None, MACHINE_UPDATE_RULES) == []


def test_project_keeps_false_values():
    assert project(User_update(is_active=False), USER_UPDATE_RULES) == [("is_active", False)]


def test_machine_update_has_no_live_state_fields():
    assert "is_online" not in MACHINE_UPDATE_RULES
    with pytest.raises(ValidationError):
        Machine_update(is_online=True)


def test_command_false_contributes_nothing():
    assert project(Machine_update(regenerate_api_key=False), MACHINE_UPDATE_RULES) == []


def test_command_true_generates_value():
    assignments = project(Machine_update(regenerate_api_key=True), MACHINE_UPDATE_RULES)
    assert len(assignments) == 1
    column, value = assignments[0]
    assert column == "api_key"
    assert value.startswith("machine_")


def test_validators():
    rule = assign("role", one_of(("admin", "technician")))
    assert rule("role", "admin") == [("role", "admin")]
    with pytest.raises(InvalidFieldValue) as exc:
        rule("role", "root")
    assert exc.value.field == "role"

    with pytest.raises(InvalidFieldValue):
        not_blank("name", "   ")

    assert command("token", lambda: "t")("regenerate", True) == [("token", "t")]


# ============================================================
# apply_update()
# ============================================================

def test_empty_update_writes_nothing(db, line1):
    with pytest.raises(NoFieldsProvided):
        machine_service.update_machine(db, line1.id, Machine_update())

    db.expire_all()
    assert db.get(Machine, line1.id).name == "Line1"


def test_update_changes_only_given_columns(db, line1):
    updated = machine_service.update_machine(db, line1.id, Machine_update(location="Hall B"))
    assert updated.location == "Hall B"
    assert updated.name == "Line1"
    assert updated.code == "L1"
    assert updated.api_key == line1.api_key


def test_update_missing_record(db):
    with pytest.raises(NotFoundError) as exc:
        machine_service.update_machine(db, 9999, Machine_update(name="X"))
    assert exc.value.message == "Machine not found"


def test_update_unique_conflict(db, line1):
    other = machine_service.create_machine(db, Machine_create(name="Line2", code="L2"))
    with pytest.raises(ConflictError) as exc:
        machine_service.update_machine(db, other.id, Machine_update(code="L1"))
    assert exc.value.message == "Machine code already exists"

    db.expire_all()
    assert db.get(Machine, other.id).code == "L2"


def test_regenerate_api_key_replaces_key(db, line1):
    old_key = line1.api_key
    updated = machine_service.update_machine(db, line1.id, Machine_update(regenerate_api_key=True))
    assert updated.api_key != old_key
    assert updated.api_key.startswith("machine_")


def test_storage_error_is_internal(db, line1, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("UPDATE", {}, Exception("disk full"))

    monkeypatch.setattr(partial_update, "update_columns", broken)
    with pytest.raises(InternalStorageError) as exc:
        machine_service.update_machine(db, line1.id, Machine_update(name="X"))
    assert not isinstance(exc.value, PostUpdateReadFailed)


def test_reread_failure_is_distinct(db, line1, monkeypatch):
    def broken_get(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "get", broken_get)
    with pytest.raises(PostUpdateReadFailed):
        machine_service.update_machine(db, line1.id, Machine_update(location="Hall C"))

    monkeypatch.undo()
    db.expire_all()
    assert db.get(Machine, line1.id).location == "Hall C"


def test_unknown_column_is_rejected(db, line1):
    with pytest.raises(ValueError):
        partial_update.apply_update(db, Machine, line1.id, [("bogus", 1)], entity="Machine")
    with pytest.raises(ValueError):
        partial_update.apply_update(db, Machine, line1.id, [("id", 5)], entity="Machine")


# ============================================================
# Users
# ============================================================

def test_user_invalid_role(db):
    user = user_service.create_user(db, User_create(username="maria", password="pw", role="technician"))
    with pytest.raises(InvalidFieldValue):
        user_service.update_user(db, user.id, User_update(role="superuser"))
    with pytest.raises(InvalidFieldValue):
        user_service.create_user(db, User_create(username="bob", password="pw", role="root"))


def test_user_regenerate_token(db):
    user = user_service.create_user(db, User_create(username="maria", password="pw", role="technician"))
    old_token = user.token
    updated = user_service.update_user(db, user.id, User_update(regenerate_token=True, role="manager"))
    assert updated.token != old_token
    assert updated.token.startswith("user_")
    assert updated.role == "manager"


def test_duplicate_username(db):
    user_service.create_user(db, User_create(username="maria", password="pw", role="technician"))
    with pytest.raises(ConflictError) as exc:
        user_service.create_user(db, User_create(username="maria", password="pw2", role="manager"))
    assert exc.value.message == "Username already exists"


def test_create_machine_rejects_blank_name_and_code(db):
    with pytest.raises(InvalidFieldValue) as exc:
        machine_service.create_machine(db, Machine_create(name="   ", code="L1"))
    assert exc.value.message == "name must not be empty"

    with pytest.raises(InvalidFieldValue) as exc:
        machine_service.create_machine(db, Machine_create(name="Line1", code="  "))
    assert exc.value.message == "code must not be empty"

    assert db.query(Machine).count() == 0
