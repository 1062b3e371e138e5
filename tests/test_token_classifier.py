from sqlalchemy.exc import OperationalError

from scada.Core.config import settings
from scada.Models.machine import Machine
from scada.Models.user import User
from scada.Services import token_classifier
from scada.Services.token_classifier import (
    ADMIN,
    AdminIdentity,
    MachineIdentity,
    UserIdentity,
    classify,
)


def _add_machine(db, api_key, name="Line1", code="L1"):
    m = Machine(name=name, code=code, api_key=api_key)
    db.add(m)
    db.commit()
    return m


def _add_user(db, username, token, is_active=True):
    u = User(username=username, password="pw", role="technician", token=token, is_active=is_active)
    db.add(u)
    db.commit()
    return u


def test_empty_and_missing_tokens_are_unknown(db):
    assert classify(db, None) is None
    assert classify(db, "") is None


def test_admin_sentinel(db):
    assert classify(db, settings.ADMIN_TOKEN) == ADMIN
    assert isinstance(classify(db, settings.ADMIN_TOKEN), AdminIdentity)


def test_machine_key(db):
    m = _add_machine(db, "machine_abc123")
    assert classify(db, "machine_abc123") == MachineIdentity(machine_id=m.id)


def test_user_token(db):
    _add_user(db, "maria", "user_tok1")
    assert classify(db, "user_tok1") == UserIdentity(username="maria")


def test_inactive_user_is_unknown(db):
    _add_user(db, "ghost", "user_ghost", is_active=False)
    assert classify(db, "user_ghost") is None


def test_unknown_token(db):
    assert classify(db, "machine_doesnotexist") is None
    assert classify(db, "whatever") is None


def test_admin_sentinel_wins_over_machine_key(db, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_TOKEN", "machine_shared")
    _add_machine(db, "machine_shared")
    assert classify(db, "machine_shared") == ADMIN


def test_machine_key_wins_over_user_token(db):
    m = _add_machine(db, "machine_dup")
    _add_user(db, "maria", "machine_dup")
    assert classify(db, "machine_dup") == MachineIdentity(machine_id=m.id)


def test_prefix_gates_machine_lookup(db):
    # A machine whose key lacks the prefix is never found
    _add_machine(db, "legacy-key")
    assert classify(db, "legacy-key") is None


def test_machine_lookup_failure_falls_through_to_user(db, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    _add_user(db, "maria", "machine_looks_like_a_key")
    monkeypatch.setattr(token_classifier.machine_repo, "get_machine_id_by_api_key", broken)

    assert classify(db, "machine_looks_like_a_key") == UserIdentity(username="maria")


def test_user_lookup_failure_is_unknown(db, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    _add_user(db, "maria", "user_tok1")
    monkeypatch.setattr(token_classifier.user_repo, "get_active_username_by_token", broken)

    assert classify(db, "user_tok1") is None


def test_no_caching_between_calls(db):
    u = _add_user(db, "maria", "user_tok1")
    assert classify(db, "user_tok1") is not None

    u.is_active = False
    db.commit()
    assert classify(db, "user_tok1") is None
