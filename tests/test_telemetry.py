import pytest
from sqlalchemy.exc import OperationalError

from scada.Core.config import settings
from scada.Core.errors import InternalStorageError, NotFoundError
from scada.Models.machine import Machine
from scada.Models.speed_history import SpeedHistory
from scada.Schemas.machine import Machine_create
from scada.Services import machine_service, telemetry


@pytest.fixture
def line1(db):
    return machine_service.create_machine(db, Machine_create(name="Line1", code="L1"))


def test_ingest_updates_live_state_and_history(db, line1):
    ack = telemetry.ingest(db, line1.id, 42.5, "running")
    assert ack.success is True

    db.expire_all()
    m = db.get(Machine, line1.id)
    assert m.current_speed == 42.5
    assert m.status_message == "running"
    assert m.is_online is True
    assert m.last_update == ack.timestamp

    history = telemetry.get_history(db, line1.id)
    assert len(history) == 1
    assert history[0].timestamp == ack.timestamp
    assert history[0].message == "running"


def test_ingest_without_message(db, line1):
    ack = telemetry.ingest(db, line1.id, 10.0)

    db.expire_all()
    assert db.get(Machine, line1.id).status_message == ""
    record = telemetry.get_history(db, line1.id, limit=1)[0]
    assert record.message is None
    assert record.timestamp == ack.timestamp


def test_ingest_unknown_machine(db):
    with pytest.raises(NotFoundError):
        telemetry.ingest(db, 9999, 1.0)
    assert db.query(SpeedHistory).count() == 0


def test_history_failure_is_swallowed(db, line1, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(telemetry.history_repo, "append_reading", broken)
    ack = telemetry.ingest(db, line1.id, 7.0)
    assert ack.success is True

    db.expire_all()
    assert db.get(Machine, line1.id).current_speed == 7.0
    assert db.query(SpeedHistory).count() == 0


def test_live_state_failure_fails_call(db, line1, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("UPDATE", {}, Exception("database is locked"))

    monkeypatch.setattr(telemetry.machine_repo, "update_live_state", broken)
    with pytest.raises(InternalStorageError) as exc:
        telemetry.ingest(db, line1.id, 7.0)
    assert exc.value.message == "Failed to update machine"
    assert db.query(SpeedHistory).count() == 0


def test_history_newest_first_and_limited(db, line1):
    for ts, speed in [(100, 1.0), (300, 3.0), (200, 2.0)]:
        db.add(SpeedHistory(machine_id=line1.id, speed=speed, timestamp=ts))
    db.commit()

    history = telemetry.get_history(db, line1.id, limit=2)
    assert [h.speed for h in history] == [3.0, 2.0]


def test_history_unknown_machine(db):
    with pytest.raises(NotFoundError):
        telemetry.get_history(db, 9999)


def test_clamp_limit(monkeypatch):
    monkeypatch.setattr(settings, "HISTORY_MAX_LIMIT", 50)
    assert telemetry.clamp_limit(None) == settings.HISTORY_DEFAULT_LIMIT
    assert telemetry.clamp_limit(10) == 10
    assert telemetry.clamp_limit(500) == 50
