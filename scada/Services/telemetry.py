# scada/Services/telemetry.py

"""
Telemetry Ingestion Service
===========================

A machine reports one speed reading at a time. Each report:

1. Fixes a single timestamp (epoch seconds) used for both writes below.
2. Overwrites the machine's live columns (current_speed, status_message,
   last_update) and marks it online. This write is required: a storage
   failure or a missing machine fails the whole call.
3. Appends a row to speed_history in its own transaction. This write is
   best effort: a failure is logged and the report still succeeds.

The live row therefore always reflects the latest accepted report, while the
history may occasionally miss a reading.

Usage Example:
-------------
    ack = ingest(db, machine_id=3, speed=42.5, message="running")
    # Ack(success=True, timestamp=1700000000)
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scada.Core import log_ws
from scada.Core.config import settings
from scada.Core.errors import InternalStorageError, NotFoundError
from scada.Core.timeutil import current_timestamp
from scada.Models.speed_history import SpeedHistory
from scada.Repositories import machine as machine_repo
from scada.Repositories import speed_history as history_repo
from scada.Services.machine_service import require_machine


@dataclass(frozen=True)
class Ack:
    success: bool
    timestamp: int


def ingest(db: Session, machine_id: int, speed: float, message: Optional[str] = None) -> Ack:
    """
    Record a telemetry reading for `machine_id`.

    Raises:
        InternalStorageError: live-state write failed
        NotFoundError: machine row no longer exists
    """
    now = current_timestamp()

    try:
        matched = machine_repo.update_live_state(
            db,
            machine_id=machine_id,
            speed=speed,
            status_message=message if message is not None else "",
            timestamp=now,
        )
    except SQLAlchemyError as e:
        db.rollback()
        log_ws.log_from_thread(f"[TELEMETRY] Live state write failed for machine {machine_id}: {e}", "error")
        raise InternalStorageError("Failed to update machine") from e

    if matched == 0:
        raise NotFoundError("Machine not found")

    try:
        history_repo.append_reading(db, machine_id, speed, message, now)
    except SQLAlchemyError as e:
        db.rollback()
        log_ws.log_from_thread(
            f"[TELEMETRY] History record dropped for machine {machine_id} at {now}: {e}",
            "warning",
        )

    return Ack(success=True, timestamp=now)


def clamp_limit(limit: Optional[int]) -> int:
    """None -> HISTORY_DEFAULT_LIMIT; otherwise clamp into [1, HISTORY_MAX_LIMIT]."""
    if limit is None:
        return settings.HISTORY_DEFAULT_LIMIT
    return max(1, min(limit, settings.HISTORY_MAX_LIMIT))


def get_history(db: Session, machine_id: int, limit: Optional[int] = None) -> List[SpeedHistory]:
    """
    Newest-first readings of one machine.

    Raises:
        NotFoundError: machine does not exist
        InternalStorageError: storage failure
    """
    require_machine(db, machine_id)
    try:
        return history_repo.get_recent_history(db, machine_id, clamp_limit(limit))
    except SQLAlchemyError as e:
        raise InternalStorageError() from e
