# scada/Repositories/speed_history.py

from sqlalchemy.orm import Session
from scada.Models.speed_history import SpeedHistory
from typing import List, Optional


def append_reading(
    db: Session,
    machine_id: int,
    speed: float,
    message: Optional[str],
    timestamp: int
) -> SpeedHistory:
    """
    Append one history row and commit.

    Raises:
        SQLAlchemyError: Propagated; telemetry ingestion decides whether it matters
    """
    record = SpeedHistory(
        machine_id=machine_id,
        speed=speed,
        message=message,
        timestamp=timestamp,
    )
    db.add(record)
    db.commit()
    return record


def get_recent_history(db: Session, machine_id: int, limit: int) -> List[SpeedHistory]:
    """
    Most recent readings of one machine, newest first.

    Args:
        db: SQLAlchemy session
        machine_id: Machine to query
        limit: Maximum number of rows

    Example:
        last = get_recent_history(db, 3, limit=1)
    """
    return (
        db.query(SpeedHistory)
        .filter(SpeedHistory.machine_id == machine_id)
        .order_by(SpeedHistory.timestamp.desc(), SpeedHistory.id.desc())
        .limit(limit)
        .all()
    )
