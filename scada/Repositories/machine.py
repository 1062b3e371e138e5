# scada/Repositories/machine.py

"""
Machine Repository Module

Database access for the machines table.

Responsibilities:
- Registry reads (list, by id, by api_key)
- Machine creation
- Live-state writes from telemetry ingestion

Partial updates from the admin go through scada/Services/partial_update.py,
which uses the shared helpers in scada/Repositories/common.py.

Usage:
    from scada.Repositories import machine as machine_repo

    machines = machine_repo.get_all_machines(db)
"""

from sqlalchemy.orm import Session
from sqlalchemy import select, update
from scada.Models.machine import Machine
from scada.Schemas.machine import Machine_create
from typing import List, Optional


# ==========================================================
# 📌 READS
# ==========================================================

def get_all_machines(db: Session) -> List[Machine]:
    """
    Get all machines ordered by name.

    Args:
        db: SQLAlchemy session

    Returns:
        List of Machine objects
    """
    return db.query(Machine).order_by(Machine.name).all()


def get_machine_by_id(db: Session, machine_id: int) -> Optional[Machine]:
    """
    Get a specific machine by its ID.

    Returns:
        Machine object or None if not found
    """
    return db.query(Machine).filter(Machine.id == machine_id).first()


def get_machine_id_by_api_key(db: Session, api_key: str) -> Optional[int]:
    """
    Resolve a machine API key to the owning machine's id.

    Only the id is selected; the classifier never needs the full row.

    Returns:
        Machine id or None if no machine holds this key
    """
    stmt = select(Machine.id).where(Machine.api_key == api_key).limit(1)
    return db.execute(stmt).scalar_one_or_none()


def machine_exists(db: Session, machine_id: int) -> bool:
    """
    Check if a machine exists.

    Example:
        if not machine_exists(db, 7):
            raise NotFoundError("Machine not found")
    """
    stmt = select(Machine.id).where(Machine.id == machine_id).limit(1)
    return db.execute(stmt).first() is not None


# ==========================================================
# 📌 WRITES
# ==========================================================

def create_machine(db: Session, machine: Machine_create, api_key: str) -> Machine:
    """
    Insert a new machine with a pre-generated API key.

    Live state starts at speed 0.0, empty status, offline, last_update 0.

    Raises:
        IntegrityError: If name, code or api_key already exists
    """
    new_machine = Machine(**machine.model_dump(), api_key=api_key)
    db.add(new_machine)
    db.commit()
    db.refresh(new_machine)
    return new_machine


def update_live_state(
    db: Session,
    machine_id: int,
    speed: float,
    status_message: str,
    timestamp: int
) -> int:
    """
    Write a telemetry reading into the machine's live columns and commit.

    Always sets is_online = True. Concurrent writers for the same machine are
    serialized by the database; the last one wins.

    Returns:
        Number of rows matched (0 if the machine does not exist)
    """
    stmt = (
        update(Machine)
        .where(Machine.id == machine_id)
        .values(
            current_speed=speed,
            status_message=status_message,
            last_update=timestamp,
            is_online=True,
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount
