# scada/Services/machine_service.py

"""
Machine Service

Registration and admin partial update of machines, with storage failures
classified into the error taxonomy (conflict vs. internal).
"""

from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from scada.Core import log_ws
from scada.Core.errors import ConflictError, InternalStorageError, NotFoundError
from scada.Models.machine import Machine
from scada.Repositories import machine as machine_repo
from scada.Repositories.common import describe_conflict, is_unique_violation
from scada.Schemas.machine import Machine_create, Machine_update
from scada.Services.credentials import generate_machine_api_key
from scada.Services.partial_update import apply_update, assign, command, not_blank, project


MACHINE_UPDATE_RULES = {
    "name": assign("name", not_blank),
    "code": assign("code", not_blank),
    "location": assign("location"),
    "machine_type": assign("machine_type"),
    "regenerate_api_key": command("api_key", generate_machine_api_key),
}

MACHINE_CONFLICTS = {
    "name": "Machine name already exists",
    "code": "Machine code already exists",
    "api_key": "Generated API key collided, please retry",
}


def list_machines(db: Session) -> List[Machine]:
    try:
        return machine_repo.get_all_machines(db)
    except SQLAlchemyError as e:
        raise InternalStorageError() from e


def get_machine(db: Session, machine_id: int) -> Machine:
    try:
        machine = machine_repo.get_machine_by_id(db, machine_id)
    except SQLAlchemyError as e:
        raise InternalStorageError() from e
    if machine is None:
        raise NotFoundError("Machine not found")
    return machine


def require_machine(db: Session, machine_id: int) -> None:
    """Raise NotFoundError unless the machine exists (logical foreign key check)."""
    try:
        exists = machine_repo.machine_exists(db, machine_id)
    except SQLAlchemyError as e:
        raise InternalStorageError() from e
    if not exists:
        raise NotFoundError("Machine not found")


def create_machine(db: Session, data: Machine_create) -> Machine:
    """
    Register a machine with a freshly generated API key.

    Raises:
        InvalidFieldValue: blank name or code
        ConflictError: name, code (or, improbably, api_key) already taken
        InternalStorageError: any other storage failure
    """
    not_blank("name", data.name)
    not_blank("code", data.code)

    api_key = generate_machine_api_key()
    try:
        machine = machine_repo.create_machine(db, data, api_key)
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            message = describe_conflict(e, MACHINE_CONFLICTS, "Machine already exists")
            log_ws.log_from_thread(f"[MACHINES] Create rejected: {message}", "warning")
            raise ConflictError(message) from e
        raise InternalStorageError("Failed to create machine") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalStorageError("Failed to create machine") from e

    log_ws.log_from_thread(f"[MACHINES] Registered machine {machine.id} ({machine.code})")
    return machine


def update_machine(db: Session, machine_id: int, data: Machine_update) -> Machine:
    """
    Admin partial update.

    Raises:
        NoFieldsProvided, InvalidFieldValue, NotFoundError, ConflictError,
        InternalStorageError, PostUpdateReadFailed
    """
    assignments = project(data, MACHINE_UPDATE_RULES)
    return apply_update(
        db, Machine, machine_id, assignments,
        entity="Machine",
        conflict_messages=MACHINE_CONFLICTS,
    )
