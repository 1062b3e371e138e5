# scada/Services/partial_update.py

"""
Partial-Update Engine
=====================

Turns an optional-field update schema into exactly the column assignments the
caller asked for, applies them as one parameterized statement, and returns the
re-read record.

Pipeline:
---------
1. project(): pure step. Every field that is present with a non-null value is
   passed through its rule, which validates it and yields (column, value)
   pairs. Fields left out of the request are never touched.
2. Empty projection -> NoFieldsProvided, before any storage access.
3. apply_update(): one UPDATE ... WHERE id = :id through
   Repositories/common.update_columns(), then commit.
     - 0 rows matched         -> NotFoundError
     - unique constraint      -> ConflictError (409)
     - any other storage error -> InternalStorageError (500)
4. Re-read the full row. A failure here is PostUpdateReadFailed, distinct
   from a failed update: the change IS committed.

Rules:
------
    assign("name", not_blank)            value rule, validators run in order
    assign("role", one_of(USER_ROLES))
    command("api_key", generate_key)     when the field is true, assign a
                                         freshly generated value instead

Usage Example:
-------------
    RULES = {"name": assign("name", not_blank), "location": assign("location")}

    assignments = project(Machine_update(name="Line2"), RULES)
    machine = apply_update(db, Machine, 7, assignments, entity="Machine")
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from scada.Core import log_ws
from scada.Core.errors import (
    ConflictError,
    InternalStorageError,
    InvalidFieldValue,
    NoFieldsProvided,
    NotFoundError,
    PostUpdateReadFailed,
)
from scada.Repositories.common import (
    Assignment,
    changed_columns,
    describe_conflict,
    is_unique_violation,
    update_columns,
)


Validator = Callable[[str, Any], Any]
FieldRule = Callable[[str, Any], List[Assignment]]


# ============================================================
# VALIDATORS
# ============================================================

def not_blank(field: str, value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        raise InvalidFieldValue(field, f"{field} must not be empty")
    return value


def one_of(choices: Sequence[str]) -> Validator:
    def validate(field: str, value: Any) -> Any:
        if value not in choices:
            raise InvalidFieldValue(
                field, f"Invalid {field} '{value}'. Must be one of: {', '.join(choices)}"
            )
        return value
    return validate


# ============================================================
# FIELD RULES
# ============================================================

def assign(column: str, *validators: Validator) -> FieldRule:
    """Validate the value, then assign it to `column`."""
    def rule(field: str, value: Any) -> List[Assignment]:
        for validate in validators:
            value = validate(field, value)
        return [(column, value)]
    return rule


def command(column: str, generate: Callable[[], Any]) -> FieldRule:
    """
    A boolean command field. True assigns a freshly generated value to
    `column`; False contributes nothing.
    """
    def rule(field: str, value: Any) -> List[Assignment]:
        if value:
            return [(column, generate())]
        return []
    return rule


# ============================================================
# ENGINE
# ============================================================

def project(data: Optional[BaseModel], rules: Mapping[str, FieldRule]) -> List[Assignment]:
    """
    Validate and project the provided fields into (column, value) pairs.

    Args:
        data: Update schema instance; None is treated as an empty update
        rules: One rule per schema field

    Raises:
        InvalidFieldValue: A provided value failed validation
    """
    if data is None:
        return []

    assignments: List[Assignment] = []
    for field, value in data.model_dump(exclude_none=True).items():
        assignments.extend(rules[field](field, value))
    return assignments


def apply_update(
    db: Session,
    model,
    record_id: int,
    assignments: Sequence[Assignment],
    *,
    entity: str,
    conflict_messages: Optional[Dict[str, str]] = None
):
    """
    Apply projected assignments to one row and return the re-read record.

    Args:
        db: SQLAlchemy session
        model: Mapped class
        record_id: Primary key
        assignments: Output of project()
        entity: Name used in messages ("Machine", "User")
        conflict_messages: Message per conflicting column

    Raises:
        NoFieldsProvided, NotFoundError, ConflictError,
        InternalStorageError, PostUpdateReadFailed
    """
    if not assignments:
        raise NoFieldsProvided()

    try:
        matched = update_columns(db, model, record_id, assignments)
        if matched == 0:
            db.rollback()
            raise NotFoundError(f"{entity} not found")
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            message = describe_conflict(e, conflict_messages or {}, f"{entity} already exists")
            log_ws.log_from_thread(f"[UPDATE] {entity} {record_id}: {message}", "warning")
            raise ConflictError(message) from e
        log_ws.log_from_thread(f"[UPDATE] {entity} {record_id} integrity error: {e.orig}", "error")
        raise InternalStorageError(f"Failed to update {entity.lower()}") from e
    except SQLAlchemyError as e:
        db.rollback()
        log_ws.log_from_thread(f"[UPDATE] {entity} {record_id} storage error: {e}", "error")
        raise InternalStorageError(f"Failed to update {entity.lower()}") from e

    log_ws.log_from_thread(
        f"[UPDATE] {entity} {record_id} updated: {', '.join(changed_columns(assignments))}"
    )

    try:
        db.expire_all()
        record = db.get(model, record_id)
    except SQLAlchemyError as e:
        db.rollback()
        raise PostUpdateReadFailed() from e

    if record is None:
        raise PostUpdateReadFailed()
    return record
