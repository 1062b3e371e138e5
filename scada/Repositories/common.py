# scada/Repositories/common.py

"""
Shared Storage Adapter Helpers

- update_columns(): applies a list of (column, value) assignments to one row
  as a single parameterized UPDATE statement.
- is_unique_violation() / describe_conflict(): classify an IntegrityError as
  a uniqueness conflict and turn it into a user-facing message.

Column names never reach SQL text directly: every name is checked against the
model's mapped table and the statement is built by SQLAlchemy with bound
parameters for every value.
"""

import re
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session


Assignment = Tuple[str, Any]

# SQLite: "UNIQUE constraint failed: machines.code"
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: ([\w\.]+)")
# PostgreSQL: 'DETAIL:  Key (code)=(L1) already exists.'
_POSTGRES_KEY = re.compile(r"Key \((\w+)\)=")

_UNIQUE_SQLSTATE = "23505"


# ==========================================================
# 📌 PARAMETERIZED PARTIAL UPDATE
# ==========================================================

def update_columns(
    db: Session,
    model,
    record_id: int,
    assignments: Sequence[Assignment]
) -> int:
    """
    Execute UPDATE <table> SET <col> = :value, ... WHERE id = :record_id.

    Does not commit; the caller owns the transaction.

    Args:
        db: SQLAlchemy session
        model: Mapped class with an integer `id` primary key
        record_id: Primary key of the row to update
        assignments: (column, value) pairs; each column at most once

    Returns:
        Number of rows matched (0 when the id does not exist)

    Raises:
        ValueError: If a column is unknown, the primary key, or repeated.
            This signals a programming error, not bad user input.
        SQLAlchemyError: Propagated from the driver (IntegrityError included)
    """
    columns = model.__table__.c
    values = {}

    for column, value in assignments:
        if column not in columns or columns[column].primary_key:
            raise ValueError(f"{model.__name__} has no updatable column '{column}'")
        if column in values:
            raise ValueError(f"Column '{column}' assigned twice")
        values[column] = value

    stmt = (
        update(model)
        .where(model.id == record_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    return result.rowcount


# ==========================================================
# 📌 CONFLICT CLASSIFICATION
# ==========================================================

def is_unique_violation(exc: IntegrityError) -> bool:
    """
    True when the IntegrityError was caused by a unique constraint.

    Uses the driver's SQLSTATE when available (PostgreSQL 23505) and falls
    back to the driver's message text (SQLite, MySQL).
    """
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate == _UNIQUE_SQLSTATE:
        return True

    text = str(orig if orig is not None else exc).lower()
    return (
        "unique constraint" in text
        or "duplicate key" in text
        or "duplicate entry" in text
    )


def conflict_column(exc: IntegrityError) -> Optional[str]:
    """Best-effort name of the column that caused a uniqueness conflict."""
    text = str(getattr(exc, "orig", None) or exc)

    match = _SQLITE_UNIQUE.search(text)
    if match:
        # "machines.code" or "machines.name, machines.code"
        first = match.group(1).split(",")[0].strip()
        return first.split(".")[-1]

    match = _POSTGRES_KEY.search(text)
    if match:
        return match.group(1)

    return None


def describe_conflict(
    exc: IntegrityError,
    messages: Mapping[str, str],
    default: str
) -> str:
    """
    Pick the message for the conflicting column.

    Example:
        describe_conflict(e, {"code": "Machine code already exists"},
                          "Machine already exists")
    """
    column = conflict_column(exc)
    if column and column in messages:
        return messages[column]
    return default


def changed_columns(assignments: Sequence[Assignment]) -> List[str]:
    return [column for column, _ in assignments]
