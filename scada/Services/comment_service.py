# scada/Services/comment_service.py

from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scada.Core.errors import InternalStorageError, InvalidFieldValue
from scada.Core.timeutil import current_timestamp
from scada.Models.maintenance_comment import COMMENT_PRIORITIES, MaintenanceComment
from scada.Repositories import maintenance_comment as comment_repo
from scada.Schemas.maintenance_comment import Comment_create
from scada.Services.machine_service import require_machine
from scada.Services.partial_update import one_of


DEFAULT_PRIORITY = "normal"

validate_priority = one_of(COMMENT_PRIORITIES)


def add_comment(db: Session, machine_id: int, author: str, data: Comment_create) -> MaintenanceComment:
    """
    Append a maintenance comment attributed to `author`.

    Raises:
        NotFoundError: machine does not exist
        InvalidFieldValue: unknown priority or blank comment
        InternalStorageError: storage failure
    """
    require_machine(db, machine_id)

    priority = data.priority if data.priority is not None else DEFAULT_PRIORITY
    validate_priority("priority", priority)
    if not data.comment.strip():
        raise InvalidFieldValue("comment", "comment must not be empty")

    try:
        return comment_repo.create_comment(
            db,
            machine_id=machine_id,
            username=author,
            comment=data.comment,
            priority=priority,
            created_at=current_timestamp(),
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalStorageError("Failed to add comment") from e


def list_comments(db: Session, machine_id: int) -> List[MaintenanceComment]:
    require_machine(db, machine_id)
    try:
        return comment_repo.get_comments_for_machine(db, machine_id)
    except SQLAlchemyError as e:
        raise InternalStorageError() from e
