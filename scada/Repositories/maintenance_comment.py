# scada/Repositories/maintenance_comment.py

from sqlalchemy.orm import Session
from scada.Models.maintenance_comment import MaintenanceComment
from typing import List


def create_comment(
    db: Session,
    machine_id: int,
    username: str,
    comment: str,
    priority: str,
    created_at: int
) -> MaintenanceComment:
    """Append a comment. The caller has already checked that the machine exists."""
    new_comment = MaintenanceComment(
        machine_id=machine_id,
        username=username,
        comment=comment,
        priority=priority,
        created_at=created_at,
    )
    db.add(new_comment)
    db.commit()
    db.refresh(new_comment)
    return new_comment


def get_comments_for_machine(db: Session, machine_id: int) -> List[MaintenanceComment]:
    """Comments of one machine, newest first (insertion order breaks ties)."""
    return (
        db.query(MaintenanceComment)
        .filter(MaintenanceComment.machine_id == machine_id)
        .order_by(MaintenanceComment.created_at.desc(), MaintenanceComment.id.desc())
        .all()
    )
