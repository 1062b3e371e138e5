# scada/Models/maintenance_comment.py
from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, Integer, String, Text, ForeignKey, CheckConstraint, Index
from scada.DB.base_class import Base
from scada.Core.timeutil import current_timestamp


COMMENT_PRIORITIES = ("low", "normal", "high", "critical")


class MaintenanceComment(Base):
    """
    Append-only maintenance note attached to a machine.

    username is the attributed author as text, not a reference to users, so a
    comment outlives its author's account.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "maintenance_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Declared reference only; existence is checked by the service before insert
    machine_id = Column(Integer, ForeignKey("machines.id"), nullable=False)

    username = Column(String(64), nullable=False)
    comment = Column(Text, nullable=False)
    priority = Column(String(10), nullable=False, default="normal")
    created_at = Column(Integer, nullable=False, default=current_timestamp)

    __table_args__ = (
        Index("idx_maintenance_machine", "machine_id", "created_at"),
        CheckConstraint(
            "priority IN ('low', 'normal', 'high', 'critical')",
            name="check_comment_priority"
        ),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return (
            f"<MaintenanceComment(id={self.id}, machine_id={self.machine_id}, "
            f"priority={self.priority!r}, username={self.username!r})>"
        )
