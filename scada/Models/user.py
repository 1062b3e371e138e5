# scada/Models/user.py

"""
User Model - Human Operators

Operators log in with username/password and receive their bearer token.
Passwords and tokens are stored as plain strings and compared directly.

Database Table: users
"""

from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint
from scada.DB.base_class import Base
from scada.Core.timeutil import current_timestamp


USER_ROLES = ("admin", "manager", "technician")


class User(Base):
    """
    SQLAlchemy model representing an operator account.

    Note:
        role == "admin" on a user row does NOT grant admin capabilities.
        Only the ADMIN_TOKEN sentinel classifies as Admin; the seeded admin
        user holds that token.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    username = Column(String(64), unique=True, nullable=False, index=True)
    password = Column(String(256), nullable=False)
    role = Column(String(20), nullable=False)

    token = Column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
        doc="Session credential presented as the bearer token"
    )

    is_active = Column(
        Boolean,
        nullable=False,
        default=True,
        doc="Inactive users can neither log in nor authenticate with their token"
    )

    created_at = Column(Integer, nullable=False, default=current_timestamp)

    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'manager', 'technician')",
            name="check_user_role"
        ),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r}, role={self.role!r})>"
