# scada/Models/machine.py

"""
Machine Model - Fleet Registry and Live State

This module defines the SQLAlchemy model for production machines.

A machine row carries two kinds of data:
- Registry fields set by an administrator (name, code, location, type) and
  the machine's own credential (api_key).
- Live state written by telemetry ingestion (current_speed, status_message,
  is_online, last_update). History of past readings lives in speed_history.

Database Table: machines
Primary Key: id (Integer, autoincrement)

Machines are never deleted.
"""

from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, Integer, String, Float, Boolean
from scada.DB.base_class import Base
from scada.Core.timeutil import current_timestamp


class Machine(Base):
    """
    SQLAlchemy model representing a registered machine.

    Schema:
    - id (PK): Immutable numeric identity
    - name, code: Unique human identifiers
    - api_key: Unique secret; the bearer credential the machine reports with
    - location, machine_type: Optional metadata
    - current_speed, status_message, is_online, last_update: Live state
    - created_at: Registration time (epoch seconds)

    Indexes:
    - Unique indexes on name, code and api_key (api_key is looked up on every
      telemetry request)
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "machines"

    __table_args__ = {"sqlite_autoincrement": True}

    # ============================================================
    # Identity
    # ============================================================
    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(
        String(200),
        unique=True,
        nullable=False,
        doc="Unique display name (e.g., 'Line1')"
    )

    code = Column(
        String(100),
        unique=True,
        nullable=False,
        doc="Unique short code (e.g., 'L1')"
    )

    api_key = Column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
        doc="Machine credential, namespaced by MACHINE_KEY_PREFIX"
    )

    # ============================================================
    # Metadata
    # ============================================================
    location = Column(String(200), nullable=True)
    machine_type = Column(String(100), nullable=True)

    # ============================================================
    # Live State (written by telemetry ingestion)
    # ============================================================
    current_speed = Column(Float, nullable=False, default=0.0)
    status_message = Column(String(500), nullable=False, default="")
    is_online = Column(Boolean, nullable=False, default=False)

    last_update = Column(
        Integer,
        nullable=False,
        default=0,
        doc="Epoch seconds of the last accepted reading (0 = never reported)"
    )

    created_at = Column(Integer, nullable=False, default=current_timestamp)

    def __repr__(self) -> str:
        return (
            f"<Machine(id={self.id}, code={self.code!r}, "
            f"speed={self.current_speed}, online={self.is_online})>"
        )
