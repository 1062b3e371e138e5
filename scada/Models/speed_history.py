# scada/Models/speed_history.py
from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, Integer, String, Float, ForeignKey, Index
from scada.DB.base_class import Base


class SpeedHistory(Base):
    """
    One immutable row per accepted telemetry reading.

    Ordered by (timestamp, id): timestamps have one-second resolution, so the
    autoincrement id breaks ties in insertion order.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "speed_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    machine_id = Column(Integer, ForeignKey("machines.id"), nullable=False)
    speed = Column(Float, nullable=False)
    message = Column(String(500), nullable=True)

    # Same value as machines.last_update written by the same ingestion call
    timestamp = Column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_speed_history_machine_ts", "machine_id", "timestamp", "id"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return (
            f"<SpeedHistory(id={self.id}, machine_id={self.machine_id}, "
            f"speed={self.speed}, timestamp={self.timestamp})>"
        )
