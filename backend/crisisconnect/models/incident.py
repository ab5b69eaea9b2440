"""Incident model for admin-mediated emergency reports."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crisisconnect.database import Base, new_id, utcnow
from crisisconnect.models.enums import IncidentStatus
from crisisconnect.models.user import User


class Incident(Base):
    """
    Emergency report filed by a civilian.

    Flows Pending -> Verified -> Ongoing -> Completed. verified_by/verified_at
    are set exactly when status is Verified or later.
    """

    __tablename__ = "incidents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    location: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    severity: Mapped[int] = mapped_column(Integer, nullable=False)  # 1 (very low) .. 5 (very high)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    coordinates: Mapped[list[float] | None] = mapped_column(JSON)  # [lon, lat]

    status: Mapped[int] = mapped_column(
        Integer, default=IncidentStatus.PENDING, nullable=False
    )

    reported_by_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    verified_by_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"))
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    reported_by: Mapped[User] = relationship(foreign_keys=[reported_by_id], lazy="selectin")
    verified_by: Mapped[User | None] = relationship(
        foreign_keys=[verified_by_id], lazy="selectin"
    )

    __table_args__ = (
        Index("ix_incidents_status", "status"),
        Index("ix_incidents_created_at", "created_at"),
    )

    def place(self, latitude: float, longitude: float) -> None:
        """Set the position and its derived geo-point."""
        self.latitude = latitude
        self.longitude = longitude
        self.coordinates = [longitude, latitude]

    def __repr__(self) -> str:
        return f"<Incident {self.id}: {self.type} status={self.status}>"
