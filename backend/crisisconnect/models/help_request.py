"""HelpRequest model for civilian aid requests claimed directly by volunteers."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crisisconnect.database import Base, new_id, utcnow
from crisisconnect.models.enums import HelpRequestCategory, HelpRequestStatus, Priority
from crisisconnect.models.user import User


class HelpRequest(Base):
    """
    Civilian request for aid.

    claimed_by is set exactly when status is claimed, in-progress or resolved.
    """

    __tablename__ = "help_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    civilian_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )

    # Location
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str | None] = mapped_column(String(255))
    coordinates: Mapped[list[float] | None] = mapped_column(JSON)  # [lon, lat]

    category: Mapped[str] = mapped_column(
        String(20), default=HelpRequestCategory.OTHER, nullable=False
    )
    priority: Mapped[str] = mapped_column(String(20), default=Priority.MEDIUM, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=HelpRequestStatus.PENDING, nullable=False
    )

    claimed_by_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"))
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified_by_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"))

    notes: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    civilian: Mapped[User] = relationship(foreign_keys=[civilian_id], lazy="selectin")
    claimed_by: Mapped[User | None] = relationship(
        foreign_keys=[claimed_by_id], lazy="selectin"
    )
    verified_by: Mapped[User | None] = relationship(
        foreign_keys=[verified_by_id], lazy="selectin"
    )

    __table_args__ = (
        # Common availability lookup: pending and unclaimed
        Index("ix_help_requests_status_claimed_by", "status", "claimed_by_id"),
        Index("ix_help_requests_created_at", "created_at"),
    )

    def place(self, latitude: float, longitude: float, address: str | None = None) -> None:
        """Set the position and its derived geo-point."""
        self.latitude = latitude
        self.longitude = longitude
        self.address = address
        self.coordinates = [longitude, latitude]

    @property
    def location(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
            "coordinates": self.coordinates,
        }

    def __repr__(self) -> str:
        return f"<HelpRequest {self.id}: {self.title!r} status={self.status}>"
