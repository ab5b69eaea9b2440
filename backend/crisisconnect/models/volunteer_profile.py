"""VolunteerProfile model: application status and task-capacity projection."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crisisconnect.database import Base, new_id, utcnow
from crisisconnect.models.enums import ApplicationStatus, VolunteerTaskStatus
from crisisconnect.models.user import User


class VolunteerProfile(Base):
    """
    A volunteer's eligibility and current task capacity.

    task_status mirrors the status of the volunteer's most recent Task.
    """

    __tablename__ = "volunteer_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True, nullable=False)

    skills: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    id_proof: Mapped[str | None] = mapped_column(String(512))
    experience_certificate: Mapped[str | None] = mapped_column(String(512))

    application_status: Mapped[int] = mapped_column(
        Integer, default=ApplicationStatus.PENDING, nullable=False
    )
    task_status: Mapped[int] = mapped_column(
        Integer, default=VolunteerTaskStatus.AVAILABLE, nullable=False
    )

    bio: Mapped[str | None] = mapped_column(Text)
    availability: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    user: Mapped[User] = relationship(lazy="selectin")

    __table_args__ = (
        Index("ix_volunteer_profiles_status", "application_status", "task_status"),
    )

    def __repr__(self) -> str:
        return f"<VolunteerProfile {self.id}: user={self.user_id} task_status={self.task_status}>"
