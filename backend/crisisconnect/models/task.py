"""Task model: a unit of work an admin assigns to a volunteer."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crisisconnect.database import Base, new_id, utcnow
from crisisconnect.models.enums import TaskStatus
from crisisconnect.models.incident import Incident
from crisisconnect.models.user import User
from crisisconnect.models.volunteer_profile import VolunteerProfile


class Task(Base):
    """Task assigned by an admin, optionally tied to a verified Incident."""

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    task_type: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    incident_id: Mapped[str | None] = mapped_column(ForeignKey("incidents.id"), index=True)
    volunteer_id: Mapped[str] = mapped_column(
        ForeignKey("volunteer_profiles.id"), nullable=False
    )

    status: Mapped[int] = mapped_column(Integer, default=TaskStatus.ASSIGNED, nullable=False)

    assigned_by_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    extra_details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    notes: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    incident: Mapped[Incident | None] = relationship(lazy="selectin")
    volunteer: Mapped[VolunteerProfile] = relationship(lazy="selectin")
    assigned_by: Mapped[User] = relationship(lazy="selectin")

    __table_args__ = (
        Index("ix_tasks_volunteer_status", "volunteer_id", "status"),
        Index("ix_tasks_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.task_type} status={self.status}>"
