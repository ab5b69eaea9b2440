"""Alert model for admin broadcast notices."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crisisconnect.database import Base, new_id, utcnow
from crisisconnect.models.enums import AlertAudience, AlertType
from crisisconnect.models.user import User


class Alert(Base):
    __tablename__ = "alerts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), default=AlertType.INFO, nullable=False)
    target_audience: Mapped[str] = mapped_column(
        String(20), default=AlertAudience.ALL, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    created_by_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    created_by: Mapped[User] = relationship(lazy="selectin")

    def __repr__(self) -> str:
        return f"<Alert {self.id}: {self.title!r}>"
