"""Help request model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class HelpRequest(Base):
    """Emergency-assistance request submitted by a requester."""

    __tablename__ = "requests"
    __table_args__ = (
        UniqueConstraint("latitude", "longitude", name="uq_requests_location"),
        # assigned_to is set exactly when the request has left pending
        CheckConstraint(
            "(assigned_to IS NULL) = (lower(status) = 'pending')",
            name="ck_requests_assignment_matches_status",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)  # Medical | Rescue | Supplies | Shelter | Other
    urgency: Mapped[str] = mapped_column(String(20), nullable=False)  # Low | Medium | High | Critical
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)  # pending | accepted | completed | emergency
    assigned_to: Mapped[int | None] = mapped_column(
        ForeignKey("volunteers.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
