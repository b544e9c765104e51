# app/models/report.py
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from app.core.database import Base

REPORT_PENDING = "pending"
REPORT_APPROVED = "approved"
REPORT_REJECTED = "rejected"
ADJUDICATION_STATUSES = (REPORT_APPROVED, REPORT_REJECTED)


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (UniqueConstraint("user", "post", name="uq_reports_user_post"),)

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    user_id = Column(
        "user", Integer, ForeignKey("users.id"), nullable=False, index=True
    )  # User who reported
    post_id = Column("post", Integer, ForeignKey("posts.id"), nullable=False, index=True)
    handled_by = Column(
        "handledBy", Integer, ForeignKey("admin_users.id"), nullable=True
    )  # Admin who adjudicated

    # Report Details
    reason = Column(Text, nullable=False)
    status = Column(
        String(20), default=REPORT_PENDING, nullable=False, index=True
    )  # pending, approved, rejected

    # Timestamps
    created_at = Column(
        "createdAt", DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    handled_at = Column("handledAt", DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Report(id={self.id}, post_id={self.post_id}, status='{self.status}')>"
