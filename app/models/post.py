# app/models/post.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func

from app.core.database import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)

    # Owner
    user_id = Column("user", Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Listing details
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    bed_count = Column("bedCount", Integer, nullable=True)
    bath_count = Column("bathCount", Integer, nullable=True)
    number_of_spots = Column("numberOfSpots", Integer, nullable=True)
    start_date_range = Column("startDateRange", DateTime(timezone=True), nullable=True)
    end_date_range = Column("endDateRange", DateTime(timezone=True), nullable=True)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=False)
    zip = Column(String(20), nullable=False)
    photos = Column(JSON, nullable=False, default=list)

    # Lifecycle: visible in public listings iff approved and active
    active = Column(Boolean, default=True, nullable=False, index=True)
    approved = Column(Boolean, default=False, nullable=False, index=True)
    approved_by = Column(
        "approvedBy", Integer, ForeignKey("admin_users.id"), nullable=True
    )
    approved_at = Column("approvedAt", DateTime(timezone=True), nullable=True)

    # Set while sibling reports still have to be closed after an approved report
    cascade_pending = Column("cascadePending", Boolean, default=False, nullable=False)
    cascade_handled_by = Column(
        "cascadeHandledBy", Integer, ForeignKey("admin_users.id"), nullable=True
    )
    cascade_handled_at = Column("cascadeHandledAt", DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(
        "createdAt", DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        "updatedAt",
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<Post(id={self.id}, user_id={self.user_id}, approved={self.approved}, active={self.active})>"
