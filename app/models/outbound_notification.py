from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base

NOTIFICATION_PENDING = "pending"
NOTIFICATION_SENT = "sent"
NOTIFICATION_FAILED = "failed"


class OutboundNotification(Base):
    __tablename__ = "outbound_notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipients = Column(JSON, nullable=False)
    subject = Column(String(200), nullable=False)
    summary = Column(String(500), nullable=False)
    body = Column(Text, nullable=False)
    status = Column(String(20), default=NOTIFICATION_PENDING, nullable=False, index=True)
    attempts = Column(Integer, default=0, nullable=False)
    last_error = Column("lastError", Text, nullable=True)
    created_at = Column(
        "createdAt", DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    sent_at = Column("sentAt", DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<OutboundNotification(id={self.id}, subject='{self.subject}', status='{self.status}')>"
