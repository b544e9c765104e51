import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import db_exception
from app.models.outbound_notification import (
    NOTIFICATION_FAILED,
    NOTIFICATION_PENDING,
    NOTIFICATION_SENT,
    OutboundNotification,
)
from app.utils.email import EmailDeliveryError, EmailSender, email_sender

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Outbox for user-facing notifications.

    Services enqueue rows in the same session as the state change they
    describe, so a notification exists iff the change was committed.
    Delivery happens later in ``dispatch_pending`` and never feeds back
    into the business operation.
    """

    def __init__(self, db: Session, sender: Optional[EmailSender] = None):
        self.db = db
        self.sender = sender or email_sender

    def enqueue(
        self, recipients: List[str], subject: str, summary: str, body: str
    ) -> OutboundNotification:
        notification = OutboundNotification(
            recipients=[r for r in recipients if r],
            subject=subject,
            summary=summary,
            body=body,
            status=NOTIFICATION_PENDING,
            attempts=0,
        )
        self.db.add(notification)
        return notification

    def list(self, status: Optional[str] = None, limit: int = 50) -> List[OutboundNotification]:
        query = self.db.query(OutboundNotification)
        if status:
            query = query.filter(OutboundNotification.status == status)
        return query.order_by(OutboundNotification.id.asc()).limit(limit).all()

    @db_exception
    def dispatch_pending(self, limit: Optional[int] = None) -> dict:
        """Try to deliver pending notifications; returns sent/failed counts."""
        limit = limit or settings.notification_batch_size
        pending = self.list(NOTIFICATION_PENDING, limit)
        sent = failed = 0

        for notification in pending:
            try:
                self.sender.send(
                    notification.recipients,
                    notification.subject,
                    notification.summary,
                    notification.body,
                )
            except EmailDeliveryError as e:
                notification.attempts += 1
                notification.last_error = str(e)
                if notification.attempts >= settings.notification_max_attempts:
                    notification.status = NOTIFICATION_FAILED
                    logger.error(
                        f"Giving up on notification {notification.id} after "
                        f"{notification.attempts} attempts: {e}"
                    )
                else:
                    logger.warning(f"Notification {notification.id} not delivered: {e}")
                failed += 1
            else:
                notification.attempts += 1
                notification.status = NOTIFICATION_SENT
                notification.sent_at = datetime.now(timezone.utc)
                notification.last_error = None
                sent += 1

            # One commit per row so a crash never re-sends delivered mail
            self.db.commit()

        return {"sent": sent, "failed": failed}
