from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from app.core.database import Base


class PaymentSubscription(Base):
    """Billing record written by the payment provider webhook; read-only here."""

    __tablename__ = "payment_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        "user",
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(String(30), nullable=False)
    end_date = Column("endDate", DateTime(timezone=True), nullable=True)
    created_at = Column(
        "createdAt", DateTime(timezone=True), server_default=func.now(), nullable=False
    )
