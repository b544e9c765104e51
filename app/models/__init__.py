"""
Models package initialization
Import all models and setup relationships
"""

from .admin_user import AdminUser
from .outbound_notification import OutboundNotification
from .payment_subscription import PaymentSubscription
from .post import Post

# Import and setup relationships
from .relations import setup_relationships
from .report import Report
from .user import User

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "AdminUser",
    "OutboundNotification",
    "PaymentSubscription",
    "Post",
    "Report",
    "User",
]
