# app/models/relations.py

from sqlalchemy.orm import relationship

from .admin_user import AdminUser
from .payment_subscription import PaymentSubscription
from .post import Post
from .report import Report
from .user import User


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # 1. User to Posts (One-to-Many)
    User.posts = relationship(
        "Post",
        back_populates="owner",
        order_by="Post.created_at.desc()",
    )
    Post.owner = relationship("User", back_populates="posts")

    # 2. Admin who approved a post
    Post.approver = relationship("AdminUser", foreign_keys="Post.approved_by")

    # 3. Post to Reports (One-to-Many); report rows are removed explicitly
    Post.reports = relationship("Report", back_populates="post")
    Report.post = relationship("Post", back_populates="reports")

    # 4. User to Reports (One-to-Many) - as reporter
    User.reports = relationship(
        "Report",
        back_populates="reporter",
        foreign_keys="Report.user_id",
    )
    Report.reporter = relationship(
        "User",
        back_populates="reports",
        foreign_keys="Report.user_id",
    )

    # 5. Admin who adjudicated a report
    Report.handler = relationship("AdminUser", foreign_keys="Report.handled_by")

    # 6. User to billing records (One-to-Many, read-only)
    User.payment_subscriptions = relationship("PaymentSubscription", viewonly=True)
