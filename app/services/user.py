# app/services/user.py
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.core.actors import Actor, Capability, require_capability
from app.core.decorator import db_exception
from app.core.exceptions import NotFoundError
from app.models.payment_subscription import PaymentSubscription
from app.models.post import Post
from app.models.report import Report
from app.models.user import User
from app.schemas.user import UserDirectoryEntry
from app.services.post import PostService
from app.services.subscription_status import resolve_subscription_status

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    @db_exception
    def get_user_by_id(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found by id")
        return user

    @db_exception
    def list_users(self, email: Optional[str] = None) -> List[UserDirectoryEntry]:
        """Users with their post count and derived subscription status."""
        post_counts = (
            self.db.query(
                Post.user_id.label("owner_id"),
                func.count(Post.id).label("number_of_posts"),
            )
            .group_by(Post.user_id)
            .subquery()
        )
        query = (
            self.db.query(User, func.coalesce(post_counts.c.number_of_posts, 0))
            .outerjoin(post_counts, post_counts.c.owner_id == User.id)
            .options(selectinload(User.payment_subscriptions))
        )
        if email:
            query = query.filter(User.email == email)

        now = datetime.now(timezone.utc)
        return [
            UserDirectoryEntry(
                id=user.id,
                name=user.name,
                email=user.email,
                number_of_posts=number_of_posts,
                subscription_status=resolve_subscription_status(
                    user.payment_subscriptions, now
                ),
            )
            for user, number_of_posts in query.order_by(User.created_at.desc()).all()
        ]

    def get_subscription_status(self, user_id: int) -> str:
        user = self.get_user_by_id(user_id)
        return resolve_subscription_status(user.payment_subscriptions)

    @db_exception
    def users_created_between(self, start: datetime, end: datetime) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.created_at >= start, User.created_at <= end)
            .order_by(User.created_at.desc())
            .all()
        )

    def users_created_last_30_days(self) -> List[User]:
        now = datetime.now(timezone.utc)
        return self.users_created_between(now - timedelta(days=30), now)

    @db_exception
    def delete_user(self, user_id: int, actor: Actor) -> dict:
        """Delete a user and every post they own (each cascading to its reports)."""
        require_capability(
            actor, Capability.USER_MANAGE, "Only admin can delete users"
        )
        user = self.get_user_by_id(user_id)
        post_service = PostService(self.db)

        for post in post_service.get_user_posts(user.id):
            post_service.delete_post(post.id)

        self.db.query(Report).filter(Report.user_id == user.id).delete(
            synchronize_session=False
        )
        self.db.query(PaymentSubscription).filter(
            PaymentSubscription.user_id == user.id
        ).delete(synchronize_session=False)
        self.db.query(User).filter(User.id == user.id).delete(synchronize_session=False)
        self.db.commit()
        logger.info(f"User {user_id} deleted")

        return {"message": "User deleted", "success": True}
