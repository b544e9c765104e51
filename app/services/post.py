# app/services/post.py
import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.actors import Actor, Capability, require_capability
from app.core.decorator import db_exception
from app.core.exceptions import (
    AlreadyApprovedError,
    AuthorizationError,
    ConflictError,
    InactiveError,
    NotDeactivatedError,
    NotFoundError,
    ValidationError,
)
from app.models.post import Post
from app.models.report import Report
from app.models.user import User
from app.schemas.common import parse_payload
from app.schemas.post import AdminPostFilters, PostCreate, PostFilters, PostUpdate
from app.services.notification import NotificationService
from app.utils.file_upload import PhotoStorage, photo_storage
from app.utils.templates import (
    render_post_approval_email,
    render_post_creation_email,
    render_post_deactivation_email,
)

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _contains(column, value: str):
    """Case-insensitive substring match."""
    return column.ilike(f"%{_escape_like(value)}%", escape="\\")


def _present(value) -> bool:
    # 0 and False are real filter values; only missing or blank input is dropped
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


class PostService:
    def __init__(self, db: Session, storage: Optional[PhotoStorage] = None):
        self.db = db
        self.storage = storage or photo_storage
        self.notifications = NotificationService(db)

    # ==================== Creation ====================

    @db_exception
    async def create_post(
        self,
        actor: Actor,
        post_in: Union[PostCreate, dict],
        photos: Optional[List[UploadFile]] = None,
    ) -> Post:
        """Create an unapproved, active listing owned by ``actor``."""
        require_capability(actor, Capability.POST_CREATE, "Only users can create posts")
        data = parse_payload(PostCreate, post_in)

        owner = self.db.query(User).filter(User.id == actor.id).first()
        if not owner:
            raise NotFoundError("User not found")

        # Photos are stored before the row is written; a failed write leaves
        # orphaned files behind rather than a post without its photos.
        photo_urls = await self.storage.upload(owner.id, photos)

        post = Post(
            **data.model_dump(),
            user_id=owner.id,
            photos=photo_urls,
            approved=False,
            active=True,
        )
        self.db.add(post)
        self.notifications.enqueue(
            [owner.email],
            "New Post",
            "A new post has been created",
            render_post_creation_email(owner.name, post.title),
        )

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError("Post is missing required fields") from e

        self.db.refresh(post)
        logger.info(f"Post {post.id} created by user {owner.id}")
        return post

    # ==================== Reads ====================

    @db_exception
    def get_post_by_id(self, post_id: int) -> Post:
        if not post_id:
            raise ValidationError("Post ID is required")

        post = self.db.query(Post).filter(Post.id == post_id).first()
        if not post:
            raise NotFoundError("Post not found")
        return post

    @db_exception
    def get_user_posts(self, user_id: int) -> List[Post]:
        return (
            self.db.query(Post)
            .filter(Post.user_id == user_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )

    def _listing_query(self):
        return self.db.query(Post).options(
            selectinload(Post.owner),
            selectinload(Post.approver),
        )

    @db_exception
    def list_public_posts(self, filters: Optional[PostFilters] = None) -> List[Post]:
        """Approved and active posts matching the search filters, newest first."""
        filters = filters or PostFilters()
        query = self._listing_query().filter(
            Post.approved.is_(True), Post.active.is_(True)
        )

        minimums = {
            "price_min": Post.price,
            "bed_count": Post.bed_count,
            "bath_count": Post.bath_count,
            "number_of_spots": Post.number_of_spots,
            "start_date_range": Post.start_date_range,
        }
        maximums = {
            "price_max": Post.price,
            "end_date_range": Post.end_date_range,
        }
        substrings = {
            "city": Post.city,
            "state": Post.state,
            "zip": Post.zip,
            "title": Post.title,
            "description": Post.description,
        }

        for field, column in minimums.items():
            value = getattr(filters, field)
            if _present(value):
                query = query.filter(column >= value)

        for field, column in maximums.items():
            value = getattr(filters, field)
            if _present(value):
                query = query.filter(column <= value)

        for field, column in substrings.items():
            value = getattr(filters, field)
            if _present(value):
                query = query.filter(_contains(column, value.strip()))

        return query.order_by(Post.created_at.desc(), Post.id.desc()).all()

    @db_exception
    def list_all_posts(self, filters: Optional[AdminPostFilters] = None) -> List[Post]:
        """Every post, for moderation screens. Unknown ``user_email`` yields []."""
        filters = filters or AdminPostFilters()
        query = self._listing_query()

        if _present(filters.user_email):
            user = self.db.query(User).filter(User.email == filters.user_email).first()
            if not user:
                return []
            query = query.filter(Post.user_id == user.id)

        if filters.approved is not None:
            query = query.filter(Post.approved.is_(filters.approved))
        if filters.active is not None:
            query = query.filter(Post.active.is_(filters.active))
        if _present(filters.title):
            query = query.filter(_contains(Post.title, filters.title.strip()))
        if _present(filters.description):
            query = query.filter(_contains(Post.description, filters.description.strip()))

        return query.order_by(Post.created_at.desc(), Post.id.desc()).all()

    # ==================== Owner updates ====================

    @db_exception
    def update_post(
        self, actor: Actor, post_id: int, fields: Union[PostUpdate, dict]
    ) -> Post:
        """Apply whitelisted field changes; anything else is ignored."""
        post = self.get_post_by_id(post_id)
        if not actor.is_user or post.user_id != actor.id:
            raise AuthorizationError("Only the post owner can update this post")

        changes = parse_payload(PostUpdate, fields).model_dump(exclude_none=True)
        if not changes:
            return post

        for field, value in changes.items():
            setattr(post, field, value)

        self.db.commit()
        self.db.refresh(post)
        logger.info(f"Post {post_id} updated: {', '.join(sorted(changes))}")
        return post

    # ==================== Moderation ====================

    @db_exception
    def approve_post(self, post_id: int, admin: Actor) -> Post:
        """
        Approve a post exactly once.

        The write is conditional on the post still being unapproved and
        active, so of two concurrent approvals only one lands; the other
        re-reads the row and fails the same way a late caller would.
        """
        if not post_id:
            raise ValidationError("Post ID is required")
        require_capability(admin, Capability.POST_APPROVE, "Only admin can approve posts")

        post = self.get_post_by_id(post_id)
        if post.approved:
            raise AlreadyApprovedError("Post already approved")
        if not post.active:
            raise InactiveError("Post is not active")

        updated = (
            self.db.query(Post)
            .filter(
                Post.id == post_id,
                Post.approved.is_(False),
                Post.active.is_(True),
            )
            .update(
                {
                    Post.approved: True,
                    Post.approved_by: admin.id,
                    Post.approved_at: datetime.now(timezone.utc),
                },
                synchronize_session=False,
            )
        )

        if not updated:
            self.db.rollback()
            post = self.get_post_by_id(post_id)
            if post.approved:
                raise AlreadyApprovedError("Post already approved")
            raise InactiveError("Post is not active")

        owner = post.owner
        self.notifications.enqueue(
            [owner.email],
            "Post Approved",
            "Your post has been approved",
            render_post_approval_email(owner.name, post.title),
        )
        self.db.commit()
        self.db.refresh(post)

        logger.info(f"Post {post_id} approved by admin {admin.id}")
        return post

    def approve_all_posts(self, admin: Actor) -> dict:
        require_capability(admin, Capability.POST_APPROVE, "Only admin can approve posts")

        pending = self.list_all_posts(AdminPostFilters(approved=False, active=True))
        if not pending:
            raise NotFoundError("No posts to approve")

        approved = failed = 0
        for post in pending:
            try:
                self.approve_post(post.id, admin)
                approved += 1
            except ConflictError as e:
                # Approved or deactivated by someone else in the meantime
                logger.warning(f"Skipping post {post.id}: {e.message}")
                failed += 1

        return {
            "message": "All posts approved",
            "success": True,
            "approved": approved,
            "failed": failed,
        }

    @db_exception
    def deactivate_post(self, post_id: int, actor: Actor, commit: bool = True) -> Post:
        """
        Set ``active`` to False. Deactivation is terminal; calling this on
        an inactive post raises NotDeactivatedError.

        With ``commit=False`` the change stays in the caller's transaction.
        """
        require_capability(
            actor, Capability.POST_DEACTIVATE, "Only admin can deactivate posts"
        )
        post = self.get_post_by_id(post_id)

        updated = (
            self.db.query(Post)
            .filter(Post.id == post_id, Post.active.is_(True))
            .update({Post.active: False}, synchronize_session=False)
        )
        if not updated:
            raise NotDeactivatedError("Post not deactivated")

        owner = post.owner
        self.notifications.enqueue(
            [owner.email],
            "Post Deactivated",
            "Your post has been deactivated",
            render_post_deactivation_email(owner.name, post.title),
        )

        if commit:
            self.db.commit()
            self.db.refresh(post)
        logger.info(f"Post {post_id} deactivated")
        return post

    @db_exception
    def delete_post(self, post_id: int, actor: Optional[Actor] = None) -> dict:
        """
        Delete a post together with every report filed against it.

        Users may only delete their own posts; admins and internal callers
        (no actor) may delete any.
        """
        post = self.get_post_by_id(post_id)
        if (
            actor is not None
            and not actor.can(Capability.POST_MODERATE)
            and post.user_id != actor.id
        ):
            raise AuthorizationError("Only the post owner can delete this post")

        deleted_reports = (
            self.db.query(Report)
            .filter(Report.post_id == post.id)
            .delete(synchronize_session=False)
        )
        self.db.query(Post).filter(Post.id == post.id).delete(synchronize_session=False)
        self.db.commit()

        logger.info(f"Post {post_id} deleted along with {deleted_reports} report(s)")
        return {"message": "Post deleted", "success": True}
