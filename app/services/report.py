# app/services/report.py
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.actors import Actor, Capability, require_capability
from app.core.config import settings
from app.core.decorator import db_exception
from app.core.exceptions import (
    DuplicateReportError,
    InvalidStatusError,
    NotFoundError,
    PostInactiveError,
    PostUnapprovedError,
    ReportAlreadyHandledError,
    SelfReportError,
    ValidationError,
)
from app.models.post import Post
from app.models.report import (
    ADJUDICATION_STATUSES,
    REPORT_APPROVED,
    REPORT_PENDING,
    REPORT_REJECTED,
    Report,
)
from app.models.user import User
from app.schemas.common import parse_payload
from app.schemas.report import ReportCreate
from app.services.notification import NotificationService
from app.services.post import PostService
from app.utils.templates import render_report_creation_email

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, db: Session):
        self.db = db
        self.posts = PostService(db)
        self.notifications = NotificationService(db)

    # ==================== Filing ====================

    @db_exception
    def create_report(self, actor: Actor, report_in: Union[ReportCreate, dict]) -> Report:
        """
        File a report against a public post.

        A user cannot report their own post, cannot report a post that is
        unapproved or inactive, and can report a given post only once.
        """
        require_capability(actor, Capability.REPORT_CREATE, "Only users can report posts")
        report_in = parse_payload(ReportCreate, report_in)

        post = self.posts.get_post_by_id(report_in.post_id)

        if post.user_id == actor.id:
            raise SelfReportError("Cannot report your own post")
        if not post.active:
            raise PostInactiveError("Post is already deactivated")
        if not post.approved:
            raise PostUnapprovedError("Post needs to be approved before reporting")

        existing = (
            self.db.query(Report)
            .filter(Report.user_id == actor.id, Report.post_id == post.id)
            .first()
        )
        if existing:
            raise DuplicateReportError(
                f"Report already exists for this post by {actor.email}"
            )

        report = Report(
            user_id=actor.id,
            post_id=post.id,
            reason=report_in.reason,
            status=REPORT_PENDING,
        )
        self.db.add(report)
        self.notifications.enqueue(
            [actor.email],
            "New Report",
            "A new report has been created",
            render_report_creation_email(actor.name or "", report.reason, post.title),
        )

        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race against the same reporter on the unique constraint
            self.db.rollback()
            raise DuplicateReportError(
                f"Report already exists for this post by {actor.email}"
            ) from e

        self.db.refresh(report)
        logger.info(f"Report {report.id} filed by user {actor.id} on post {post.id}")
        return report

    # ==================== Reads ====================

    @db_exception
    def get_user_reports(self, user_id: int) -> List[Report]:
        return (
            self.db.query(Report)
            .filter(Report.user_id == user_id)
            .order_by(Report.created_at.desc(), Report.id.desc())
            .all()
        )

    @db_exception
    def get_post_reports(self, post_id: int) -> List[Report]:
        return (
            self.db.query(Report)
            .filter(Report.post_id == post_id)
            .order_by(Report.created_at.desc(), Report.id.desc())
            .all()
        )

    @db_exception
    def get_report_by_id(self, report_id: int) -> Report:
        report = self.db.query(Report).filter(Report.id == report_id).first()
        if not report:
            raise NotFoundError("Report not found")
        return report

    def list_all_reports(
        self, user_email: Optional[str] = None, status: Optional[str] = None
    ) -> List[Report]:
        """
        Reports with reporter, post (and its owner) and handler loaded,
        newest first.

        This read fails open: on any internal error it logs and returns an
        empty list, so an empty result does not prove there are no reports.
        """
        try:
            query = self.db.query(Report).options(
                selectinload(Report.reporter),
                selectinload(Report.post).selectinload(Post.owner),
                selectinload(Report.handler),
            )

            if user_email:
                user = self.db.query(User).filter(User.email == user_email).first()
                if not user:
                    return []
                query = query.filter(Report.user_id == user.id)

            if status:
                query = query.filter(Report.status == status)

            return query.order_by(Report.created_at.desc(), Report.id.desc()).all()
        except Exception as e:
            logger.error(f"Failed to list reports: {e}", exc_info=True)
            self.db.rollback()
            return []

    # ==================== Admin actions ====================

    @db_exception
    def delete_reports(self, ids: Union[int, Iterable[int]], actor: Actor) -> dict:
        require_capability(
            actor, Capability.REPORT_MANAGE, "Only admin can delete reports"
        )
        if isinstance(ids, int):
            ids = [ids]
        ids = list(ids or [])

        deleted = 0
        if ids:
            deleted = (
                self.db.query(Report)
                .filter(Report.id.in_(ids))
                .delete(synchronize_session=False)
            )
            self.db.commit()

        logger.info(f"Deleted {deleted} report(s)")
        return {"message": "Report deleted", "success": True}

    @db_exception
    def adjudicate(self, report_id: int, admin: Actor, status: str) -> dict:
        """
        Resolve a pending report as ``approved`` or ``rejected``.

        Approving a report deactivates its post and closes every other
        report on that post with the same handler and timestamp. The post
        deactivation, the report update and a cascade marker on the post
        are committed together; closing the sibling reports is a separate,
        idempotent step (``reconcile_post_reports``) that can be re-run
        from the marker if the process dies in between.
        """
        if not report_id or not admin or not status:
            raise ValidationError("Missing required fields")
        if status not in ADJUDICATION_STATUSES:
            raise InvalidStatusError("Invalid status")
        require_capability(
            admin, Capability.REPORT_ADJUDICATE, "Only admin can handle reports"
        )

        report = self.get_report_by_id(report_id)
        if report.status != REPORT_PENDING:
            raise ReportAlreadyHandledError(f"Report is already {report.status}")

        # Write only while still pending; a cascade may have closed it since the read
        handled_at = datetime.now(timezone.utc)
        updated = (
            self.db.query(Report)
            .filter(Report.id == report_id, Report.status == REPORT_PENDING)
            .update(
                {
                    Report.status: status,
                    Report.handled_by: admin.id,
                    Report.handled_at: handled_at,
                },
                synchronize_session=False,
            )
        )
        if not updated:
            self.db.rollback()
            report = self.get_report_by_id(report_id)
            raise ReportAlreadyHandledError(f"Report is already {report.status}")

        if status == REPORT_APPROVED:
            post = self.posts.get_post_by_id(report.post_id)
            if post.active:
                self.posts.deactivate_post(post.id, admin, commit=False)
            post.cascade_pending = True
            post.cascade_handled_by = admin.id
            post.cascade_handled_at = handled_at

        self.db.commit()
        logger.info(f"Report {report_id} {status} by admin {admin.id}")

        if status == REPORT_APPROVED:
            self.reconcile_post_reports(report.post_id)

        return {"message": f"Report {status}", "success": True}

    @db_exception
    def reconcile_post_reports(self, post_id: int) -> int:
        """
        Close every report on a post whose cascade is still pending.

        Safe to call repeatedly: without a pending marker it does nothing.
        Returns the number of reports changed.
        """
        post = self.posts.get_post_by_id(post_id)
        if not post.cascade_pending:
            return 0

        query = self.db.query(Report).filter(
            Report.post_id == post.id,
            Report.status != REPORT_APPROVED,
        )
        if not settings.moderation_cascade_overwrites_rejected:
            query = query.filter(Report.status != REPORT_REJECTED)

        changed = query.update(
            {
                Report.status: REPORT_APPROVED,
                Report.handled_by: post.cascade_handled_by,
                Report.handled_at: post.cascade_handled_at,
            },
            synchronize_session=False,
        )

        post.cascade_pending = False
        post.cascade_handled_by = None
        post.cascade_handled_at = None
        self.db.commit()

        logger.info(f"Cascade closed {changed} report(s) on post {post_id}")
        return changed

    @db_exception
    def reconcile_pending_cascades(self) -> int:
        """Finish every cascade left pending, e.g. after a crash."""
        post_ids = [
            post_id
            for (post_id,) in self.db.query(Post.id)
            .filter(Post.cascade_pending.is_(True))
            .all()
        ]
        total = 0
        for post_id in post_ids:
            total += self.reconcile_post_reports(post_id)
        return total
