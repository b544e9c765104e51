from datetime import datetime, timezone

import pytest

from app.core.actors import Actor
from app.core.config import settings
from app.core.exceptions import (
    AuthorizationError,
    DuplicateReportError,
    InvalidStatusError,
    NotFoundError,
    PostInactiveError,
    PostUnapprovedError,
    ReportAlreadyHandledError,
    SelfReportError,
    ValidationError,
)
from app.models import AdminUser, OutboundNotification, Post, Report, User
from app.services.post import PostService
from app.services.report import ReportService
from tests.conftest import FakePhotoStorage, run


def file_report(db, actor, post, reason="Misleading photos"):
    return ReportService(db).create_report(actor, {"postId": post.id, "reason": reason})


class TestCreateReport:
    def test_files_pending_report(self, db, owner, reporter, reporter_actor, make_post):
        post = make_post(owner)
        report = file_report(db, reporter_actor, post)

        assert report.status == "pending"
        assert report.user_id == reporter.id
        assert report.post_id == post.id
        assert [n.subject for n in db.query(OutboundNotification)] == ["New Report"]

    def test_duplicate(self, db, owner, reporter_actor, make_post):
        post = make_post(owner)
        file_report(db, reporter_actor, post)
        with pytest.raises(DuplicateReportError):
            file_report(db, reporter_actor, post)
        assert db.query(Report).count() == 1

    def test_self_report_regardless_of_state(self, db, owner, owner_actor, make_post):
        for approved, active in [(True, True), (False, True), (True, False)]:
            post = make_post(owner, approved=approved, active=active)
            with pytest.raises(SelfReportError):
                file_report(db, owner_actor, post)
        assert db.query(Report).count() == 0

    def test_unapproved_post(self, db, owner, reporter_actor, make_post):
        post = make_post(owner, approved=False)
        with pytest.raises(PostUnapprovedError):
            file_report(db, reporter_actor, post)
        assert db.query(Report).count() == 0

    def test_inactive_post(self, db, owner, reporter_actor, make_post):
        post = make_post(owner, active=False)
        with pytest.raises(PostInactiveError):
            file_report(db, reporter_actor, post)
        assert db.query(Report).count() == 0

    def test_missing_post(self, db, reporter_actor):
        with pytest.raises(NotFoundError):
            ReportService(db).create_report(reporter_actor, {"postId": 404, "reason": "x"})

    def test_missing_reason(self, db, owner, reporter_actor, make_post):
        post = make_post(owner)
        with pytest.raises(ValidationError):
            ReportService(db).create_report(reporter_actor, {"postId": post.id})

    def test_admin_cannot_file(self, db, owner, admin_actor, make_post):
        post = make_post(owner)
        with pytest.raises(AuthorizationError):
            file_report(db, admin_actor, post)


class TestAdjudicate:
    def test_reject_leaves_post_alone(self, db, owner, reporter_actor, admin, admin_actor, make_post):
        post = make_post(owner)
        report = file_report(db, reporter_actor, post)

        ReportService(db).adjudicate(report.id, admin_actor, "rejected")

        db.refresh(report)
        db.refresh(post)
        assert report.status == "rejected"
        assert report.handled_by == admin.id
        assert post.active is True

    def test_approve_deactivates_and_cascades(
        self, db, owner, make_user, admin, admin_actor, make_post, make_report
    ):
        post = make_post(owner)
        approved = make_report(make_user(), post)
        sibling = make_report(make_user(), post)
        rejected = make_report(make_user(), post, status="rejected")
        unrelated = make_report(make_user(), make_post(owner))

        ReportService(db).adjudicate(approved.id, admin_actor, "approved")

        db.expire_all()
        post = db.get(Post, post.id)
        assert post.active is False
        assert post.cascade_pending is False

        reports = {r.id: r for r in db.query(Report).all()}
        handled_at = reports[approved.id].handled_at
        for report_id in (approved.id, sibling.id, rejected.id):
            assert reports[report_id].status == "approved"
            assert reports[report_id].handled_by == admin.id
            assert reports[report_id].handled_at == handled_at
        assert reports[unrelated.id].status == "pending"

        subjects = [n.subject for n in db.query(OutboundNotification)]
        assert subjects.count("Post Deactivated") == 1

    def test_cascade_can_keep_rejected_reports(
        self, db, owner, make_user, admin_actor, make_post, make_report, monkeypatch
    ):
        monkeypatch.setattr(settings, "moderation_cascade_overwrites_rejected", False)
        post = make_post(owner)
        approved = make_report(make_user(), post)
        rejected = make_report(make_user(), post, status="rejected")

        ReportService(db).adjudicate(approved.id, admin_actor, "approved")

        db.expire_all()
        assert db.get(Report, rejected.id).status == "rejected"

    def test_invalid_status(self, db, owner, reporter_actor, admin_actor, make_post):
        report = file_report(db, reporter_actor, make_post(owner))
        with pytest.raises(InvalidStatusError):
            ReportService(db).adjudicate(report.id, admin_actor, "pending")

    def test_missing_fields(self, db, admin_actor):
        with pytest.raises(ValidationError):
            ReportService(db).adjudicate(None, admin_actor, "approved")

    def test_user_cannot_adjudicate(self, db, owner, reporter_actor, owner_actor, make_post):
        report = file_report(db, reporter_actor, make_post(owner))
        with pytest.raises(AuthorizationError):
            ReportService(db).adjudicate(report.id, owner_actor, "approved")

    def test_missing_report(self, db, admin_actor):
        with pytest.raises(NotFoundError):
            ReportService(db).adjudicate(12345, admin_actor, "rejected")

    def test_handled_report_cannot_be_adjudicated_again(
        self, db, owner, reporter_actor, admin_actor, make_post
    ):
        report = file_report(db, reporter_actor, make_post(owner))
        service = ReportService(db)
        service.adjudicate(report.id, admin_actor, "rejected")
        with pytest.raises(ReportAlreadyHandledError):
            service.adjudicate(report.id, admin_actor, "approved")

    def test_stale_rejection_does_not_undo_cascade(self, open_session):
        setup = open_session()
        owner = User(name="Olivia", email="olivia@example.com")
        first = User(name="Rita", email="rita@example.com")
        second = User(name="Sam", email="sam@example.com")
        admin = AdminUser(
            first_name="Ada", last_name="Admin", email="ada@example.com"
        )
        setup.add_all([owner, first, second, admin])
        setup.flush()
        post = Post(
            user_id=owner.id,
            title="Garden flat",
            price=800,
            city="Austin",
            state="TX",
            zip="78702",
            photos=[],
            approved=True,
            active=True,
        )
        setup.add(post)
        setup.flush()
        approved = Report(user_id=first.id, post_id=post.id, reason="Scam")
        sibling = Report(user_id=second.id, post_id=post.id, reason="Fake")
        setup.add_all([approved, sibling])
        setup.commit()
        approved_id, sibling_id, admin_id = approved.id, sibling.id, admin.id
        post_id = post.id

        slow, fast = open_session(), open_session()
        assert slow.get(Report, sibling_id).status == "pending"

        ReportService(fast).adjudicate(
            approved_id, Actor.for_admin(fast.get(AdminUser, admin_id)), "approved"
        )

        with pytest.raises(ReportAlreadyHandledError):
            ReportService(slow).adjudicate(
                sibling_id, Actor.for_admin(slow.get(AdminUser, admin_id)), "rejected"
            )

        check = open_session()
        assert check.get(Report, sibling_id).status == "approved"
        assert check.get(Post, post_id).active is False


class TestReconcile:
    def test_pending_cascade_is_finished(
        self, db, owner, make_user, admin, make_post, make_report
    ):
        # State left behind by a crash right after the primary commit
        handled_at = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        post = make_post(owner, active=False)
        make_report(make_user(), post, status="approved")
        leftover = make_report(make_user(), post)
        post.cascade_pending = True
        post.cascade_handled_by = admin.id
        post.cascade_handled_at = handled_at
        db.commit()

        service = ReportService(db)
        assert service.reconcile_pending_cascades() == 1
        assert service.reconcile_pending_cascades() == 0

        db.expire_all()
        leftover = db.get(Report, leftover.id)
        assert leftover.status == "approved"
        assert leftover.handled_by == admin.id
        assert db.get(Post, post.id).cascade_pending is False

    def test_reconcile_without_marker_is_a_no_op(self, db, owner, reporter, make_post, make_report):
        post = make_post(owner)
        report = make_report(reporter, post)
        assert ReportService(db).reconcile_post_reports(post.id) == 0
        db.refresh(report)
        assert report.status == "pending"


class TestReadsAndDeletes:
    def test_list_all_filters(self, db, owner, reporter, make_user, make_post, make_report):
        post = make_post(owner)
        mine = make_report(reporter, post)
        make_report(make_user(), post, status="rejected")

        service = ReportService(db)
        assert len(service.list_all_reports()) == 2
        assert [r.id for r in service.list_all_reports(user_email=reporter.email)] == [mine.id]
        assert [r.status for r in service.list_all_reports(status="rejected")] == ["rejected"]
        assert service.list_all_reports(user_email="ghost@example.com") == []

        listed = service.list_all_reports(user_email=reporter.email)[0]
        assert listed.reporter.email == reporter.email
        assert listed.post.owner.email == owner.email

    def test_list_all_fails_open(self, db):
        class BrokenSession:
            rolled_back = False

            def query(self, *args, **kwargs):
                raise RuntimeError("connection reset")

            def rollback(self):
                self.rolled_back = True

        service = ReportService(db)
        service.db = BrokenSession()
        assert service.list_all_reports() == []
        assert service.db.rolled_back is True

    def test_delete_single_and_many(
        self, db, owner, admin_actor, make_user, make_post, make_report
    ):
        post = make_post(owner)
        first = make_report(make_user(), post)
        second = make_report(make_user(), post)
        third = make_report(make_user(), post)

        service = ReportService(db)
        service.delete_reports(first.id, admin_actor)
        service.delete_reports({second.id, third.id}, admin_actor)

        assert service.get_post_reports(post.id) == []

    def test_user_cannot_delete_reports(
        self, db, owner, reporter, reporter_actor, make_post, make_report
    ):
        report = make_report(reporter, make_post(owner))
        with pytest.raises(AuthorizationError):
            ReportService(db).delete_reports(report.id, reporter_actor)
        assert db.query(Report).count() == 1

    def test_post_deletion_empties_post_reports(self, db, owner, reporter, make_post, make_report):
        post = make_post(owner)
        make_report(reporter, post)
        PostService(db).delete_post(post.id)
        assert ReportService(db).get_post_reports(post.id) == []


def test_moderation_scenario(db, make_user, admin_actor):
    user_a = make_user(name="A")
    user_b = make_user(name="B")
    actor_a = Actor.for_user(user_a)
    actor_b = Actor.for_user(user_b)

    posts = PostService(db, storage=FakePhotoStorage())
    reports = ReportService(db)

    post = run(
        posts.create_post(
            actor_a,
            {"title": "Garden flat", "price": 800, "city": "Austin", "state": "TX", "zip": "78702"},
        )
    )
    assert post.approved is False and post.active is True

    with pytest.raises(PostUnapprovedError):
        file_report(db, actor_b, post)

    posts.approve_post(post.id, admin_actor)

    report = file_report(db, actor_b, post)
    assert report.status == "pending"

    with pytest.raises(DuplicateReportError):
        file_report(db, actor_b, post)

    with pytest.raises(SelfReportError):
        file_report(db, actor_a, post)

    reports.adjudicate(report.id, admin_actor, "approved")
    assert posts.get_post_by_id(post.id).active is False

    user_c = Actor.for_user(make_user(name="C"))
    with pytest.raises(PostInactiveError):
        file_report(db, user_c, post)
