from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import AuthorizationError, NotFoundError
from app.models import PaymentSubscription, Post, Report, User
from app.services.user import UserService


def test_get_user(db, owner):
    service = UserService(db)
    assert service.get_user_by_id(owner.id).email == owner.email
    with pytest.raises(NotFoundError):
        service.get_user_by_id(999)


def test_directory_has_post_counts_and_subscription_status(
    db, owner, reporter, make_post, add_subscription
):
    make_post(owner)
    make_post(owner, approved=False)
    add_subscription(owner)
    add_subscription(reporter, end_date=datetime.now(timezone.utc) - timedelta(days=1))

    entries = {entry.email: entry for entry in UserService(db).list_users()}

    assert entries[owner.email].number_of_posts == 2
    assert entries[owner.email].subscription_status == "active"
    assert entries[reporter.email].number_of_posts == 0
    assert entries[reporter.email].subscription_status == "inactive"


def test_directory_filtered_by_email(db, owner, reporter):
    entries = UserService(db).list_users(reporter.email)
    assert [entry.id for entry in entries] == [reporter.id]


def test_subscription_status(db, owner, add_subscription):
    service = UserService(db)
    assert service.get_subscription_status(owner.id) == "inactive"
    add_subscription(owner)
    db.expire_all()
    assert service.get_subscription_status(owner.id) == "active"


def test_users_created_in_window(db, make_user):
    now = datetime.now(timezone.utc)
    recent = make_user(created_at=now - timedelta(days=2))
    make_user(created_at=now - timedelta(days=45))

    service = UserService(db)
    assert [u.id for u in service.users_created_last_30_days()] == [recent.id]
    assert len(service.users_created_between(now - timedelta(days=60), now)) == 2


def test_delete_user_removes_posts_and_reports(
    db, owner, reporter, admin_actor, make_user, make_post, make_report, add_subscription
):
    post = make_post(owner)
    make_report(reporter, post)
    someone_elses = make_post(make_user())
    filed_by_owner = make_report(owner, someone_elses)
    add_subscription(owner)

    UserService(db).delete_user(owner.id, admin_actor)

    assert db.query(User).filter(User.id == owner.id).count() == 0
    assert db.query(Post).filter(Post.user_id == owner.id).count() == 0
    assert db.query(Report).filter(Report.post_id == post.id).count() == 0
    assert db.query(Report).filter(Report.id == filed_by_owner.id).count() == 0
    assert db.query(PaymentSubscription).count() == 0
    assert db.query(Post).filter(Post.id == someone_elses.id).count() == 1


def test_only_admins_delete_users(db, owner, reporter_actor):
    with pytest.raises(AuthorizationError):
        UserService(db).delete_user(owner.id, reporter_actor)
    assert db.query(User).filter(User.id == owner.id).count() == 1
