# app/routers/user.py
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.actors import Actor
from app.core.database import get_db
from app.core.dependencies import get_current_admin, get_current_user
from app.core.exceptions import ValidationError
from app.schemas.common import MessageResponse
from app.schemas.user import (
    SubscriptionStatusResponse,
    UserDirectoryEntry,
    UserResponse,
)
from app.services.user import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={404: {"description": "Not found"}},
)


@router.get("/me/subscription-status", response_model=SubscriptionStatusResponse)
def get_my_subscription_status(
    db: Session = Depends(get_db),
    current_user: Actor = Depends(get_current_user),
):
    status = UserService(db).get_subscription_status(current_user.id)
    return {"user_id": current_user.id, "subscription_status": status}


# ==================== Admin-Only Endpoints ====================


@router.get("/", response_model=List[UserDirectoryEntry])
def list_users(
    email: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    """
    User directory with post counts and subscription status.
    Admin only.
    """
    return UserService(db).list_users(email)


@router.get("/recent", response_model=List[UserResponse])
def get_recent_users(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    """
    Users created inside a window. Defaults to the last 30 days.
    """
    service = UserService(db)
    if start is None and end is None:
        return service.users_created_last_30_days()
    if start is None or end is None:
        raise ValidationError("Both start and end are required")
    return service.users_created_between(start, end)


@router.get("/{user_id}/subscription-status", response_model=SubscriptionStatusResponse)
def get_subscription_status(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    status = UserService(db).get_subscription_status(user_id)
    return {"user_id": user_id, "subscription_status": status}


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    return UserService(db).get_user_by_id(user_id)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    """
    Delete a user together with their posts and the reports on those posts.
    Admin only.
    """
    return UserService(db).delete_user(user_id, current_admin)
