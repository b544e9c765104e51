# app/routers/report.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.actors import Actor
from app.core.database import get_db
from app.core.dependencies import get_current_admin, get_current_user
from app.schemas.common import MessageResponse
from app.schemas.report import (
    AdjudicateRequest,
    DeleteReportsRequest,
    ReportCreate,
    ReportDetailResponse,
    ReportResponse,
)
from app.services.report import ReportService

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=MessageResponse, status_code=201)
def create_report(
    report_in: ReportCreate,
    db: Session = Depends(get_db),
    current_user: Actor = Depends(get_current_user),
):
    """
    Report an approved, active post that belongs to someone else.
    A user can report a given post only once.
    """
    ReportService(db).create_report(current_user, report_in)
    return {"message": "Report created", "success": True}


@router.get("/mine", response_model=List[ReportResponse])
def get_my_reports(
    db: Session = Depends(get_db),
    current_user: Actor = Depends(get_current_user),
):
    return ReportService(db).get_user_reports(current_user.id)


# ==================== Admin-Only Endpoints ====================


@router.get("/", response_model=List[ReportDetailResponse])
def get_all_reports(
    user_email: Optional[str] = Query(None, alias="userEmail"),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    """
    All reports, newest first, optionally narrowed to one reporter or status.
    Admin only.
    """
    return ReportService(db).list_all_reports(user_email=user_email, status=status)


@router.get("/post/{post_id}", response_model=List[ReportResponse])
def get_post_reports(
    post_id: int,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    return ReportService(db).get_post_reports(post_id)


@router.delete("/", response_model=MessageResponse)
def delete_reports(
    payload: DeleteReportsRequest,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    return ReportService(db).delete_reports(payload.ids, current_admin)


@router.post("/reconcile/{post_id}")
def reconcile_post_reports(
    post_id: int,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    """Re-run the report cascade for a post whose report was approved."""
    updated = ReportService(db).reconcile_post_reports(post_id)
    return {"postId": post_id, "updated": updated}


@router.get("/{report_id}", response_model=ReportDetailResponse)
def get_report(
    report_id: int,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    return ReportService(db).get_report_by_id(report_id)


@router.delete("/{report_id}", response_model=MessageResponse)
def delete_report(
    report_id: int,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    return ReportService(db).delete_reports(report_id, current_admin)


@router.post("/{report_id}/handle", response_model=MessageResponse)
def handle_report(
    report_id: int,
    payload: AdjudicateRequest,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    """
    Approve or reject a pending report. Approving deactivates the post and
    closes every other report filed against it.
    """
    return ReportService(db).adjudicate(report_id, current_admin, payload.status)
