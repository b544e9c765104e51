# app/schemas/report.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel
from app.schemas.post import AdminSummary, OwnerSummary, PostSummary


class ReportCreate(CamelModel):
    post_id: int
    reason: str = Field(..., min_length=1, max_length=5000)


class AdjudicateRequest(CamelModel):
    status: str


class DeleteReportsRequest(CamelModel):
    ids: List[int] = Field(..., min_length=1)


class ReportResponse(CamelModel):
    id: int
    user_id: int
    post_id: int
    reason: str
    status: str
    handled_by: Optional[int] = None
    handled_at: Optional[datetime] = None
    created_at: datetime


class ReportDetailResponse(ReportResponse):
    reporter: Optional[OwnerSummary] = None
    post: Optional[PostSummary] = None
    handler: Optional[AdminSummary] = None
