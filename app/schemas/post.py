# app/schemas/post.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel

# ==================== Summaries ====================


class OwnerSummary(CamelModel):
    id: int
    name: str
    email: str


class AdminSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str


# ==================== Post Schemas ====================


class PostBase(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    bed_count: Optional[int] = Field(None, ge=0)
    bath_count: Optional[int] = Field(None, ge=0)
    number_of_spots: Optional[int] = Field(None, ge=0)
    start_date_range: Optional[datetime] = None
    end_date_range: Optional[datetime] = None
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip: str = Field(..., min_length=1, max_length=20)


class PostCreate(PostBase):
    pass


class PostUpdate(CamelModel):
    """Only these fields may change after creation."""

    start_date_range: Optional[datetime] = None
    end_date_range: Optional[datetime] = None
    price: Optional[float] = Field(None, ge=0)
    bed_count: Optional[int] = Field(None, ge=0)
    bath_count: Optional[int] = Field(None, ge=0)
    number_of_spots: Optional[int] = Field(None, ge=0)


class PostResponse(PostBase):
    id: int
    user_id: int
    photos: List[str] = []
    active: bool
    approved: bool
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: datetime


class PostDetailResponse(PostResponse):
    owner: Optional[OwnerSummary] = None
    approver: Optional[AdminSummary] = None


class PostSummary(CamelModel):
    id: int
    title: str
    active: bool
    approved: bool
    owner: Optional[OwnerSummary] = None


# ==================== Filters ====================


class FilterModel(CamelModel):
    """Blank query values are treated as absent."""

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class PostFilters(FilterModel):
    """Public listing filters; None means the filter is not applied."""

    price_min: Optional[float] = None
    price_max: Optional[float] = None
    bed_count: Optional[int] = None
    bath_count: Optional[int] = None
    number_of_spots: Optional[int] = None
    start_date_range: Optional[datetime] = None
    end_date_range: Optional[datetime] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class AdminPostFilters(FilterModel):
    user_email: Optional[str] = None
    approved: Optional[bool] = None
    active: Optional[bool] = None
    title: Optional[str] = None
    description: Optional[str] = None


class ApproveAllResponse(CamelModel):
    message: str
    success: bool = True
    approved: int
    failed: int
