# app/routers/post.py
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.core.actors import Actor
from app.core.database import get_db
from app.core.dependencies import get_current_actor, get_current_admin, get_current_user
from app.schemas.common import MessageResponse, parse_payload
from app.schemas.post import (
    AdminPostFilters,
    ApproveAllResponse,
    PostDetailResponse,
    PostFilters,
    PostResponse,
)
from app.services.post import PostService

router = APIRouter(
    prefix="/posts",
    tags=["Posts"],
    responses={404: {"description": "Not found"}},
)


# ==================== Admin-Only Endpoints ====================
# NOTE: These MUST be defined before parameterized routes like /{post_id}


@router.get("/admin", response_model=List[PostDetailResponse], summary="All posts (Admin)")
def get_all_posts(
    user_email: Optional[str] = Query(None, alias="userEmail"),
    approved: Optional[bool] = Query(None),
    active: Optional[bool] = Query(None),
    title: Optional[str] = Query(None),
    description: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    """
    List every post with owner and approver details, newest first.
    Admin only.
    """
    filters = parse_payload(
        AdminPostFilters,
        {
            "user_email": user_email,
            "approved": approved,
            "active": active,
            "title": title,
            "description": description,
        },
    )
    return PostService(db).list_all_posts(filters)


@router.post("/admin/approve-all", response_model=ApproveAllResponse)
def approve_all_posts(
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    """
    Approve every pending, active post.
    Admin only.
    """
    return PostService(db).approve_all_posts(current_admin)


@router.post("/{post_id}/approve", response_model=MessageResponse)
def approve_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    PostService(db).approve_post(post_id, current_admin)
    return {"message": "Post approved", "success": True}


@router.post("/{post_id}/deactivate", response_model=MessageResponse)
def deactivate_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_admin: Actor = Depends(get_current_admin),
):
    PostService(db).deactivate_post(post_id, current_admin)
    return {"message": "Post deactivated", "success": True}


# ==================== Public & Owner Endpoints ====================


@router.post("/", response_model=MessageResponse, status_code=201)
async def create_post(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    bed_count: Optional[str] = Form(None, alias="bedCount"),
    bath_count: Optional[str] = Form(None, alias="bathCount"),
    number_of_spots: Optional[str] = Form(None, alias="numberOfSpots"),
    start_date_range: Optional[str] = Form(None, alias="startDateRange"),
    end_date_range: Optional[str] = Form(None, alias="endDateRange"),
    city: Optional[str] = Form(None),
    state: Optional[str] = Form(None),
    zip: Optional[str] = Form(None),
    photos: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_user: Actor = Depends(get_current_user),
):
    """
    Create a listing. It stays hidden until an admin approves it.
    """
    fields = {
        "title": title,
        "description": description,
        "price": price,
        "bed_count": bed_count,
        "bath_count": bath_count,
        "number_of_spots": number_of_spots,
        "start_date_range": start_date_range,
        "end_date_range": end_date_range,
        "city": city,
        "state": state,
        "zip": zip,
    }
    post_in = {key: value for key, value in fields.items() if value not in (None, "")}

    await PostService(db).create_post(current_user, post_in, photos or [])
    return {"message": "Post created", "success": True}


@router.get("/", response_model=List[PostDetailResponse])
def get_posts(
    price_min: Optional[str] = Query(None, alias="priceMin"),
    price_max: Optional[str] = Query(None, alias="priceMax"),
    bed_count: Optional[str] = Query(None, alias="bedCount"),
    bath_count: Optional[str] = Query(None, alias="bathCount"),
    number_of_spots: Optional[str] = Query(None, alias="numberOfSpots"),
    start_date_range: Optional[str] = Query(None, alias="startDateRange"),
    end_date_range: Optional[str] = Query(None, alias="endDateRange"),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    zip: Optional[str] = Query(None),
    title: Optional[str] = Query(None),
    description: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Public listings: only approved and active posts.
    """
    filters = parse_payload(
        PostFilters,
        {
            "price_min": price_min,
            "price_max": price_max,
            "bed_count": bed_count,
            "bath_count": bath_count,
            "number_of_spots": number_of_spots,
            "start_date_range": start_date_range,
            "end_date_range": end_date_range,
            "city": city,
            "state": state,
            "zip": zip,
            "title": title,
            "description": description,
        },
    )
    return PostService(db).list_public_posts(filters)


@router.get("/mine", response_model=List[PostResponse])
def get_user_posts(
    db: Session = Depends(get_db),
    current_user: Actor = Depends(get_current_user),
):
    return PostService(db).get_user_posts(current_user.id)


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: int, db: Session = Depends(get_db)):
    return PostService(db).get_post_by_id(post_id)


@router.patch("/{post_id}", response_model=MessageResponse)
def update_post(
    post_id: int,
    fields: dict = Body(...),
    db: Session = Depends(get_db),
    current_user: Actor = Depends(get_current_user),
):
    """
    Update dates, price, bed/bath counts or number of spots.
    Other fields in the body are ignored.
    """
    PostService(db).update_post(current_user, post_id, fields)
    return {"message": "Post updated", "success": True}


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor),
):
    """
    Delete a post and its reports. Owners delete their own posts; admins any.
    """
    return PostService(db).delete_post(post_id, current_actor)
