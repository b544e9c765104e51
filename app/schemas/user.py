from datetime import datetime
from typing import Literal

from app.schemas.common import CamelModel

SubscriptionStatus = Literal["active", "inactive"]


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    created_at: datetime


class UserDirectoryEntry(CamelModel):
    id: int
    name: str
    email: str
    number_of_posts: int
    subscription_status: SubscriptionStatus


class SubscriptionStatusResponse(CamelModel):
    user_id: int
    subscription_status: SubscriptionStatus
