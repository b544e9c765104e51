from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.actors import Actor
from app.core.database import get_db
from app.core.security import jwt_manager
from app.models.admin_user import AdminUser
from app.models.user import User

security = HTTPBearer(auto_error=False)


def _require_credentials(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    db: Session = Depends(get_db),
) -> Actor:
    """
    Dependency that requires a valid user Bearer token and returns the user actor.
    Raises 401 Unauthorized if the token is missing, invalid, or the user is not found.
    """
    token = _require_credentials(credentials)
    payload = jwt_manager.verify_token(token, "access")

    if "user_id" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: Not a valid user token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == payload.get("user_id")).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user"
        )

    return Actor.for_user(user)


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Security(security),
    db: Session = Depends(get_db),
) -> Actor:
    token = _require_credentials(credentials)
    payload = jwt_manager.verify_token(token, "access")

    if payload.get("role") != "admin" or "admin_id" not in payload:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )

    admin = db.query(AdminUser).filter(AdminUser.id == payload.get("admin_id")).first()
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found"
        )

    return Actor.for_admin(admin)


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Security(security),
    db: Session = Depends(get_db),
) -> Actor:
    """Accept either a user or an admin token."""
    token = _require_credentials(credentials)
    payload = jwt_manager.verify_token(token, "access")

    if payload.get("role") == "admin":
        return await get_current_admin(credentials, db)
    return await get_current_user(credentials, db)
