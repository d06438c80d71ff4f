from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ticketing.database import get_db
from ticketing.errors import APIError
from ticketing.models.user_model import User
from ticketing.security import decode_token

bearer_scheme = HTTPBearer(auto_error=False)


# ------------------ Current user ------------------
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise APIError("Not authorized to access this route", 401)

    payload = decode_token(credentials.credentials)
    user = db.query(User).filter(User.id == payload["id"]).first()
    if not user:
        raise APIError("User not found", 401)
    if user.status != "active":
        raise APIError("Your account is not active", 401)
    return user


# ------------------ Role check ------------------
def authorize(*roles: str):
    async def role_checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise APIError(f"User role {user.role} is not authorized to access this route", 403)
        return user

    return role_checker


require_admin = authorize("admin")
require_staff = authorize("admin", "staff")
