from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ticketing.controller.helpers import paginate
from ticketing.errors import APIError
from ticketing.logger import get_logger
from ticketing.models.user_model import User
from ticketing.security import generate_user_qr_code, hash_password

logger = get_logger(__name__)


async def retrieve_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email.lower()).first()


async def retrieve_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise APIError(f"User not found with id of {user_id}", 404)
    return user


async def ensure_email_available(db: Session, email: str, exclude_id: Optional[int] = None):
    query = db.query(User).filter(User.email == email.lower())
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first():
        raise APIError("User already exists", 400)


# ------------------ Add New User ------------------
async def add_user(db: Session, user_data: dict) -> User:
    await ensure_email_available(db, user_data["email"])
    user_data = dict(user_data)
    user_data["email"] = user_data["email"].lower()
    user_data["password"] = hash_password(user_data["password"])
    user_data.setdefault("qr_code", generate_user_qr_code())

    new_user = User(**user_data)
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info("Created user %s with role %s", new_user.id, new_user.role)
    return new_user


# ------------------ First admin ------------------
async def setup_admin(db: Session, user_data: dict) -> User:
    if db.query(User).filter(User.role == "admin").first():
        raise APIError("Admin user already exists", 400)
    return await add_user(db, {**user_data, "role": "admin", "status": "active", "email_verified": True})


# ------------------ Retrieve ALL Users ------------------
async def retrieve_users(db: Session, page: int = 1, limit: int = 10, role: str = None,
                         status: str = None, search: str = None):
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if status:
        query = query.filter(User.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    return paginate(query.order_by(User.created_at.desc(), User.id.desc()), page, limit)


# ------------------ Update User ------------------
async def update_user(db: Session, user_id: int, update_data: dict) -> User:
    user = await retrieve_user_or_404(db, user_id)
    if "email" in update_data:
        await ensure_email_available(db, update_data["email"], exclude_id=user.id)
        update_data["email"] = update_data["email"].lower()
    if "password" in update_data:
        update_data["password"] = hash_password(update_data["password"])
    for key, value in update_data.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


# ------------------ Delete User ------------------
async def delete_user(db: Session, user_id: int):
    user = await retrieve_user_or_404(db, user_id)
    if user.tickets or user.payments:
        raise APIError("Cannot delete a user with tickets or payments; suspend the account instead", 400)
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)
    return True
