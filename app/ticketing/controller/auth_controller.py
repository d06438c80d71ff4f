from datetime import timedelta

from sqlalchemy.orm import Session

from ticketing.constant_file import (email_verification_hours,
                                     password_reset_minutes,
                                     public_base_url)
from ticketing.controller import mail_sender
from ticketing.controller.helpers import utcnow
from ticketing.controller.user_controller import (add_user,
                                                  ensure_email_available,
                                                  retrieve_user_by_email)
from ticketing.errors import APIError, MailDeliveryError
from ticketing.logger import get_logger
from ticketing.models.user_model import User
from ticketing.security import (create_access_token,
                                create_refresh_token,
                                decode_token,
                                hash_password,
                                hash_token,
                                issue_one_time_token,
                                verify_password)

logger = get_logger(__name__)


def user_summary(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "status": user.status,
        "email_verified": user.email_verified,
    }


def token_response(user: User) -> dict:
    return {
        "token": create_access_token(user.id, user.role),
        "refresh_token": create_refresh_token(user.id),
        "user": user_summary(user),
    }


async def _issue_verification(db: Session, user: User):
    raw, digest, expires = issue_one_time_token(timedelta(hours=email_verification_hours))
    user.verification_token = digest
    user.verification_token_expire = expires
    db.commit()

    verification_url = f"{public_base_url}/api/v1/auth/verify-email/{raw}"
    try:
        await mail_sender.send_verification_email(user.email, verification_url)
    except MailDeliveryError:
        user.verification_token = None
        user.verification_token_expire = None
        db.commit()
        raise APIError("Email could not be sent", 500)


# ------------------ Register ------------------
async def register_user(db: Session, user_data: dict) -> User:
    user = await add_user(db, {**user_data, "role": "customer", "status": "active"})
    await _issue_verification(db, user)
    return user


# ------------------ Login ------------------
async def login_user(db: Session, email: str, password: str) -> dict:
    user = await retrieve_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        logger.warning("Failed login for %s", email)
        raise APIError("Invalid credentials", 401)
    if user.status != "active":
        raise APIError("Your account has been deactivated. Please contact support.", 401)

    user.last_login = utcnow()
    db.commit()
    db.refresh(user)
    return token_response(user)


# ------------------ Refresh ------------------
async def refresh_access_token(db: Session, refresh_token: str) -> dict:
    payload = decode_token(refresh_token, refresh=True)
    user = db.query(User).filter(User.id == payload["id"]).first()
    if not user:
        raise APIError("User not found", 404)
    return {"token": create_access_token(user.id, user.role)}


# ------------------ Profile ------------------
async def update_details(db: Session, user: User, update_data: dict) -> User:
    if "email" in update_data:
        await ensure_email_available(db, update_data["email"], exclude_id=user.id)
        update_data["email"] = update_data["email"].lower()
    for key, value in update_data.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


async def update_password(db: Session, user: User, current_password: str, new_password: str) -> dict:
    if not verify_password(current_password, user.password):
        raise APIError("Password is incorrect", 401)
    user.password = hash_password(new_password)
    db.commit()
    db.refresh(user)
    return token_response(user)


# ------------------ Password reset ------------------
async def forgot_password(db: Session, email: str):
    user = await retrieve_user_by_email(db, email)
    if not user:
        raise APIError("There is no user with that email", 404)

    raw, digest, expires = issue_one_time_token(timedelta(minutes=password_reset_minutes))
    user.reset_password_token = digest
    user.reset_password_expire = expires
    db.commit()

    reset_url = f"{public_base_url}/api/v1/auth/resetpassword/{raw}"
    try:
        await mail_sender.send_password_reset_email(user.email, reset_url)
    except MailDeliveryError:
        user.reset_password_token = None
        user.reset_password_expire = None
        db.commit()
        raise APIError("Email could not be sent", 500)


async def reset_password(db: Session, raw_token: str, password: str) -> dict:
    user = db.query(User).filter(
        User.reset_password_token == hash_token(raw_token),
        User.reset_password_expire > utcnow(),
    ).first()
    if not user:
        raise APIError("Invalid token", 400)

    user.password = hash_password(password)
    user.reset_password_token = None
    user.reset_password_expire = None
    db.commit()
    db.refresh(user)
    return token_response(user)


# ------------------ Email verification ------------------
async def verify_email(db: Session, raw_token: str) -> User:
    user = db.query(User).filter(
        User.verification_token == hash_token(raw_token),
        User.verification_token_expire > utcnow(),
    ).first()
    if not user:
        raise APIError("Invalid or expired verification token", 400)

    user.email_verified = True
    user.verification_token = None
    user.verification_token_expire = None
    db.commit()
    db.refresh(user)
    return user


async def resend_verification(db: Session, email: str):
    user = await retrieve_user_by_email(db, email)
    if not user:
        raise APIError("There is no user with that email", 404)
    if user.email_verified:
        raise APIError("Email is already verified", 400)
    await _issue_verification(db, user)
