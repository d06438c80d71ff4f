import hashlib
import secrets
import time
from datetime import timedelta

import bcrypt
from jose import JWTError, jwt

from ticketing.constant_file import (bcrypt_rounds,
                                     jwt_algorithm,
                                     jwt_expire_minutes,
                                     jwt_refresh_expire_days,
                                     jwt_refresh_secret,
                                     jwt_secret)
from ticketing.controller.helpers import utcnow
from ticketing.errors import APIError


# ------------------ Passwords ------------------
def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


# ------------------ JWT ------------------
def create_access_token(user_id: int, role: str) -> str:
    expire = utcnow() + timedelta(minutes=jwt_expire_minutes)
    claims = {"id": user_id, "role": role, "type": "access", "exp": expire}
    return jwt.encode(claims, jwt_secret, algorithm=jwt_algorithm)


def create_refresh_token(user_id: int) -> str:
    expire = utcnow() + timedelta(days=jwt_refresh_expire_days)
    claims = {"id": user_id, "type": "refresh", "exp": expire}
    return jwt.encode(claims, jwt_refresh_secret, algorithm=jwt_algorithm)


def decode_token(token: str, refresh: bool = False) -> dict:
    secret = jwt_refresh_secret if refresh else jwt_secret
    expected_type = "refresh" if refresh else "access"
    try:
        payload = jwt.decode(token, secret, algorithms=[jwt_algorithm])
    except JWTError:
        raise APIError("Invalid or expired token", 401)
    if payload.get("type") != expected_type or "id" not in payload:
        raise APIError("Invalid token payload", 401)
    return payload


# ------------------ One-time tokens ------------------
def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_random_token(size: int = 20) -> str:
    return secrets.token_hex(size)


def issue_one_time_token(lifetime: timedelta):
    """Returns (raw token for the mail, digest to store, expiry)."""
    raw = generate_random_token()
    return raw, hash_token(raw), utcnow() + lifetime


# ------------------ Identifiers ------------------
def generate_user_qr_code() -> str:
    return f"USER-{secrets.token_hex(10)}"


def generate_ticket_number() -> str:
    timestamp = str(int(time.time() * 1000))
    return f"TIX-{timestamp[-6:]}-{secrets.token_hex(3).upper()}"


def generate_ticket_qr_value(ticket_number: str, ticket_id: int) -> str:
    stamp = int(time.time() * 1000)
    seed = f"{ticket_number}-{ticket_id}-{stamp}-{secrets.token_hex(4)}"
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()
