from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from ticketing.controller.auth_controller import (forgot_password,
                                                  login_user,
                                                  refresh_access_token,
                                                  register_user,
                                                  resend_verification,
                                                  reset_password,
                                                  update_details,
                                                  update_password,
                                                  verify_email)
from ticketing.database import get_db
from ticketing.middleware.auth import get_current_user
from ticketing.middleware.rate_limiter import login_limiter, registration_limiter, sensitive_limiter
from ticketing.models.user_model import User
from ticketing.response_model import ResponseModel, dump
from ticketing.schema.auth_schema import (EmailIn,
                                          LoginIn,
                                          RefreshTokenIn,
                                          RegisterIn,
                                          ResetPasswordIn,
                                          UpdateDetailsIn,
                                          UpdatePasswordIn)
from ticketing.schema.user_schema import UserOut

router = APIRouter()


# ----------------------- REGISTER -----------------------
@router.post("/register", response_description="Register a customer account",
             status_code=status.HTTP_201_CREATED, dependencies=[Depends(registration_limiter)])
async def register(payload: RegisterIn = Body(...), db: Session = Depends(get_db)):
    user = await register_user(db, payload.model_dump())
    return ResponseModel(
        dump(UserOut, user),
        "User registered successfully. Please check your email to verify your account.",
        201,
    )


# ----------------------- LOGIN -----------------------
@router.post("/login", response_description="Log in", dependencies=[Depends(login_limiter)])
async def login(payload: LoginIn = Body(...), db: Session = Depends(get_db)):
    tokens = await login_user(db, payload.email, payload.password)
    return ResponseModel(tokens, "Logged in successfully")


@router.post("/refresh-token", response_description="Exchange a refresh token")
async def refresh_token(payload: RefreshTokenIn = Body(...), db: Session = Depends(get_db)):
    token = await refresh_access_token(db, payload.refresh_token)
    return ResponseModel(token, "Token refreshed")


@router.get("/logout", response_description="Log out")
async def logout(user: User = Depends(get_current_user)):
    return ResponseModel({}, "Logged out successfully")


# ----------------------- PROFILE -----------------------
@router.get("/me", response_description="Current user")
async def me(user: User = Depends(get_current_user)):
    return ResponseModel(dump(UserOut, user), "User retrieved successfully")


@router.put("/updatedetails", response_description="Update name, email or phone")
async def updatedetails(
    payload: UpdateDetailsIn = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = await update_details(db, user, payload.model_dump(exclude_none=True))
    return ResponseModel(dump(UserOut, updated), "User details updated successfully")


@router.put("/updatepassword", response_description="Change password")
async def updatepassword(
    payload: UpdatePasswordIn = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tokens = await update_password(db, user, payload.current_password, payload.new_password)
    return ResponseModel(tokens, "Password updated successfully")


# ----------------------- PASSWORD RESET -----------------------
@router.post("/forgotpassword", response_description="Mail a password reset link",
             dependencies=[Depends(sensitive_limiter)])
async def forgotpassword(payload: EmailIn = Body(...), db: Session = Depends(get_db)):
    await forgot_password(db, payload.email)
    return ResponseModel({}, "Email sent")


@router.put("/resetpassword/{token}", response_description="Reset password with a mailed token",
            dependencies=[Depends(sensitive_limiter)])
async def resetpassword(token: str, payload: ResetPasswordIn = Body(...), db: Session = Depends(get_db)):
    tokens = await reset_password(db, token, payload.password)
    return ResponseModel(tokens, "Password reset successfully")


# ----------------------- EMAIL VERIFICATION -----------------------
@router.get("/verify-email/{token}", response_description="Confirm an email address")
async def verify(token: str, db: Session = Depends(get_db)):
    user = await verify_email(db, token)
    return ResponseModel(dump(UserOut, user), "Email verified successfully")


@router.post("/resend-verification", response_description="Mail a new verification link")
async def resend(payload: EmailIn = Body(...), db: Session = Depends(get_db)):
    await resend_verification(db, payload.email)
    return ResponseModel({}, "Verification email sent")


__all__ = ["router"]
