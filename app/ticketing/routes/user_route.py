from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from ticketing.controller.user_controller import (add_user,
                                                  delete_user,
                                                  retrieve_user_or_404,
                                                  retrieve_users,
                                                  setup_admin,
                                                  update_user)
from ticketing.database import get_db
from ticketing.middleware.auth import get_current_user, require_admin
from ticketing.models.user_model import User
from ticketing.response_model import ResponseModel, dump
from ticketing.schema.auth_schema import RegisterIn
from ticketing.schema.user_schema import UserCreate, UserOut, UserUpdate

router = APIRouter()


# ----------------------- FIRST ADMIN -----------------------
@router.post("/setup-admin", response_description="Create the first admin", status_code=status.HTTP_201_CREATED)
async def create_first_admin(payload: RegisterIn = Body(...), db: Session = Depends(get_db)):
    admin = await setup_admin(db, payload.model_dump())
    return ResponseModel(dump(UserOut, admin), "Admin user created successfully", 201)


@router.get("/profile", response_description="Current user profile")
async def profile(user: User = Depends(get_current_user)):
    return ResponseModel(dump(UserOut, user), "Profile retrieved successfully")


# ----------------------- ADMIN CRUD -----------------------
@router.get("/", response_description="Retrieve all users")
async def get_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: str = None,
    status: str = None,
    search: str = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    users, pagination = await retrieve_users(db, page, limit, role, status, search)
    return ResponseModel(dump(UserOut, users), "Users retrieved successfully", pagination=pagination)


@router.post("/", response_description="Add user", status_code=status.HTTP_201_CREATED)
async def add_user_data(
    payload: UserCreate = Body(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = await add_user(db, {**payload.model_dump(), "email_verified": True})
    return ResponseModel(dump(UserOut, user), "User added successfully", 201)


@router.get("/{user_id}", response_description="Retrieve a user")
async def get_user(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    user = await retrieve_user_or_404(db, user_id)
    return ResponseModel(dump(UserOut, user), "User retrieved successfully")


@router.put("/{user_id}", response_description="Update user details")
async def update_user_data(
    user_id: int,
    update_data: UserUpdate = Body(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = await update_user(db, user_id, update_data.model_dump(exclude_none=True))
    return ResponseModel(dump(UserOut, user), "User updated successfully")


@router.delete("/{user_id}", response_description="Delete a user")
async def delete_user_data(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    await delete_user(db, user_id)
    return ResponseModel({}, "User deleted successfully")


__all__ = ["router"]
