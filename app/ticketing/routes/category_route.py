from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from ticketing.controller.category_controller import (add_category,
                                                      delete_category,
                                                      retrieve_categories,
                                                      update_category)
from ticketing.database import get_db
from ticketing.middleware.auth import require_staff
from ticketing.models.user_model import User
from ticketing.response_model import ResponseModel, dump
from ticketing.schema.event_schema import CategoryIn, CategoryOut, CategoryUpdate

router = APIRouter()


@router.get("/", response_description="Retrieve all categories")
async def get_categories(db: Session = Depends(get_db)):
    categories = await retrieve_categories(db)
    return ResponseModel(dump(CategoryOut, categories), "Categories retrieved successfully", count=len(categories))


@router.post("/", response_description="Create a category", status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryIn = Body(...), staff: User = Depends(require_staff),
                          db: Session = Depends(get_db)):
    category = await add_category(db, payload.model_dump())
    return ResponseModel(dump(CategoryOut, category), "Category created successfully", 201)


@router.put("/{category_id}", response_description="Update a category")
async def edit_category(category_id: int, payload: CategoryUpdate = Body(...),
                        staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    category = await update_category(db, category_id, payload.model_dump(exclude_none=True))
    return ResponseModel(dump(CategoryOut, category), "Category updated successfully")


@router.delete("/{category_id}", response_description="Delete a category")
async def remove_category(category_id: int, staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    await delete_category(db, category_id)
    return ResponseModel({}, "Category deleted successfully")


__all__ = ["router"]
