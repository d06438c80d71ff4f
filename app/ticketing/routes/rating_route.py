from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ticketing.controller.rating_controller import delete_rating, retrieve_ratings, update_rating
from ticketing.database import get_db
from ticketing.middleware.auth import get_current_user, require_admin
from ticketing.models.user_model import User
from ticketing.response_model import ResponseModel, dump
from ticketing.schema.rating_schema import RatingOut, RatingUpdate

router = APIRouter()


@router.get("/all", response_description="Retrieve all ratings")
async def get_all_ratings(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100), event: int = None,
                          user: int = None, min_rating: int = Query(None, ge=1, le=5),
                          admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    ratings, pagination = await retrieve_ratings(db, page, limit, event, user, min_rating)
    return ResponseModel(dump(RatingOut, ratings), "Ratings retrieved successfully", pagination=pagination)


@router.put("/{rating_id}", response_description="Update a rating")
async def edit_rating(rating_id: int, payload: RatingUpdate = Body(...), user: User = Depends(get_current_user),
                      db: Session = Depends(get_db)):
    rating = await update_rating(db, rating_id, user, payload.model_dump(exclude_none=True))
    return ResponseModel(dump(RatingOut, rating), "Rating updated successfully")


@router.delete("/{rating_id}", response_description="Delete a rating")
async def remove_rating(rating_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    await delete_rating(db, rating_id, user)
    return ResponseModel({}, "Rating deleted successfully")


__all__ = ["router"]
