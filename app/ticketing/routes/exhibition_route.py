from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from ticketing.controller.exhibition_controller import (add_exhibition,
                                                        delete_exhibition,
                                                        retrieve_exhibition_or_404,
                                                        retrieve_exhibitions,
                                                        retrieve_upcoming_exhibitions,
                                                        update_exhibition)
from ticketing.database import get_db
from ticketing.middleware.auth import require_staff
from ticketing.models.user_model import User
from ticketing.response_model import ResponseModel, dump
from ticketing.schema.exhibition_schema import ExhibitionIn, ExhibitionOut, ExhibitionUpdate

router = APIRouter()


@router.get("/", response_description="Retrieve all exhibitions")
async def get_exhibitions(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100), status: str = None,
                          db: Session = Depends(get_db)):
    exhibitions, pagination = await retrieve_exhibitions(db, page, limit, status)
    return ResponseModel(dump(ExhibitionOut, exhibitions), "Exhibitions retrieved successfully",
                         pagination=pagination)


@router.get("/upcoming", response_description="Exhibitions that have not started yet")
async def get_upcoming(db: Session = Depends(get_db)):
    exhibitions = await retrieve_upcoming_exhibitions(db)
    return ResponseModel(dump(ExhibitionOut, exhibitions), "Upcoming exhibitions retrieved successfully",
                         count=len(exhibitions))


@router.get("/{exhibition_id}", response_description="Retrieve an exhibition with its events")
async def get_exhibition(exhibition_id: int, db: Session = Depends(get_db)):
    exhibition = await retrieve_exhibition_or_404(db, exhibition_id)
    return ResponseModel(dump(ExhibitionOut, exhibition), "Exhibition retrieved successfully")


@router.post("/", response_description="Create an exhibition", status_code=status.HTTP_201_CREATED)
async def create_exhibition(payload: ExhibitionIn = Body(...), staff: User = Depends(require_staff),
                            db: Session = Depends(get_db)):
    exhibition = await add_exhibition(db, staff.id, payload.model_dump())
    return ResponseModel(dump(ExhibitionOut, exhibition), "Exhibition created successfully", 201)


@router.put("/{exhibition_id}", response_description="Update an exhibition")
async def edit_exhibition(exhibition_id: int, payload: ExhibitionUpdate = Body(...),
                          staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    exhibition = await update_exhibition(db, exhibition_id, payload.model_dump(exclude_none=True))
    return ResponseModel(dump(ExhibitionOut, exhibition), "Exhibition updated successfully")


@router.delete("/{exhibition_id}", response_description="Delete an exhibition")
async def remove_exhibition(exhibition_id: int, staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    await delete_exhibition(db, exhibition_id)
    return ResponseModel({}, "Exhibition deleted successfully")


__all__ = ["router"]
