from fastapi import APIRouter, Body, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from ticketing.controller.event_controller import (add_event_controller,
                                                   add_show_controller,
                                                   delete_event_controller,
                                                   delete_show_controller,
                                                   retrieve_event_or_404,
                                                   retrieve_events_controller,
                                                   retrieve_shows_controller,
                                                   update_event_controller,
                                                   update_show_controller)
from ticketing.controller.rating_controller import add_rating, retrieve_event_ratings
from ticketing.controller.ws_manager import event_manager
from ticketing.database import get_db
from ticketing.middleware.auth import get_current_user, require_staff
from ticketing.models.user_model import User
from ticketing.response_model import ResponseModel, dump
from ticketing.schema.event_schema import EventDetailOut, EventIn, EventOut, EventUpdate, ShowIn, ShowOut, ShowUpdate
from ticketing.schema.rating_schema import RatingIn, RatingOut

router = APIRouter()


# ----------------------- EVENTS -----------------------
@router.get("/", response_description="Retrieve all events")
async def get_events(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: str = None,
    category: int = None,
    search: str = None,
    db: Session = Depends(get_db),
):
    events, pagination = await retrieve_events_controller(db, page, limit, status, category, search)
    return ResponseModel(dump(EventOut, events), "Events retrieved successfully", pagination=pagination)


@router.post("/", response_description="Create a new event", status_code=status.HTTP_201_CREATED)
async def create_event(payload: EventIn = Body(...), staff: User = Depends(require_staff),
                       db: Session = Depends(get_db)):
    event = await add_event_controller(db, payload.model_dump(), staff.id)
    event = await retrieve_event_or_404(db, event.id)
    return ResponseModel(dump(EventDetailOut, event), "Event created successfully", 201)


@router.websocket("/ws")
async def websocket_events(websocket: WebSocket):
    await event_manager.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        event_manager.disconnect(websocket)


@router.get("/{event_id}", response_description="Retrieve an event with its shows")
async def get_event(event_id: int, db: Session = Depends(get_db)):
    event = await retrieve_event_or_404(db, event_id)
    return ResponseModel(dump(EventDetailOut, event), "Event retrieved successfully")


@router.put("/{event_id}", response_description="Update an event")
async def edit_event(event_id: int, payload: EventUpdate = Body(...), staff: User = Depends(require_staff),
                     db: Session = Depends(get_db)):
    event = await update_event_controller(db, event_id, payload.model_dump(exclude_none=True))
    return ResponseModel(dump(EventOut, event), "Event updated successfully")


@router.delete("/{event_id}", response_description="Delete an event")
async def remove_event(event_id: int, staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    await delete_event_controller(db, event_id)
    return ResponseModel({}, "Event deleted successfully")


# ----------------------- SHOWS -----------------------
@router.get("/{event_id}/shows", response_description="Retrieve the shows of an event")
async def get_shows(event_id: int, db: Session = Depends(get_db)):
    shows = await retrieve_shows_controller(db, event_id)
    return ResponseModel(dump(ShowOut, shows), "Shows retrieved successfully")


@router.post("/{event_id}/shows", response_description="Add a show", status_code=status.HTTP_201_CREATED)
async def create_show(event_id: int, payload: ShowIn = Body(...), staff: User = Depends(require_staff),
                      db: Session = Depends(get_db)):
    show = await add_show_controller(db, event_id, payload.model_dump())
    return ResponseModel(dump(ShowOut, show), "Show created successfully", 201)


@router.put("/{event_id}/shows/{show_id}", response_description="Update a show")
async def edit_show(event_id: int, show_id: int, payload: ShowUpdate = Body(...),
                    staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    show = await update_show_controller(db, event_id, show_id, payload.model_dump(exclude_none=True))
    return ResponseModel(dump(ShowOut, show), "Show updated successfully")


@router.delete("/{event_id}/shows/{show_id}", response_description="Delete a show")
async def remove_show(event_id: int, show_id: int, staff: User = Depends(require_staff),
                      db: Session = Depends(get_db)):
    await delete_show_controller(db, event_id, show_id)
    return ResponseModel({}, "Show deleted successfully")


# ----------------------- RATINGS -----------------------
@router.get("/{event_id}/ratings", response_description="Retrieve the ratings of an event")
async def get_event_ratings(event_id: int, page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100),
                            db: Session = Depends(get_db)):
    ratings, pagination = await retrieve_event_ratings(db, event_id, page, limit)
    return ResponseModel(dump(RatingOut, ratings), "Ratings retrieved successfully", pagination=pagination)


@router.post("/{event_id}/ratings", response_description="Rate an attended event", status_code=status.HTTP_201_CREATED)
async def rate_event(event_id: int, payload: RatingIn = Body(...), user: User = Depends(get_current_user),
                     db: Session = Depends(get_db)):
    rating = await add_rating(db, event_id, user, payload.model_dump())
    return ResponseModel(dump(RatingOut, rating), "Rating added successfully", 201)


__all__ = ["router"]
