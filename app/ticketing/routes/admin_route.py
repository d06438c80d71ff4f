from datetime import datetime

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from ticketing.controller import analytics_controller
from ticketing.controller.event_controller import (add_event_controller,
                                                   delete_event_controller,
                                                   retrieve_event_or_404,
                                                   retrieve_events_controller,
                                                   update_event_controller,
                                                   update_event_status_controller)
from ticketing.controller.settings_controller import get_settings, update_settings
from ticketing.controller.ticket_controller import retrieve_ticket_or_404, retrieve_tickets
from ticketing.controller.user_controller import add_user, retrieve_user_or_404, retrieve_users, update_user
from ticketing.database import get_db
from ticketing.logger import get_logger
from ticketing.middleware.auth import require_admin
from ticketing.models.user_model import User
from ticketing.response_model import ResponseModel, dump
from ticketing.schema.event_schema import EventDetailOut, EventIn, EventOut, EventStatusUpdate, EventUpdate
from ticketing.schema.settings_schema import SettingsOut, SettingsUpdate
from ticketing.schema.ticket_schema import TicketOut
from ticketing.schema.user_schema import RoleUpdate, StatusUpdate, UserCreate, UserOut

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


# ----------------------- USERS -----------------------
@router.get("/users", response_description="Retrieve all users")
async def admin_users(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100), role: str = None,
                      status: str = None, search: str = None, db: Session = Depends(get_db)):
    users, pagination = await retrieve_users(db, page, limit, role, status, search)
    return ResponseModel(dump(UserOut, users), "Users retrieved successfully", pagination=pagination)


@router.post("/users", response_description="Create a user", status_code=status.HTTP_201_CREATED)
async def admin_create_user(payload: UserCreate = Body(...), db: Session = Depends(get_db)):
    user = await add_user(db, {**payload.model_dump(), "email_verified": True})
    return ResponseModel(dump(UserOut, user), "User created successfully", 201)


@router.get("/users/{user_id}", response_description="Retrieve a user")
async def admin_user_details(user_id: int, db: Session = Depends(get_db)):
    user = await retrieve_user_or_404(db, user_id)
    return ResponseModel(dump(UserOut, user), "User retrieved successfully")


@router.put("/users/{user_id}/role", response_description="Change a user's role")
async def admin_user_role(user_id: int, payload: RoleUpdate = Body(...), admin: User = Depends(require_admin),
                          db: Session = Depends(get_db)):
    user = await update_user(db, user_id, {"role": payload.role})
    logger.info("Admin %s set role of user %s to %s", admin.id, user_id, payload.role)
    return ResponseModel(dump(UserOut, user), "User role updated successfully")


@router.put("/users/{user_id}/status", response_description="Change a user's account status")
async def admin_user_status(user_id: int, payload: StatusUpdate = Body(...), admin: User = Depends(require_admin),
                            db: Session = Depends(get_db)):
    user = await update_user(db, user_id, {"status": payload.status})
    logger.info("Admin %s set status of user %s to %s", admin.id, user_id, payload.status)
    return ResponseModel(dump(UserOut, user), "User status updated successfully")


@router.get("/users/{user_id}/tickets", response_description="Tickets of a user")
async def admin_user_tickets(user_id: int, page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100),
                             db: Session = Depends(get_db)):
    await retrieve_user_or_404(db, user_id)
    tickets, pagination = await retrieve_tickets(db, page, limit, user=user_id)
    return ResponseModel(dump(TicketOut, tickets), "Tickets retrieved successfully", pagination=pagination)


# ----------------------- EVENTS -----------------------
@router.get("/events", response_description="Retrieve all events")
async def admin_events(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100), status: str = None,
                       category: int = None, search: str = None, db: Session = Depends(get_db)):
    events, pagination = await retrieve_events_controller(db, page, limit, status, category, search)
    return ResponseModel(dump(EventOut, events), "Events retrieved successfully", pagination=pagination)


@router.post("/events", response_description="Create an event", status_code=status.HTTP_201_CREATED)
async def admin_create_event(payload: EventIn = Body(...), admin: User = Depends(require_admin),
                             db: Session = Depends(get_db)):
    event = await add_event_controller(db, payload.model_dump(), admin.id)
    event = await retrieve_event_or_404(db, event.id)
    return ResponseModel(dump(EventDetailOut, event), "Event created successfully", 201)


@router.get("/events/{event_id}", response_description="Retrieve an event")
async def admin_event_details(event_id: int, db: Session = Depends(get_db)):
    event = await retrieve_event_or_404(db, event_id)
    return ResponseModel(dump(EventDetailOut, event), "Event retrieved successfully")


@router.put("/events/{event_id}", response_description="Update an event")
async def admin_update_event(event_id: int, payload: EventUpdate = Body(...), db: Session = Depends(get_db)):
    event = await update_event_controller(db, event_id, payload.model_dump(exclude_none=True))
    return ResponseModel(dump(EventOut, event), "Event updated successfully")


@router.delete("/events/{event_id}", response_description="Delete an event")
async def admin_delete_event(event_id: int, db: Session = Depends(get_db)):
    await delete_event_controller(db, event_id)
    return ResponseModel({}, "Event deleted successfully")


@router.put("/events/{event_id}/status", response_description="Change an event's status")
async def admin_event_status(event_id: int, payload: EventStatusUpdate = Body(...), db: Session = Depends(get_db)):
    event = await update_event_status_controller(db, event_id, payload.status)
    return ResponseModel(dump(EventOut, event), "Event status updated successfully")


@router.get("/events/{event_id}/tickets", response_description="Tickets covering an event")
async def admin_event_tickets(event_id: int, page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100),
                              db: Session = Depends(get_db)):
    await retrieve_event_or_404(db, event_id)
    tickets, pagination = await retrieve_tickets(db, page, limit, event=event_id)
    return ResponseModel(dump(TicketOut, tickets), "Tickets retrieved successfully", pagination=pagination)


# ----------------------- TICKETS -----------------------
@router.get("/tickets", response_description="Retrieve all tickets")
async def admin_tickets(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100), status: str = None,
                        payment_status: str = None, event: int = None, db: Session = Depends(get_db)):
    tickets, pagination = await retrieve_tickets(db, page, limit, status, payment_status, event)
    return ResponseModel(dump(TicketOut, tickets), "Tickets retrieved successfully", pagination=pagination)


@router.get("/tickets/{ticket_id}", response_description="Retrieve a ticket")
async def admin_ticket_details(ticket_id: int, db: Session = Depends(get_db)):
    ticket = await retrieve_ticket_or_404(db, ticket_id)
    return ResponseModel(dump(TicketOut, ticket), "Ticket retrieved successfully")


# ----------------------- SETTINGS -----------------------
@router.get("/settings", response_description="Retrieve site settings")
async def admin_get_settings(db: Session = Depends(get_db)):
    settings = await get_settings(db)
    return ResponseModel(dump(SettingsOut, settings), "Settings retrieved successfully")


@router.put("/settings", response_description="Update site settings")
async def admin_update_settings(payload: SettingsUpdate = Body(...), admin: User = Depends(require_admin),
                                db: Session = Depends(get_db)):
    settings = await update_settings(db, payload.model_dump(exclude_none=True))
    logger.info("Settings updated by admin %s", admin.id)
    return ResponseModel(dump(SettingsOut, settings), "Settings updated successfully")


# ----------------------- ANALYTICS -----------------------
@router.get("/stats", response_description="Dashboard statistics")
async def admin_stats(time_range: str = "month",
                      start_date: datetime = None, end_date: datetime = None, db: Session = Depends(get_db)):
    stats = await analytics_controller.get_stats(db, time_range, start_date, end_date)
    stats["recent_tickets"] = dump(TicketOut, stats["recent_tickets"])
    return ResponseModel(stats, "Statistics retrieved successfully")


@router.get("/analytics/revenue", response_description="Revenue per period")
async def admin_revenue(start_date: datetime = None, end_date: datetime = None, group_by: str = "day",
                        db: Session = Depends(get_db)):
    data = await analytics_controller.revenue_analytics(db, start_date, end_date, group_by)
    return ResponseModel(data, "Revenue analytics retrieved successfully")


@router.get("/analytics/attendance", response_description="Verified attendance per event and day")
async def admin_attendance(event_id: int = None, start_date: datetime = None, end_date: datetime = None,
                           db: Session = Depends(get_db)):
    data = await analytics_controller.attendance_analytics(db, event_id, start_date, end_date)
    return ResponseModel(data, "Attendance analytics retrieved successfully")


@router.get("/analytics/users", response_description="User registrations per period")
async def admin_user_analytics(start_date: datetime = None, end_date: datetime = None, group_by: str = "day",
                               db: Session = Depends(get_db)):
    data = await analytics_controller.user_analytics(db, start_date, end_date, group_by)
    return ResponseModel(data, "User analytics retrieved successfully")


@router.get("/analytics/events", response_description="Per-event sales performance")
async def admin_event_analytics(status: str = None, category: int = None, sort_by: str = "revenue",
                                limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    data = await analytics_controller.event_performance(db, status, sort_by, limit, category)
    return ResponseModel(data, "Event analytics retrieved successfully")


__all__ = ["router"]
