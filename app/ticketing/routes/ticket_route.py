from fastapi import APIRouter, Body, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from ticketing.controller.ticket_controller import (STAFF_ROLES,
                                                    book_ticket_controller,
                                                    cancel_ticket_controller,
                                                    change_ticket_status_controller,
                                                    issue_ticket_controller,
                                                    mark_attended_controller,
                                                    retrieve_my_tickets,
                                                    retrieve_ticket_by_qr_controller,
                                                    retrieve_ticket_for_user,
                                                    retrieve_tickets,
                                                    ticket_qr_controller,
                                                    verify_event_controller,
                                                    verify_ticket_controller)
from ticketing.controller.ws_manager import ticket_manager
from ticketing.database import SessionLocal, get_db
from ticketing.errors import APIError
from ticketing.middleware.auth import get_current_user, require_admin, require_staff
from ticketing.models.user_model import User
from ticketing.response_model import ResponseModel, dump
from ticketing.schema.ticket_schema import (BookTicketIn,
                                            BoxOfficeTicketIn,
                                            MarkAttendedIn,
                                            TicketOut,
                                            TicketStatusUpdate,
                                            VerifyEventIn,
                                            VerifyQrIn,
                                            VerifyTicketIn)
from ticketing.security import decode_token

router = APIRouter()


# ----------------------- PURCHASE -----------------------
@router.post("/book", response_description="Book seats for a show", status_code=status.HTTP_201_CREATED)
async def book_ticket(payload: BookTicketIn = Body(...), user: User = Depends(get_current_user),
                      db: Session = Depends(get_db)):
    booking = await book_ticket_controller(db, user, payload.model_dump())
    message = "Ticket booked successfully" if booking["order"] is None else "Ticket reserved, awaiting payment"
    return ResponseModel(dump(TicketOut, booking["ticket"]), message, 201, order=booking["order"])


@router.post("/", response_description="Issue a paid ticket at the box office", status_code=status.HTTP_201_CREATED)
async def issue_ticket(payload: BoxOfficeTicketIn = Body(...), staff: User = Depends(require_staff),
                       db: Session = Depends(get_db)):
    ticket = await issue_ticket_controller(db, staff, payload.model_dump())
    return ResponseModel(dump(TicketOut, ticket), "Ticket issued successfully", 201)


# ----------------------- MY TICKETS -----------------------
async def _my_tickets(page, limit, status, user, db):
    tickets, pagination = await retrieve_my_tickets(db, user, page, limit, status)
    return ResponseModel(dump(TicketOut, tickets), "Tickets retrieved successfully", pagination=pagination)


@router.get("/me", response_description="Tickets of the current user")
async def get_my_tickets(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100), status: str = None,
                         user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return await _my_tickets(page, limit, status, user, db)


@router.get("/my-tickets", response_description="Tickets of the current user")
async def get_my_tickets_alias(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100),
                               status: str = None, user: User = Depends(get_current_user),
                               db: Session = Depends(get_db)):
    return await _my_tickets(page, limit, status, user, db)


@router.get("/", response_description="Retrieve all tickets")
async def get_tickets(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100), status: str = None,
                      payment_status: str = None, event: int = None, admin: User = Depends(require_admin),
                      db: Session = Depends(get_db)):
    tickets, pagination = await retrieve_tickets(db, page, limit, status, payment_status, event)
    return ResponseModel(dump(TicketOut, tickets), "Tickets retrieved successfully", pagination=pagination)


# ----------------------- GATE -----------------------
@router.post("/verify", response_description="Check a scanned ticket without changing it")
async def verify_ticket(payload: VerifyTicketIn = Body(...), staff: User = Depends(require_staff),
                        db: Session = Depends(get_db)):
    result = await verify_ticket_controller(db, payload.qr_data, staff)
    return ResponseModel(
        dump(TicketOut, result["ticket"]),
        "Ticket verified",
        can_be_used=result["can_be_used"],
        status_message=result["status_message"],
    )


@router.post("/verify-qr", response_description="Look up a ticket by QR value")
async def verify_qr(payload: VerifyQrIn = Body(...), staff: User = Depends(require_staff),
                    db: Session = Depends(get_db)):
    ticket = await retrieve_ticket_by_qr_controller(db, payload.qr_code)
    return ResponseModel(dump(TicketOut, ticket), "Ticket found")


@router.post("/verify-event", response_description="Mark one event of a ticket as verified")
async def verify_event(payload: VerifyEventIn = Body(...), staff: User = Depends(require_staff),
                       db: Session = Depends(get_db)):
    ticket = await verify_event_controller(db, payload.ticket_id, payload.event_id, staff)
    return ResponseModel(dump(TicketOut, ticket), "Event verified successfully")


@router.post("/mark-attended", response_description="Record attendance")
async def mark_attended(payload: MarkAttendedIn = Body(...), staff: User = Depends(require_staff),
                        db: Session = Depends(get_db)):
    ticket = await mark_attended_controller(db, payload.ticket_id, staff, payload.event_id)
    return ResponseModel(dump(TicketOut, ticket), "Attendance recorded successfully")


@router.websocket("/ws")
async def websocket_tickets(websocket: WebSocket, token: str = None):
    # Ticket feed is limited to staff dashboards
    db = SessionLocal()
    try:
        payload = decode_token(token or "")
        user = db.query(User).filter(User.id == payload["id"]).first()
    except APIError:
        user = None
    finally:
        db.close()
    if not user or user.role not in STAFF_ROLES:
        await websocket.close(code=1008)
        return

    await ticket_manager.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        ticket_manager.disconnect(websocket)


# ----------------------- SINGLE TICKET -----------------------
@router.get("/{ticket_id}", response_description="Retrieve a ticket")
async def get_ticket(ticket_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ticket = await retrieve_ticket_for_user(db, ticket_id, user)
    return ResponseModel(dump(TicketOut, ticket), "Ticket retrieved successfully")


@router.get("/{ticket_id}/qr", response_description="QR code image of a ticket")
async def get_ticket_qr(ticket_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    qr = await ticket_qr_controller(db, ticket_id, user)
    return ResponseModel(qr, "QR code generated successfully")


@router.put("/{ticket_id}/status", response_description="Change ticket status")
async def update_ticket_status(ticket_id: int, payload: TicketStatusUpdate = Body(...),
                               admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    ticket = await change_ticket_status_controller(db, ticket_id, payload.status)
    return ResponseModel(dump(TicketOut, ticket), "Ticket status updated successfully")


@router.put("/{ticket_id}/cancel", response_description="Cancel a ticket")
async def cancel_ticket(ticket_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    ticket = await cancel_ticket_controller(db, ticket_id)
    return ResponseModel(dump(TicketOut, ticket), "Ticket cancelled successfully")


__all__ = ["router"]
