from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from ticketing.controller import mail_sender
from ticketing.controller import payment_gateway
from ticketing.controller.helpers import paginate, utcnow
from ticketing.controller.qr_code_service import build_ticket_payload, parse_qr_data, qr_data_url, render_qr_base64
from ticketing.controller.settings_controller import get_settings
from ticketing.controller.ws_manager import ticket_manager
from ticketing.errors import APIError, MailDeliveryError
from ticketing.logger import get_logger
from ticketing.models.entrypass_model import EntryPass
from ticketing.models.event_model import Event, Show
from ticketing.models.payment_model import Payment
from ticketing.models.ticket_model import (UNUSABLE_STATUSES,
                                           Ticket,
                                           TicketEvent,
                                           can_transition)
from ticketing.models.user_model import User
from ticketing.security import generate_random_token, generate_ticket_number, generate_ticket_qr_value

logger = get_logger(__name__)

STAFF_ROLES = ("admin", "staff")


# ------------------ Lifecycle helpers ------------------
def transition_ticket(ticket: Ticket, target: str):
    if ticket.status == target:
        raise APIError(f"Ticket is already {target}", 400)
    if not can_transition(ticket.status, target):
        raise APIError(f"Cannot change ticket status from {ticket.status} to {target}", 400)
    ticket.status = target


def ticket_status_info(ticket: Ticket):
    """Returns (can_be_used, status_message) without touching the ticket."""
    if ticket.status in UNUSABLE_STATUSES:
        return False, f"Ticket status: {ticket.status}"
    if ticket.payment_status != "completed":
        return False, f"Payment status: {ticket.payment_status}"
    now = utcnow()
    events = [line.event for line in ticket.lines if line.event is not None]
    if events and all(event.end_date < now for event in events):
        return False, "Event has ended"
    return True, "Valid ticket"


def reserve_show_seats(db: Session, show_id: int, count: int):
    updated = (
        db.query(Show)
        .filter(Show.id == show_id, Show.booked_seats + count <= Show.total_seats)
        .update({Show.booked_seats: Show.booked_seats + count}, synchronize_session=False)
    )
    if not updated:
        raise APIError("Not enough seats available", 400)


def reserve_event_tickets(db: Session, event: Event, quantity: int):
    updated = (
        db.query(Event)
        .filter(Event.id == event.id, Event.tickets_sold + quantity <= Event.capacity)
        .update({Event.tickets_sold: Event.tickets_sold + quantity}, synchronize_session=False)
    )
    if not updated:
        raise APIError(f"Not enough tickets available for {event.title}", 400)


def release_seats(db: Session, ticket: Ticket):
    if ticket.show_id:
        db.query(Show).filter(
            Show.id == ticket.show_id, Show.booked_seats >= ticket.head_count
        ).update({Show.booked_seats: Show.booked_seats - ticket.head_count}, synchronize_session=False)
    for line in ticket.lines:
        db.query(Event).filter(
            Event.id == line.event_id, Event.tickets_sold >= line.quantity
        ).update({Event.tickets_sold: Event.tickets_sold - line.quantity}, synchronize_session=False)
    logger.info("Released seats held by ticket %s", ticket.ticket_number)


def merge_event_lines(lines) -> list:
    """Folds repeated event ids into one line each, keeping first-seen order."""
    merged = {}
    for line in lines:
        if line["event_id"] in merged:
            merged[line["event_id"]]["quantity"] += line["quantity"]
        else:
            merged[line["event_id"]] = {"event_id": line["event_id"], "quantity": line["quantity"]}
    return list(merged.values())


def new_ticket(purchased_by_id: int, **fields) -> Ticket:
    # Placeholder QR value until the row has an id
    return Ticket(
        ticket_number=generate_ticket_number(),
        purchased_by_id=purchased_by_id,
        qr_code=generate_random_token(16),
        **fields,
    )


def assign_qr_value(ticket: Ticket):
    ticket.qr_code = generate_ticket_qr_value(ticket.ticket_number, ticket.id)


async def send_ticket_notification(db: Session, ticket: Ticket):
    settings = await get_settings(db)
    if not settings.enable_email_notifications:
        return False
    purchaser = ticket.purchaser
    titles = [line.event.title for line in ticket.lines if line.event is not None]
    try:
        return await mail_sender.send_ticket_email(
            purchaser.email, purchaser.name, ticket.ticket_number, titles,
            ticket.total_amount, render_qr_base64(build_ticket_payload(ticket)),
        )
    except MailDeliveryError as e:
        # Ticket stays paid
        logger.error("Ticket %s mail to %s failed: %s", ticket.ticket_number, purchaser.email, e)
        return False


async def broadcast_ticket(ticket: Ticket):
    await ticket_manager.broadcast({
        "event": "new_ticket",
        "data": {
            "id": ticket.id,
            "ticket_number": ticket.ticket_number,
            "purchased_by": ticket.purchased_by_id,
            "head_count": ticket.head_count,
            "total_amount": ticket.total_amount,
            "payment_status": ticket.payment_status,
        },
    })


# ------------------ Retrieve ------------------
def _ticket_query(db: Session):
    return db.query(Ticket).options(selectinload(Ticket.lines).selectinload(TicketEvent.event))


async def retrieve_ticket_or_404(db: Session, ticket_id: int) -> Ticket:
    ticket = _ticket_query(db).filter(Ticket.id == ticket_id).first()
    if not ticket:
        raise APIError(f"Ticket not found with id of {ticket_id}", 404)
    return ticket


async def retrieve_ticket_for_user(db: Session, ticket_id: int, user: User) -> Ticket:
    ticket = await retrieve_ticket_or_404(db, ticket_id)
    if ticket.purchased_by_id != user.id and user.role not in STAFF_ROLES:
        raise APIError("Not authorized to access this ticket", 403)
    return ticket


async def retrieve_my_tickets(db: Session, user: User, page: int = 1, limit: int = 10, status: str = None):
    query = _ticket_query(db).filter(Ticket.purchased_by_id == user.id)
    if status:
        query = query.filter(Ticket.status == status)
    return paginate(query.order_by(Ticket.purchase_date.desc(), Ticket.id.desc()), page, limit)


async def retrieve_tickets(db: Session, page: int = 1, limit: int = 10, status: str = None,
                           payment_status: str = None, event: int = None, user: int = None):
    query = _ticket_query(db)
    if status:
        query = query.filter(Ticket.status == status)
    if payment_status:
        query = query.filter(Ticket.payment_status == payment_status)
    if user:
        query = query.filter(Ticket.purchased_by_id == user)
    if event:
        query = query.filter(Ticket.lines.any(TicketEvent.event_id == event))
    return paginate(query.order_by(Ticket.purchase_date.desc(), Ticket.id.desc()), page, limit)


async def ticket_qr_controller(db: Session, ticket_id: int, user: User) -> dict:
    ticket = await retrieve_ticket_for_user(db, ticket_id, user)
    payload = build_ticket_payload(ticket)
    return {"ticket_id": ticket.id, "ticket_number": ticket.ticket_number, "qr_code": qr_data_url(payload)}


# ------------------ Book a show ------------------
async def book_ticket_controller(db: Session, user: User, booking: dict) -> dict:
    head_count = booking["head_count"]
    attendees = booking.get("attendees") or []
    if len(attendees) > head_count:
        raise APIError("More attendees than head count", 400)

    event = db.query(Event).filter(Event.id == booking["event_id"]).first()
    if not event:
        raise APIError(f"Event not found with id of {booking['event_id']}", 404)
    if event.status != "published":
        raise APIError("Event is not open for booking", 400)
    show = db.query(Show).filter(Show.id == booking["show_id"], Show.event_id == event.id).first()
    if not show:
        raise APIError("Show not found for this event", 404)

    try:
        reserve_show_seats(db, show.id, head_count)
        db.query(Event).filter(Event.id == event.id).update(
            {Event.tickets_sold: Event.tickets_sold + head_count}, synchronize_session=False
        )

        ticket = new_ticket(
            user.id,
            show_id=show.id,
            head_count=head_count,
            attendees=attendees,
            total_amount=round(event.price * head_count, 2),
            status="active",
        )
        ticket.lines.append(TicketEvent(event_id=event.id, quantity=head_count))

        order = None
        if booking.get("use_entry_pass"):
            entry_pass = _debit_entry_pass(db, user.id, head_count)
            ticket.entry_pass_id = entry_pass.id
            ticket.total_amount = 0
            ticket.payment_status = "completed"
            ticket.payment_method = "entry_pass"
        elif ticket.total_amount == 0:
            ticket.payment_status = "completed"
            ticket.payment_method = "free"
        else:
            ticket.payment_status = "pending"

        db.add(ticket)
        db.flush()
        assign_qr_value(ticket)

        if ticket.payment_status == "pending":
            order = payment_gateway.create_order(ticket.total_amount, ticket.ticket_number)
            db.add(Payment(
                user_id=user.id,
                ticket_id=ticket.id,
                amount=ticket.total_amount,
                currency=order["currency"],
                order_id=order["id"],
                status="initiated",
                meta={"receipt": ticket.ticket_number, "show_id": show.id},
            ))
        db.commit()
    except APIError:
        db.rollback()
        raise

    ticket = await retrieve_ticket_or_404(db, ticket.id)
    logger.info("Ticket %s booked by user %s for show %s", ticket.ticket_number, user.id, show.id)
    if ticket.payment_status == "completed":
        await send_ticket_notification(db, ticket)
    await broadcast_ticket(ticket)
    return {"ticket": ticket, "order": order}


def _debit_entry_pass(db: Session, user_id: int, count: int) -> EntryPass:
    now = utcnow()
    entry_pass = (
        db.query(EntryPass)
        .filter(EntryPass.user_id == user_id, EntryPass.status == "active",
                EntryPass.expiry_date > now, EntryPass.head_count >= count)
        .order_by(EntryPass.expiry_date.asc())
        .first()
    )
    if not entry_pass:
        raise APIError("No active entry pass with enough head count", 400)

    updated = (
        db.query(EntryPass)
        .filter(EntryPass.id == entry_pass.id, EntryPass.head_count >= count)
        .update({EntryPass.head_count: EntryPass.head_count - count}, synchronize_session=False)
    )
    if not updated:
        raise APIError("No active entry pass with enough head count", 400)
    db.refresh(entry_pass)
    if entry_pass.head_count == 0:
        entry_pass.status = "used"
    return entry_pass


# ------------------ Box office ------------------
async def issue_ticket_controller(db: Session, issuer: User, ticket_data: dict) -> Ticket:
    purchaser_id = ticket_data.get("purchased_by") or issuer.id
    purchaser = db.query(User).filter(User.id == purchaser_id).first()
    if not purchaser:
        raise APIError(f"User not found with id of {purchaser_id}", 404)

    try:
        ticket = new_ticket(
            purchaser.id,
            issued_by_id=issuer.id,
            attendees=ticket_data.get("attendees") or [],
            payment_status="completed",
            payment_method=ticket_data.get("payment_method") or "cash",
            status="active",
        )
        total_amount, head_count = 0.0, 0
        for line in merge_event_lines(ticket_data["events"]):
            event = db.query(Event).filter(Event.id == line["event_id"]).first()
            if not event:
                raise APIError(f"Event not found with id of {line['event_id']}", 404)
            reserve_event_tickets(db, event, line["quantity"])
            ticket.lines.append(TicketEvent(event_id=event.id, quantity=line["quantity"]))
            total_amount += event.price * line["quantity"]
            head_count += line["quantity"]

        ticket.total_amount = round(total_amount, 2)
        ticket.head_count = head_count
        db.add(ticket)
        db.flush()
        assign_qr_value(ticket)
        db.commit()
    except APIError:
        db.rollback()
        raise

    ticket = await retrieve_ticket_or_404(db, ticket.id)
    logger.info("Ticket %s issued by %s for user %s", ticket.ticket_number, issuer.id, purchaser.id)
    await send_ticket_notification(db, ticket)
    await broadcast_ticket(ticket)
    return ticket


# ------------------ Verification ------------------
async def verify_ticket_controller(db: Session, qr_data: str, verifier: User) -> dict:
    settings = await get_settings(db)
    if not settings.enable_qr_scanning:
        raise APIError("QR code scanning is disabled", 403)

    ticket_id, qr_value = parse_qr_data(qr_data)
    if ticket_id is not None:
        ticket = _ticket_query(db).filter(Ticket.id == ticket_id).first()
        if ticket and qr_value and ticket.qr_code != qr_value:
            raise APIError("Invalid QR code", 400)
    elif qr_value:
        ticket = _ticket_query(db).filter(Ticket.qr_code == qr_value).first()
    else:
        raise APIError("Invalid QR code", 400)
    if not ticket:
        raise APIError("Ticket not found", 404)

    can_be_used, status_message = ticket_status_info(ticket)
    logger.info("Ticket %s checked by %s: %s", ticket.ticket_number, verifier.id, status_message)
    return {"ticket": ticket, "can_be_used": can_be_used, "status_message": status_message}


async def retrieve_ticket_by_qr_controller(db: Session, qr_code: str) -> Ticket:
    ticket = _ticket_query(db).filter(Ticket.qr_code == qr_code).first()
    if not ticket:
        raise APIError("Invalid QR code or ticket not found", 404)
    return ticket


def _line_for_event(ticket: Ticket, event_id: int) -> TicketEvent:
    for line in ticket.lines:
        if line.event_id == event_id:
            return line
    raise APIError("Event not found in ticket", 404)


def _mark_line(line: TicketEvent, verifier: User):
    line.verified = True
    line.verified_at = utcnow()
    line.verified_by_id = verifier.id


async def verify_event_controller(db: Session, ticket_id: int, event_id: int, verifier: User) -> Ticket:
    ticket = await retrieve_ticket_or_404(db, ticket_id)
    line = _line_for_event(ticket, event_id)
    if line.verified:
        raise APIError("Event already verified", 400)
    _mark_line(line, verifier)
    db.commit()
    logger.info("Ticket %s verified for event %s by %s", ticket.ticket_number, event_id, verifier.id)
    return await retrieve_ticket_or_404(db, ticket.id)


async def mark_attended_controller(db: Session, ticket_id: int, verifier: User,
                                   event_id: Optional[int] = None) -> Ticket:
    ticket = await retrieve_ticket_or_404(db, ticket_id)
    can_be_used, status_message = ticket_status_info(ticket)
    if not can_be_used:
        raise APIError(status_message, 400)

    lines: List[TicketEvent] = [_line_for_event(ticket, event_id)] if event_id else list(ticket.lines)
    for line in lines:
        if not line.verified:
            _mark_line(line, verifier)
    if ticket.lines and all(line.verified for line in ticket.lines):
        transition_ticket(ticket, "used")
    db.commit()
    logger.info("Ticket %s attendance marked by %s", ticket.ticket_number, verifier.id)
    return await retrieve_ticket_or_404(db, ticket.id)


# ------------------ Status changes ------------------
async def change_ticket_status_controller(db: Session, ticket_id: int, status: str) -> Ticket:
    ticket = await retrieve_ticket_or_404(db, ticket_id)
    was_active = ticket.status == "active"
    transition_ticket(ticket, status)
    if was_active and status in ("cancelled", "refunded"):
        release_seats(db, ticket)
    db.commit()
    logger.info("Ticket %s moved to %s", ticket.ticket_number, status)
    return await retrieve_ticket_or_404(db, ticket.id)


async def cancel_ticket_controller(db: Session, ticket_id: int) -> Ticket:
    return await change_ticket_status_controller(db, ticket_id, "cancelled")
