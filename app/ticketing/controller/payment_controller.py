from datetime import datetime

from sqlalchemy.orm import Session

from ticketing.controller import mail_sender
from ticketing.controller import payment_gateway
from ticketing.controller.helpers import paginate, to_naive_utc, utcnow
from ticketing.controller.settings_controller import get_settings
from ticketing.controller.ticket_controller import (assign_qr_value,
                                                    broadcast_ticket,
                                                    merge_event_lines,
                                                    new_ticket,
                                                    release_seats,
                                                    reserve_event_tickets,
                                                    retrieve_ticket_or_404,
                                                    send_ticket_notification,
                                                    transition_ticket)
from ticketing.errors import APIError, MailDeliveryError
from ticketing.logger import get_logger
from ticketing.models.event_model import Event
from ticketing.models.payment_model import Payment
from ticketing.models.ticket_model import TicketEvent
from ticketing.models.user_model import User

logger = get_logger(__name__)


# ------------------ Create order ------------------
async def create_order_controller(db: Session, user: User, order_data: dict) -> dict:
    lines = merge_event_lines(order_data["events"])
    attendees = order_data["attendees"]
    total_quantity = sum(line["quantity"] for line in lines)
    if len(attendees) != total_quantity:
        raise APIError("Number of attendees must match total ticket quantity", 400)

    try:
        ticket = new_ticket(
            user.id,
            head_count=total_quantity,
            attendees=attendees,
            payment_status="pending",
            status="active",
        )
        amount = 0.0
        for line in lines:
            event = db.query(Event).filter(Event.id == line["event_id"]).first()
            if not event:
                raise APIError(f"Event not found with id of {line['event_id']}", 404)
            if event.status != "published":
                raise APIError(f"Event {event.title} is not open for booking", 400)
            reserve_event_tickets(db, event, line["quantity"])
            ticket.lines.append(TicketEvent(event_id=event.id, quantity=line["quantity"]))
            amount += event.price * line["quantity"]

        ticket.total_amount = round(amount, 2)
        db.add(ticket)
        db.flush()
        assign_qr_value(ticket)

        order = payment_gateway.create_order(ticket.total_amount, ticket.ticket_number)
        payment = Payment(
            user_id=user.id,
            ticket_id=ticket.id,
            amount=ticket.total_amount,
            currency=order["currency"],
            order_id=order["id"],
            status="initiated",
            meta={"receipt": ticket.ticket_number, "events": [dict(line) for line in lines]},
        )
        db.add(payment)
        db.commit()
    except APIError:
        db.rollback()
        raise

    logger.info("Order %s opened for ticket %s (%s %s)",
                order["id"], ticket.ticket_number, order["currency"], ticket.total_amount)
    return {
        "order_id": order["id"],
        "amount": order["amount"],
        "currency": order["currency"],
        "ticket_id": ticket.id,
        "ticket_number": ticket.ticket_number,
        "mock_payment": payment_gateway.generate_payment_credentials(order["id"]),
    }


# ------------------ Verify payment ------------------
async def verify_payment_controller(db: Session, user: User, verify_data: dict) -> dict:
    order_id = verify_data["order_id"]
    payment_id = verify_data["payment_id"]
    if not payment_gateway.verify_payment_signature(order_id, payment_id, verify_data["signature"]):
        logger.warning("Rejected payment %s for order %s: bad signature", payment_id, order_id)
        raise APIError("Invalid payment signature", 400)

    ticket = await retrieve_ticket_or_404(db, verify_data["ticket_id"])
    if ticket.purchased_by_id != user.id and user.role != "admin":
        raise APIError("Not authorized to pay for this ticket", 403)
    if ticket.status != "active":
        raise APIError(f"Ticket is {ticket.status}", 400)
    payment = db.query(Payment).filter(Payment.order_id == order_id, Payment.ticket_id == ticket.id).first()
    if not payment:
        raise APIError("Payment not found", 404)
    if ticket.payment_status == "completed" or payment.status == "completed":
        raise APIError("Ticket is already paid", 400)

    payment.status = "completed"
    payment.gateway_payment_id = payment_id
    payment.signature = verify_data["signature"]
    ticket.payment_status = "completed"
    ticket.payment_id = payment_id
    ticket.payment_method = payment.payment_method
    assign_qr_value(ticket)
    db.commit()
    logger.info("Payment %s completed for ticket %s", payment_id, ticket.ticket_number)

    ticket = await retrieve_ticket_or_404(db, ticket.id)
    db.refresh(payment)
    await send_ticket_notification(db, ticket)
    await broadcast_ticket(ticket)
    return {"ticket": ticket, "payment": payment}


# ------------------ Listings ------------------
async def retrieve_my_payments(db: Session, user: User, page: int = 1, limit: int = 10):
    query = db.query(Payment).filter(Payment.user_id == user.id)
    return paginate(query.order_by(Payment.created_at.desc(), Payment.id.desc()), page, limit)


async def retrieve_payments(db: Session, page: int = 1, limit: int = 10, status: str = None,
                            user: int = None, start_date: datetime = None, end_date: datetime = None):
    query = db.query(Payment)
    if status:
        query = query.filter(Payment.status == status)
    if user:
        query = query.filter(Payment.user_id == user)
    if start_date:
        query = query.filter(Payment.created_at >= to_naive_utc(start_date))
    if end_date:
        query = query.filter(Payment.created_at <= to_naive_utc(end_date))
    return paginate(query.order_by(Payment.created_at.desc(), Payment.id.desc()), page, limit)


# ------------------ Refund ------------------
async def refund_controller(db: Session, ticket_id: int, amount: float = None, reason: str = None) -> dict:
    ticket = await retrieve_ticket_or_404(db, ticket_id)
    payment = (
        db.query(Payment)
        .filter(Payment.ticket_id == ticket.id, Payment.status == "completed")
        .order_by(Payment.id.desc())
        .first()
    )
    if not payment:
        raise APIError("No completed payment found for this ticket", 400)

    refund_amount = payment.amount if amount is None else amount
    if refund_amount > payment.amount:
        raise APIError("Refund amount cannot exceed the paid amount", 400)

    was_active = ticket.status == "active"
    transition_ticket(ticket, "refunded")
    refund = payment_gateway.issue_refund(payment.gateway_payment_id or payment.order_id, refund_amount)

    payment.status = "refunded"
    payment.refund_amount = refund_amount
    payment.refund_id = refund["id"]
    payment.refunded_at = utcnow()
    payment.meta = {**(payment.meta or {}), "refund_reason": reason}
    ticket.payment_status = "refunded"
    if was_active:
        release_seats(db, ticket)
    db.commit()
    logger.info("Refunded %s on ticket %s (%s)", refund_amount, ticket.ticket_number, refund["id"])

    ticket = await retrieve_ticket_or_404(db, ticket.id)
    db.refresh(payment)
    settings = await get_settings(db)
    if settings.enable_email_notifications:
        try:
            await mail_sender.send_refund_email(
                ticket.purchaser.email, ticket.purchaser.name, ticket.ticket_number,
                refund_amount, refund["id"],
            )
        except MailDeliveryError as e:
            logger.error("Refund mail for ticket %s failed: %s", ticket.ticket_number, e)
    return {"ticket": ticket, "payment": payment}
