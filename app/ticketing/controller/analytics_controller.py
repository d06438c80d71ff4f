from calendar import monthrange
from collections import OrderedDict
from datetime import datetime, time, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ticketing.controller.helpers import to_naive_utc, utcnow
from ticketing.errors import APIError
from ticketing.models.event_model import Event
from ticketing.models.ticket_model import Ticket, TicketEvent
from ticketing.models.user_model import User

TIME_RANGES = ("day", "week", "month", "year", "last7days", "last30days", "last3months", "last6months")
GROUP_FORMATS = {"day": "%Y-%m-%d", "month": "%Y-%m", "year": "%Y"}


# ------------------ Date helpers ------------------
def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)


def subtract_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 - months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def resolve_time_range(time_range: str = "month", start_date: Optional[datetime] = None,
                       end_date: Optional[datetime] = None):
    """Explicit start/end win over a named range; both ends are inclusive."""
    start_date, end_date = to_naive_utc(start_date), to_naive_utc(end_date)
    if start_date and end_date:
        if end_date < start_date:
            raise APIError("End date must be after start date", 400)
        return start_of_day(start_date), end_of_day(end_date)

    if time_range not in TIME_RANGES:
        raise APIError(f"Invalid time range: {time_range}", 400)

    now = utcnow()
    if time_range == "day":
        return start_of_day(now), end_of_day(now)
    if time_range == "week":
        start = start_of_day(now - timedelta(days=now.weekday()))
        return start, end_of_day(start + timedelta(days=6))
    if time_range == "year":
        return datetime(now.year, 1, 1), end_of_day(datetime(now.year, 12, 31))
    if time_range == "last7days":
        return start_of_day(now - timedelta(days=6)), end_of_day(now)
    if time_range == "last30days":
        return start_of_day(now - timedelta(days=29)), end_of_day(now)
    if time_range == "last3months":
        return start_of_day(subtract_months(now, 3)), end_of_day(now)
    if time_range == "last6months":
        return start_of_day(subtract_months(now, 6)), end_of_day(now)
    last_day = monthrange(now.year, now.month)[1]
    return datetime(now.year, now.month, 1), end_of_day(datetime(now.year, now.month, last_day))


def _default_period(start_date, end_date):
    start_date, end_date = to_naive_utc(start_date), to_naive_utc(end_date)
    now = utcnow()
    start = start_of_day(start_date) if start_date else datetime(now.year, now.month, 1)
    end = end_of_day(end_date) if end_date else end_of_day(now)
    if end < start:
        raise APIError("End date must be after start date", 400)
    return start, end


def percent_change(current: float, previous: float) -> float:
    if previous == 0:
        return 100.0 if current else 0.0
    return round((current - previous) / previous * 100, 2)


def _period(start: datetime, end: datetime) -> dict:
    return {"start": start.strftime("%Y-%m-%d"), "end": end.strftime("%Y-%m-%d")}


# ------------------ Dashboard stats ------------------
async def get_stats(db: Session, time_range: str = "month", start_date: datetime = None,
                    end_date: datetime = None) -> dict:
    start, end = resolve_time_range(time_range, start_date, end_date)
    now = utcnow()

    total_revenue = db.query(func.coalesce(func.sum(Ticket.total_amount), 0)).filter(
        Ticket.payment_status == "completed").scalar()
    period_revenue = db.query(func.coalesce(func.sum(Ticket.total_amount), 0)).filter(
        Ticket.payment_status == "completed",
        Ticket.purchase_date >= start, Ticket.purchase_date <= end).scalar()

    status_rows = (
        db.query(Ticket.status, func.count(Ticket.id))
        .filter(Ticket.purchase_date >= start, Ticket.purchase_date <= end)
        .group_by(Ticket.status)
        .all()
    )
    recent_tickets = (
        db.query(Ticket)
        .order_by(Ticket.purchase_date.desc(), Ticket.id.desc())
        .limit(5)
        .all()
    )

    return {
        "period": _period(start, end),
        "total_users": db.query(User).count(),
        "new_users": db.query(User).filter(User.created_at >= start, User.created_at <= end).count(),
        "total_events": db.query(Event).count(),
        "upcoming_events": db.query(Event).filter(Event.start_date > now).count(),
        "total_tickets": db.query(Ticket).count(),
        "active_tickets": db.query(Ticket).filter(Ticket.status == "active").count(),
        "total_revenue": float(total_revenue or 0),
        "period_revenue": float(period_revenue or 0),
        "ticket_status_distribution": {status: count for status, count in status_rows},
        "recent_tickets": recent_tickets,
    }


# ------------------ Revenue ------------------
def _previous_window(start: datetime, end: datetime):
    """The span of equal length right before `start`; its upper bound is exclusive."""
    return start - (end - start) - timedelta(microseconds=1), start


def _completed_tickets(db: Session, start: datetime, end: datetime, end_inclusive: bool = True):
    before_end = Ticket.purchase_date <= end if end_inclusive else Ticket.purchase_date < end
    return (
        db.query(Ticket.purchase_date, Ticket.total_amount)
        .filter(Ticket.payment_status == "completed", Ticket.purchase_date >= start, before_end)
        .order_by(Ticket.purchase_date)
        .all()
    )


async def revenue_analytics(db: Session, start_date: datetime = None, end_date: datetime = None,
                            group_by: str = "day") -> dict:
    if group_by not in GROUP_FORMATS:
        raise APIError(f"Invalid group_by: {group_by}", 400)
    start, end = _default_period(start_date, end_date)
    fmt = GROUP_FORMATS[group_by]

    buckets = OrderedDict()
    if group_by == "day":
        # Fill missing days
        current = start
        while current <= end:
            buckets[current.strftime(fmt)] = {"revenue": 0.0, "count": 0}
            current += timedelta(days=1)
    for purchase_date, amount in _completed_tickets(db, start, end):
        bucket = buckets.setdefault(purchase_date.strftime(fmt), {"revenue": 0.0, "count": 0})
        bucket["revenue"] += float(amount or 0)
        bucket["count"] += 1

    current_revenue = sum(b["revenue"] for b in buckets.values())
    current_count = sum(b["count"] for b in buckets.values())

    previous_start, previous_end = _previous_window(start, end)
    previous = _completed_tickets(db, previous_start, previous_end, end_inclusive=False)
    previous_revenue = sum(float(amount or 0) for _, amount in previous)
    previous_count = len(previous)

    return {
        "period": _period(start, end),
        "data": [
            {"period": key, "revenue": round(b["revenue"], 2), "count": b["count"]}
            for key, b in buckets.items()
        ],
        "summary": {
            "current_period": {"revenue": round(current_revenue, 2), "count": current_count},
            "previous_period": {"revenue": round(previous_revenue, 2), "count": previous_count},
            "changes": {
                "revenue": percent_change(current_revenue, previous_revenue),
                "count": percent_change(current_count, previous_count),
            },
        },
    }


# ------------------ Attendance ------------------
async def attendance_analytics(db: Session, event_id: int = None, start_date: datetime = None,
                               end_date: datetime = None) -> dict:
    start, end = _default_period(start_date, end_date)
    query = (
        db.query(TicketEvent.event_id, Event.title, TicketEvent.verified_at)
        .join(Event, Event.id == TicketEvent.event_id)
        .filter(TicketEvent.verified.is_(True),
                TicketEvent.verified_at >= start, TicketEvent.verified_at <= end)
    )
    if event_id:
        query = query.filter(TicketEvent.event_id == event_id)

    events = OrderedDict()
    for line_event_id, title, verified_at in query.order_by(TicketEvent.verified_at).all():
        record = events.setdefault(line_event_id, {
            "event_id": line_event_id,
            "title": title,
            "total_attendance": 0,
            "daily": OrderedDict(),
        })
        day = verified_at.strftime("%Y-%m-%d")
        record["total_attendance"] += 1
        record["daily"][day] = record["daily"].get(day, 0) + 1

    summary, daily_attendance = [], []
    for record in events.values():
        daily = [{"date": day, "count": count} for day, count in record.pop("daily").items()]
        summary.append({**record, "daily_attendance": daily})
        daily_attendance.extend(
            {"date": d["date"], "event_id": record["event_id"], "event_title": record["title"], "count": d["count"]}
            for d in daily
        )
    daily_attendance.sort(key=lambda item: item["date"])

    return {"period": _period(start, end), "events": summary, "daily_attendance": daily_attendance}


# ------------------ Registrations ------------------
async def user_analytics(db: Session, start_date: datetime = None, end_date: datetime = None,
                         group_by: str = "day") -> dict:
    if group_by not in GROUP_FORMATS:
        raise APIError(f"Invalid group_by: {group_by}", 400)
    start, end = _default_period(start_date, end_date)
    fmt = GROUP_FORMATS[group_by]

    registrations = OrderedDict()
    roles = {}
    rows = (
        db.query(User.created_at, User.role)
        .filter(User.created_at >= start, User.created_at <= end)
        .order_by(User.created_at)
        .all()
    )
    for created_at, role in rows:
        key = created_at.strftime(fmt)
        registrations[key] = registrations.get(key, 0) + 1
        roles[role] = roles.get(role, 0) + 1

    previous_start, previous_end = _previous_window(start, end)
    previous_total = db.query(User).filter(
        User.created_at >= previous_start, User.created_at < previous_end).count()

    return {
        "period": _period(start, end),
        "registrations": [{"period": key, "count": count} for key, count in registrations.items()],
        "role_distribution": [{"role": role, "count": count} for role, count in sorted(roles.items())],
        "summary": {
            "total": len(rows),
            "previous_period": previous_total,
            "percent_change": percent_change(len(rows), previous_total),
        },
    }


# ------------------ Event performance ------------------
def _charged_revenue_by_event(db: Session) -> dict:
    """Splits each paid ticket's total_amount over its event lines by list value.

    Entry-pass and free tickets carry a total of 0 and add nothing.
    """
    rows = (
        db.query(TicketEvent.ticket_id, TicketEvent.event_id, TicketEvent.quantity, Event.price, Ticket.total_amount)
        .join(Ticket, Ticket.id == TicketEvent.ticket_id)
        .join(Event, Event.id == TicketEvent.event_id)
        .filter(Ticket.payment_status == "completed")
        .all()
    )
    tickets = OrderedDict()
    for ticket_id, event_id, quantity, price, total_amount in rows:
        ticket = tickets.setdefault(ticket_id, {"total": float(total_amount or 0), "lines": []})
        ticket["lines"].append((event_id, quantity or 0, (quantity or 0) * float(price or 0)))

    revenue = {}
    for ticket in tickets.values():
        if not ticket["total"]:
            continue
        list_value = sum(value for _, _, value in ticket["lines"])
        quantities = sum(quantity for _, quantity, _ in ticket["lines"])
        for event_id, quantity, value in ticket["lines"]:
            if list_value:
                share = value / list_value
            else:
                share = quantity / quantities if quantities else 1 / len(ticket["lines"])
            revenue[event_id] = revenue.get(event_id, 0.0) + ticket["total"] * share
    return revenue


async def event_performance(db: Session, status: str = None, sort_by: str = "revenue", limit: int = 10,
                            category: int = None) -> list:
    if sort_by not in ("revenue", "tickets_sold", "percentage_sold"):
        raise APIError(f"Invalid sort_by: {sort_by}", 400)

    revenue_by_event = _charged_revenue_by_event(db)

    query = db.query(Event)
    if status:
        query = query.filter(Event.status == status)
    if category:
        query = query.filter(Event.category_id == category)

    performance = []
    for event in query.all():
        sold = event.tickets_sold or 0
        performance.append({
            "event_id": event.id,
            "title": event.title,
            "status": event.status,
            "start_date": event.start_date.isoformat(),
            "capacity": event.capacity,
            "tickets_sold": sold,
            "revenue": round(revenue_by_event.get(event.id, 0.0), 2),
            "percentage_sold": round(sold / event.capacity * 100, 2) if event.capacity else 0.0,
        })
    performance.sort(key=lambda item: item[sort_by], reverse=True)
    return performance[:max(limit, 1)]
