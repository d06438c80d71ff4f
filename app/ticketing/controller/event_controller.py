from sqlalchemy.orm import Session, joinedload

from ticketing.controller.helpers import paginate
from ticketing.controller.ws_manager import event_manager
from ticketing.errors import APIError
from ticketing.logger import get_logger
from ticketing.models.event_model import Category, Event, Show
from ticketing.models.exhibition_model import Exhibition
from ticketing.models.ticket_model import TicketEvent

logger = get_logger(__name__)


async def _check_references(db: Session, data: dict):
    if data.get("category_id") is not None:
        if not db.query(Category).filter(Category.id == data["category_id"]).first():
            raise APIError(f"Category not found with id of {data['category_id']}", 404)
    if data.get("exhibition_id") is not None:
        if not db.query(Exhibition).filter(Exhibition.id == data["exhibition_id"]).first():
            raise APIError(f"Exhibition not found with id of {data['exhibition_id']}", 404)


# ------------------ Add New Event ------------------
async def add_event_controller(db: Session, event_data: dict, organizer_id: int) -> Event:
    event_data = dict(event_data)
    shows = event_data.pop("shows", []) or []
    await _check_references(db, event_data)

    new_event = Event(**event_data, organizer_id=organizer_id)
    for show in shows:
        new_event.shows.append(Show(**show, booked_seats=0))
    db.add(new_event)
    db.commit()
    db.refresh(new_event)
    logger.info("Event %s created by user %s", new_event.id, organizer_id)

    await event_manager.broadcast({
        "event": "new_event",
        "data": {
            "id": new_event.id,
            "title": new_event.title,
            "venue": new_event.venue,
            "start_date": new_event.start_date.isoformat(),
            "price": new_event.price,
            "capacity": new_event.capacity,
            "status": new_event.status,
        },
    })
    return new_event


# ------------------ Retrieve ALL Events ------------------
async def retrieve_events_controller(db: Session, page: int = 1, limit: int = 10,
                                     status: str = None, category: int = None, search: str = None):
    query = db.query(Event)
    if status:
        query = query.filter(Event.status == status)
    if category:
        query = query.filter(Event.category_id == category)
    if search:
        query = query.filter(Event.title.ilike(f"%{search}%"))
    return paginate(query.order_by(Event.start_date.asc(), Event.id.asc()), page, limit)


async def retrieve_event_or_404(db: Session, event_id: int) -> Event:
    event = (
        db.query(Event)
        .options(joinedload(Event.shows), joinedload(Event.category))
        .filter(Event.id == event_id)
        .first()
    )
    if not event:
        raise APIError(f"Event not found with id of {event_id}", 404)
    return event


# ------------------ Update Event ------------------
async def update_event_controller(db: Session, event_id: int, update_data: dict) -> Event:
    event = await retrieve_event_or_404(db, event_id)
    await _check_references(db, update_data)

    start_date = update_data.get("start_date", event.start_date)
    end_date = update_data.get("end_date", event.end_date)
    if end_date < start_date:
        raise APIError("End date must be after start date", 400)
    if "capacity" in update_data and update_data["capacity"] < (event.tickets_sold or 0):
        raise APIError("Capacity cannot be lower than the number of tickets sold", 400)

    for key, value in update_data.items():
        setattr(event, key, value)
    db.commit()
    db.refresh(event)
    return event


async def update_event_status_controller(db: Session, event_id: int, status: str) -> Event:
    return await update_event_controller(db, event_id, {"status": status})


# ------------------ Delete Event ------------------
async def delete_event_controller(db: Session, event_id: int):
    event = await retrieve_event_or_404(db, event_id)
    if db.query(TicketEvent).filter(TicketEvent.event_id == event.id).first():
        raise APIError("Cannot delete an event that has tickets", 400)
    db.delete(event)
    db.commit()
    logger.info("Event %s deleted", event_id)
    return True


# ------------------ Shows ------------------
async def retrieve_shows_controller(db: Session, event_id: int):
    await retrieve_event_or_404(db, event_id)
    return db.query(Show).filter(Show.event_id == event_id).order_by(Show.starts_at).all()


async def retrieve_show_or_404(db: Session, event_id: int, show_id: int) -> Show:
    show = db.query(Show).filter(Show.id == show_id, Show.event_id == event_id).first()
    if not show:
        raise APIError(f"Show not found with id of {show_id}", 404)
    return show


async def add_show_controller(db: Session, event_id: int, show_data: dict) -> Show:
    await retrieve_event_or_404(db, event_id)
    show = Show(event_id=event_id, booked_seats=0, **show_data)
    db.add(show)
    db.commit()
    db.refresh(show)
    return show


async def update_show_controller(db: Session, event_id: int, show_id: int, update_data: dict) -> Show:
    show = await retrieve_show_or_404(db, event_id, show_id)
    if "total_seats" in update_data and update_data["total_seats"] < (show.booked_seats or 0):
        raise APIError("Total seats cannot be lower than booked seats", 400)
    for key, value in update_data.items():
        setattr(show, key, value)
    db.commit()
    db.refresh(show)
    return show


async def delete_show_controller(db: Session, event_id: int, show_id: int):
    show = await retrieve_show_or_404(db, event_id, show_id)
    if show.booked_seats:
        raise APIError("Cannot delete a show with booked seats", 400)
    db.delete(show)
    db.commit()
    return True
