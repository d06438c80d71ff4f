from sqlalchemy import func
from sqlalchemy.orm import Session

from ticketing.controller.helpers import paginate
from ticketing.errors import APIError
from ticketing.logger import get_logger
from ticketing.models.event_model import Event
from ticketing.models.rating_model import Rating
from ticketing.models.ticket_model import Ticket, TicketEvent
from ticketing.models.user_model import User

logger = get_logger(__name__)


def recompute_average_rating(db: Session, event_id: int):
    average = db.query(func.avg(Rating.rating)).filter(Rating.event_id == event_id).scalar()
    db.query(Event).filter(Event.id == event_id).update(
        {Event.average_rating: round(float(average), 1) if average is not None else 0},
        synchronize_session=False,
    )


def _has_attended(db: Session, user_id: int, event_id: int) -> bool:
    return db.query(Ticket).join(TicketEvent).filter(
        Ticket.purchased_by_id == user_id,
        Ticket.status.in_(("active", "used")),
        TicketEvent.event_id == event_id,
        TicketEvent.verified.is_(True),
    ).first() is not None


async def _event_or_404(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise APIError(f"Event not found with id of {event_id}", 404)
    return event


async def retrieve_event_ratings(db: Session, event_id: int, page: int = 1, limit: int = 10):
    await _event_or_404(db, event_id)
    query = db.query(Rating).filter(Rating.event_id == event_id)
    return paginate(query.order_by(Rating.created_at.desc(), Rating.id.desc()), page, limit)


async def retrieve_ratings(db: Session, page: int = 1, limit: int = 10, event: int = None,
                           user: int = None, min_rating: int = None):
    query = db.query(Rating)
    if event:
        query = query.filter(Rating.event_id == event)
    if user:
        query = query.filter(Rating.user_id == user)
    if min_rating:
        query = query.filter(Rating.rating >= min_rating)
    return paginate(query.order_by(Rating.created_at.desc(), Rating.id.desc()), page, limit)


# ------------------ Add Rating ------------------
async def add_rating(db: Session, event_id: int, user: User, rating_data: dict) -> Rating:
    await _event_or_404(db, event_id)
    if user.role != "admin" and not _has_attended(db, user.id, event_id):
        raise APIError("You can only rate events you have attended", 403)
    if db.query(Rating).filter(Rating.user_id == user.id, Rating.event_id == event_id).first():
        raise APIError("You have already rated this event", 400)

    rating = Rating(user_id=user.id, event_id=event_id, **rating_data)
    db.add(rating)
    db.flush()
    recompute_average_rating(db, event_id)
    db.commit()
    db.refresh(rating)
    logger.info("User %s rated event %s with %s", user.id, event_id, rating.rating)
    return rating


async def _owned_rating_or_error(db: Session, rating_id: int, user: User, action: str) -> Rating:
    rating = db.query(Rating).filter(Rating.id == rating_id).first()
    if not rating:
        raise APIError(f"Rating not found with id of {rating_id}", 404)
    if rating.user_id != user.id and user.role != "admin":
        raise APIError(f"Not authorized to {action} this rating", 403)
    return rating


async def update_rating(db: Session, rating_id: int, user: User, update_data: dict) -> Rating:
    rating = await _owned_rating_or_error(db, rating_id, user, "update")
    for key, value in update_data.items():
        setattr(rating, key, value)
    db.flush()
    recompute_average_rating(db, rating.event_id)
    db.commit()
    db.refresh(rating)
    return rating


async def delete_rating(db: Session, rating_id: int, user: User):
    rating = await _owned_rating_or_error(db, rating_id, user, "delete")
    event_id = rating.event_id
    db.delete(rating)
    db.flush()
    recompute_average_rating(db, event_id)
    db.commit()
    return True
