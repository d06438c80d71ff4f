from sqlalchemy.orm import Session, selectinload

from ticketing.controller.helpers import paginate, utcnow
from ticketing.errors import APIError
from ticketing.models.event_model import Event
from ticketing.models.exhibition_model import Exhibition


async def _attach_events(db: Session, exhibition: Exhibition, event_ids):
    events = db.query(Event).filter(Event.id.in_(event_ids)).all() if event_ids else []
    missing = set(event_ids or []) - {event.id for event in events}
    if missing:
        raise APIError(f"Event not found with id of {sorted(missing)[0]}", 404)
    exhibition.events = events


async def retrieve_exhibitions(db: Session, page: int = 1, limit: int = 10, status: str = None):
    query = db.query(Exhibition).options(selectinload(Exhibition.events))
    if status:
        query = query.filter(Exhibition.status == status)
    return paginate(query.order_by(Exhibition.start_date.desc(), Exhibition.id.desc()), page, limit)


async def retrieve_upcoming_exhibitions(db: Session):
    return (
        db.query(Exhibition)
        .options(selectinload(Exhibition.events))
        .filter(Exhibition.start_date > utcnow())
        .order_by(Exhibition.start_date.asc())
        .all()
    )


async def retrieve_exhibition_or_404(db: Session, exhibition_id: int) -> Exhibition:
    exhibition = (
        db.query(Exhibition)
        .options(selectinload(Exhibition.events))
        .filter(Exhibition.id == exhibition_id)
        .first()
    )
    if not exhibition:
        raise APIError(f"Exhibition not found with id of {exhibition_id}", 404)
    return exhibition


async def add_exhibition(db: Session, organizer_id: int, exhibition_data: dict) -> Exhibition:
    exhibition_data = dict(exhibition_data)
    event_ids = exhibition_data.pop("event_ids", [])
    exhibition = Exhibition(**exhibition_data, organizer_id=organizer_id)
    await _attach_events(db, exhibition, event_ids)
    db.add(exhibition)
    db.commit()
    return await retrieve_exhibition_or_404(db, exhibition.id)


async def update_exhibition(db: Session, exhibition_id: int, update_data: dict) -> Exhibition:
    exhibition = await retrieve_exhibition_or_404(db, exhibition_id)
    event_ids = update_data.pop("event_ids", None)
    start_date = update_data.get("start_date", exhibition.start_date)
    end_date = update_data.get("end_date", exhibition.end_date)
    if end_date < start_date:
        raise APIError("End date must be after start date", 400)

    for key, value in update_data.items():
        setattr(exhibition, key, value)
    if event_ids is not None:
        await _attach_events(db, exhibition, event_ids)
    db.commit()
    return await retrieve_exhibition_or_404(db, exhibition.id)


async def delete_exhibition(db: Session, exhibition_id: int):
    exhibition = await retrieve_exhibition_or_404(db, exhibition_id)
    exhibition.events = []
    db.delete(exhibition)
    db.commit()
    return True
