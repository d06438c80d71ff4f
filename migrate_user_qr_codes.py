#!/usr/bin/env python3
"""
Assign a USER-<hex> QR code to every user that does not have one yet.
"""
import os
import sys

app_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "app")
sys.path.insert(0, app_dir)

from sqlalchemy import or_

from ticketing.database import SessionLocal
from ticketing.logger import get_logger
# Every mapper must be registered before User relationships resolve
from ticketing.models.entrypass_model import EntryPass
from ticketing.models.event_model import Category, Event, Show
from ticketing.models.exhibition_model import Exhibition
from ticketing.models.payment_model import Payment
from ticketing.models.rating_model import Rating
from ticketing.models.ticket_model import Ticket, TicketEvent
from ticketing.models.user_model import User
from ticketing.security import generate_user_qr_code

logger = get_logger("ticketing.scripts.migrate_user_qr_codes")


def migrate_user_qr_codes(db) -> dict:
    users = db.query(User).filter(or_(User.qr_code.is_(None), User.qr_code == "")).all()
    for user in users:
        user.qr_code = generate_user_qr_code()
        logger.info("Assigned %s to %s", user.qr_code, user.email)
    db.commit()
    return {"total_users": db.query(User).count(), "updated": len(users)}


if __name__ == "__main__":
    session = SessionLocal()
    try:
        summary = migrate_user_qr_codes(session)
    finally:
        session.close()
    print(f"Migration finished: {summary['updated']} of {summary['total_users']} users updated")
