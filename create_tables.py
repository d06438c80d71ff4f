#!/usr/bin/env python3
"""
Script to create database tables
Run this after the database is created to set up all tables
"""
import os
import sys

# Add the app directory to the path
app_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "app")
sys.path.insert(0, app_dir)

from ticketing.database import Base, engine
from ticketing.logger import get_logger
from ticketing.models.entrypass_model import EntryPass
from ticketing.models.event_model import Category, Event, Show
from ticketing.models.exhibition_model import Exhibition
from ticketing.models.payment_model import Payment
from ticketing.models.rating_model import Rating
from ticketing.models.settings_model import Settings
from ticketing.models.ticket_model import Ticket, TicketEvent
from ticketing.models.user_model import User

logger = get_logger("ticketing.scripts.create_tables")


def create_tables():
    """Create all database tables"""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created: %s", ", ".join(sorted(Base.metadata.tables)))
    return True


if __name__ == "__main__":
    create_tables()
