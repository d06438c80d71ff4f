from datetime import timedelta

from sqlalchemy.orm import Session

from ticketing.controller.helpers import utcnow
from ticketing.controller.settings_controller import get_settings
from ticketing.logger import get_logger
from ticketing.models.entrypass_model import EntryPass
from ticketing.models.user_model import User

logger = get_logger(__name__)


async def retrieve_active_entry_pass(db: Session, user_id: int):
    return (
        db.query(EntryPass)
        .filter(EntryPass.user_id == user_id, EntryPass.status == "active",
                EntryPass.expiry_date > utcnow())
        .order_by(EntryPass.expiry_date.desc())
        .first()
    )


# ------------------ Purchase or top up ------------------
async def purchase_entry_pass_controller(db: Session, user: User, purchase: dict) -> EntryPass:
    settings = await get_settings(db)
    now = utcnow()
    expiry_date = now + timedelta(days=settings.entry_pass_expiration_days)

    entry_pass = await retrieve_active_entry_pass(db, user.id)
    if entry_pass:
        entry_pass.head_count += purchase["head_count"]
        entry_pass.amount += purchase["amount"]
        entry_pass.payment_id = purchase["payment_id"]
        entry_pass.transaction_info = purchase.get("transaction_info") or {}
        if expiry_date > entry_pass.expiry_date:
            entry_pass.expiry_date = expiry_date
        logger.info("Entry pass %s topped up by %s heads", entry_pass.id, purchase["head_count"])
    else:
        entry_pass = EntryPass(
            user_id=user.id,
            head_count=purchase["head_count"],
            amount=purchase["amount"],
            payment_id=purchase["payment_id"],
            transaction_info=purchase.get("transaction_info") or {},
            purchase_date=now,
            expiry_date=expiry_date,
            status="active",
        )
        db.add(entry_pass)
    db.commit()
    db.refresh(entry_pass)
    return entry_pass
