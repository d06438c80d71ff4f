from sqlalchemy.orm import Session

from ticketing.models.settings_model import Settings


# ------------------ Retrieve (or create) the settings row ------------------
async def get_settings(db: Session) -> Settings:
    settings = db.query(Settings).order_by(Settings.id).first()
    if not settings:
        settings = Settings()
        db.add(settings)
        db.commit()
        db.refresh(settings)
    return settings


# ------------------ Update ------------------
async def update_settings(db: Session, update_data: dict) -> Settings:
    settings = await get_settings(db)
    for key, value in update_data.items():
        setattr(settings, key, value)
    db.commit()
    db.refresh(settings)
    return settings
