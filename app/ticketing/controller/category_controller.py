from sqlalchemy.orm import Session

from ticketing.errors import APIError
from ticketing.models.event_model import Category


async def _ensure_unique_title(db: Session, title: str, exclude_id: int = None):
    query = db.query(Category).filter(Category.title == title)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first():
        raise APIError(f"Category '{title}' already exists", 400)


async def retrieve_categories(db: Session):
    return db.query(Category).order_by(Category.title).all()


async def retrieve_category_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise APIError(f"Category not found with id of {category_id}", 404)
    return category


async def add_category(db: Session, category_data: dict) -> Category:
    await _ensure_unique_title(db, category_data["title"])
    category = Category(**category_data)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


async def update_category(db: Session, category_id: int, update_data: dict) -> Category:
    category = await retrieve_category_or_404(db, category_id)
    if "title" in update_data:
        await _ensure_unique_title(db, update_data["title"], exclude_id=category.id)
    for key, value in update_data.items():
        setattr(category, key, value)
    db.commit()
    db.refresh(category)
    return category


async def delete_category(db: Session, category_id: int):
    category = await retrieve_category_or_404(db, category_id)
    db.delete(category)
    db.commit()
    return True
