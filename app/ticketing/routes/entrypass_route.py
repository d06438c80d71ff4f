from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from ticketing.controller.entrypass_controller import purchase_entry_pass_controller, retrieve_active_entry_pass
from ticketing.database import get_db
from ticketing.middleware.auth import get_current_user
from ticketing.models.user_model import User
from ticketing.response_model import ResponseModel, dump
from ticketing.schema.entrypass_schema import EntryPassOut, EntryPassPurchaseIn

router = APIRouter()


@router.post("/purchase", response_description="Purchase or top up an entry pass", status_code=status.HTTP_201_CREATED)
async def purchase(payload: EntryPassPurchaseIn = Body(...), user: User = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    entry_pass = await purchase_entry_pass_controller(db, user, payload.model_dump())
    return ResponseModel(dump(EntryPassOut, entry_pass), "Entry pass purchased successfully", 201)


@router.get("/me", response_description="Current entry pass of the user")
async def my_entry_pass(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    entry_pass = await retrieve_active_entry_pass(db, user.id)
    return ResponseModel(dump(EntryPassOut, entry_pass), "Entry pass retrieved successfully")


__all__ = ["router"]
