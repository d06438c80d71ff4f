from datetime import datetime

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from ticketing.controller.payment_controller import (create_order_controller,
                                                     refund_controller,
                                                     retrieve_my_payments,
                                                     retrieve_payments,
                                                     verify_payment_controller)
from ticketing.database import get_db
from ticketing.middleware.auth import get_current_user, require_admin
from ticketing.models.user_model import User
from ticketing.response_model import ResponseModel, dump
from ticketing.schema.payment_schema import CreateOrderIn, PaymentOut, RefundIn, VerifyPaymentIn
from ticketing.schema.ticket_schema import TicketOut

router = APIRouter()


# ----------------------- CHECKOUT -----------------------
@router.post("/create-order", response_description="Open a payment order", status_code=status.HTTP_201_CREATED)
async def create_order(payload: CreateOrderIn = Body(...), user: User = Depends(get_current_user),
                       db: Session = Depends(get_db)):
    order = await create_order_controller(db, user, payload.model_dump())
    return ResponseModel(order, "Order created successfully", 201)


@router.post("/verify", response_description="Confirm a gateway payment")
async def verify_payment(payload: VerifyPaymentIn = Body(...), user: User = Depends(get_current_user),
                         db: Session = Depends(get_db)):
    result = await verify_payment_controller(db, user, payload.model_dump())
    return ResponseModel(
        {"ticket": dump(TicketOut, result["ticket"]), "payment": dump(PaymentOut, result["payment"])},
        "Payment verified successfully",
    )


# ----------------------- LISTINGS -----------------------
@router.get("/me", response_description="Payments of the current user")
async def my_payments(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100),
                      user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    payments, pagination = await retrieve_my_payments(db, user, page, limit)
    return ResponseModel(dump(PaymentOut, payments), "Payments retrieved successfully", pagination=pagination)


@router.get("/", response_description="Retrieve all payments")
async def get_payments(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100), status: str = None,
                       user: int = None, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    payments, pagination = await retrieve_payments(db, page, limit, status, user)
    return ResponseModel(dump(PaymentOut, payments), "Payments retrieved successfully", pagination=pagination)


@router.get("/history", response_description="Payment history within a date range")
async def payment_history(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100), status: str = None,
                          start_date: datetime = None, end_date: datetime = None,
                          admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    payments, pagination = await retrieve_payments(db, page, limit, status, None, start_date, end_date)
    return ResponseModel(dump(PaymentOut, payments), "Payment history retrieved successfully",
                         pagination=pagination)


# ----------------------- REFUND -----------------------
@router.post("/refund", response_description="Refund a paid ticket")
async def refund(payload: RefundIn = Body(...), admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    result = await refund_controller(db, payload.ticket_id, payload.amount, payload.reason)
    return ResponseModel(
        {"ticket": dump(TicketOut, result["ticket"]), "payment": dump(PaymentOut, result["payment"])},
        "Refund processed successfully",
    )


__all__ = ["router"]
