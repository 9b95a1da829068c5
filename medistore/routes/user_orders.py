from fastapi import APIRouter, Depends, HTTPException
from typing import List
from sqlmodel import Session, select

from medistore.database import get_session
from medistore.models.order import Order
from medistore.schemas.orders_schemas import OrderRead
from medistore.services.order_service import to_order_read
from medistore.utils.token import CurrentUser, get_current_user

router = APIRouter()


@router.get("", response_model=List[OrderRead])
def my_orders(
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user)
):
    orders = session.exec(
        select(Order)
        .where(Order.user_id == current_user.id)
        .order_by(Order.created_at.desc())
    ).all()

    return [to_order_read(session, o) for o in orders]


@router.get("/{order_id}", response_model=OrderRead)
def my_order(
    order_id: str,
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user)
):
    order = session.get(Order, order_id)

    if not order or order.user_id != current_user.id:
        raise HTTPException(404, "Order not found")

    return to_order_read(session, order)
