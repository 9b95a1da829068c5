import logging
from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from medistore.constants.order_status import ALLOWED_TRANSITIONS
from medistore.exceptions import InvalidStatusTransition
from medistore.models.order import Order
from medistore.models.payment import Payment
from medistore.schemas.orders_schemas import (
    AdminOrderDetail,
    OrderEventRead,
    OrderItemRead,
    OrderRead,
    PaymentRead,
)
from medistore.services.order_event_service import STATUS_CHANGED, log_order_event, order_timeline

logger = logging.getLogger(__name__)


def latest_payment(session: Session, order_id: str) -> Optional[Payment]:
    return session.exec(
        select(Payment)
        .where(Payment.order_id == order_id)
        .order_by(Payment.created_at.desc())
    ).first()


def to_order_read(session: Session, order: Order) -> OrderRead:
    payment = latest_payment(session, order.id)
    return OrderRead(
        **order.model_dump(exclude={"idempotency_key"}),
        items=[OrderItemRead.model_validate(i) for i in order.items],
        payment=PaymentRead.model_validate(payment) if payment else None,
    )


def to_admin_detail(session: Session, order: Order) -> AdminOrderDetail:
    base = to_order_read(session, order)
    return AdminOrderDetail(
        **base.model_dump(),
        timeline=[OrderEventRead.model_validate(e) for e in order_timeline(session, order.id)],
    )


def change_order_status(session: Session, order: Order, new_status: str, changed_by: str) -> Order:
    current = order.status
    if new_status not in ALLOWED_TRANSITIONS.get(current, []):
        raise InvalidStatusTransition(current, new_status)

    order.status = new_status
    order.updated_at = datetime.utcnow()
    session.add(order)
    log_order_event(
        session,
        order.id,
        STATUS_CHANGED,
        f"Status changed from {current} to {new_status}",
        created_by=changed_by,
        meta={"from": current, "to": new_status},
    )
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.id} moved {current} -> {new_status} by {changed_by}")
    return order
