from datetime import datetime
from typing import List, Optional
from sqlmodel import Session, select
from medistore.models.order_event import OrderEvent

ORDER_CREATED = "order_created"
INVOICE_CREATED = "invoice_created"
INVOICE_FAILED = "invoice_failed"
PAYMENT_RECORD_FAILED = "payment_record_failed"
PAYMENT_PAID = "payment_paid"
PAYMENT_EXPIRED = "payment_expired"
PAYMENT_FAILED = "payment_failed"
STATUS_CHANGED = "status_changed"


def log_order_event(
    session: Session,
    order_id: str,
    event_type: str,
    label: str,
    created_by: str = "system",
    meta: Optional[dict] = None,
):
    """
    Append-only event log for the order timeline.
    The caller owns the commit.
    """
    event = OrderEvent(
        order_id=order_id,
        event_type=event_type,
        label=label,
        meta=meta,
        created_by=created_by,
        created_at=datetime.utcnow(),
    )
    session.add(event)
    return event


def order_timeline(session: Session, order_id: str) -> List[OrderEvent]:
    return session.exec(
        select(OrderEvent)
        .where(OrderEvent.order_id == order_id)
        .order_by(OrderEvent.created_at)
    ).all()
