"""Invoice status callbacks from Xendit.

The payment row is found by its stored external id and updated together
with its order in a single commit. When no payment row exists (the
invoice was issued but the row could not be saved) the order id is taken
from the ``ORDER-`` prefix instead. Anything else matches nothing and is
only logged.
"""
import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlmodel import Session, select

from medistore.constants.order_status import OrderStatus, PaymentStatus
from medistore.models.order import Order
from medistore.models.payment import Payment
from medistore.schemas.webhook_schemas import InvoiceStatus, WebhookAck, XenditWebhookPayload
from medistore.services.notification import notify_fulfillment
from medistore.services.order_event_service import (
    PAYMENT_EXPIRED,
    PAYMENT_FAILED,
    PAYMENT_PAID,
    log_order_event,
)
from medistore.utils.dates import to_naive_utc

logger = logging.getLogger(__name__)

EXTERNAL_ID_PREFIX = "ORDER-"

HANDLED_STATUSES = {
    InvoiceStatus.PAID,
    InvoiceStatus.SETTLED,
    InvoiceStatus.EXPIRED,
    InvoiceStatus.FAILED,
}


def parse_status(raw: str) -> Optional[InvoiceStatus]:
    try:
        return InvoiceStatus(raw)
    except ValueError:
        return None


def resolve_invoice_target(session: Session, external_id: str) -> Tuple[Optional[Payment], Optional[Order]]:
    payment = session.exec(
        select(Payment).where(Payment.xendit_external_id == external_id)
    ).first()

    if payment:
        return payment, session.get(Order, payment.order_id)

    if external_id.startswith(EXTERNAL_ID_PREFIX):
        order_id = external_id[len(EXTERNAL_ID_PREFIX):]
        return None, session.get(Order, order_id)

    return None, None


def _apply_paid(payment, order, payload: XenditWebhookPayload, now: datetime):
    if payment:
        payment.status = PaymentStatus.paid.value
        payment.paid_at = to_naive_utc(payload.paid_at) or now
        payment.payment_method = payload.payment_method or payment.payment_method
        payment.payment_channel = payload.payment_channel or payment.payment_channel
    if order:
        order.status = OrderStatus.paid.value


def _apply_expired(payment, order):
    if payment:
        payment.status = PaymentStatus.expired.value
    if order:
        order.status = OrderStatus.cancelled.value


def _apply_failed(payment, order):
    # order stays as it is; the customer may still pay another way
    if payment:
        payment.status = PaymentStatus.failed.value


def handle_invoice_callback(
    session: Session,
    payload: XenditWebhookPayload,
    notifier=notify_fulfillment,
) -> WebhookAck:
    status = parse_status(payload.status)

    if status is None:
        logger.warning(f"Unrecognized invoice status {payload.status!r} for {payload.external_id}")
        return WebhookAck(success=False, message=f"Unrecognized invoice status: {payload.status}")

    if status not in HANDLED_STATUSES:
        logger.info(f"Unhandled invoice status: {status.value} for {payload.external_id}")
        return WebhookAck(success=True, message=f"Webhook ignored: {status.value}")

    payment, order = resolve_invoice_target(session, payload.external_id)

    if payment is None and order is None:
        logger.warning(f"Webhook {status.value} for {payload.external_id} matched no payment or order")
        return WebhookAck(success=True, message=f"Webhook processed: {status.value} (no matching order)")

    if payment is None:
        logger.warning(f"No payment row for {payload.external_id}, updating order {order.id} only")

    now = datetime.utcnow()
    meta = {
        "invoice_id": payload.id,
        "external_id": payload.external_id,
        "amount": payload.amount,
        "paid_amount": payload.paid_amount,
        "payment_method": payload.payment_method,
        "payment_channel": payload.payment_channel,
    }

    if status in (InvoiceStatus.PAID, InvoiceStatus.SETTLED):
        _apply_paid(payment, order, payload, now)
        event_type, label = PAYMENT_PAID, "Payment received"
    elif status == InvoiceStatus.EXPIRED:
        _apply_expired(payment, order)
        event_type, label = PAYMENT_EXPIRED, "Invoice expired, order cancelled"
    else:
        _apply_failed(payment, order)
        event_type, label = PAYMENT_FAILED, "Payment failed"

    if payment:
        payment.updated_at = now
        session.add(payment)
    if order:
        order.updated_at = now
        session.add(order)
        log_order_event(session, order.id, event_type, label, created_by="xendit", meta=meta)

    # payment and order change together or not at all
    session.commit()

    logger.info(
        f"Webhook {status.value} applied to {payload.external_id}: "
        f"payment={payment.status if payment else None} order={order.status if order else None}"
    )

    if order and status in (InvoiceStatus.PAID, InvoiceStatus.SETTLED):
        try:
            notifier(order)
        except Exception:
            logger.exception(f"Fulfillment notification failed for order {order.id}")

    return WebhookAck(success=True, message=f"Webhook processed: {status.value}")
