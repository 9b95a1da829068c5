"""Cart -> order -> hosted invoice.

Order and items are written in one transaction. The invoice call and
the payment row that depends on it happen after that commit and are
never rolled back: a gateway failure marks the order ``invoice_failed``,
a payment-row failure is logged and tolerated because the invoice has
already been issued to the customer.
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from medistore.config import settings
from medistore.constants.order_status import OrderStatus, PaymentStatus
from medistore.exceptions import (
    DuplicateRequest,
    InvalidTotal,
    OrderCreationFailed,
    PaymentGatewayError,
    ProductUnavailable,
    ValidationError,
)
from medistore.models.order import Order
from medistore.models.order_item import OrderItem
from medistore.models.payment import Payment
from medistore.models.product import Product
from medistore.schemas.checkout_schemas import CreateInvoiceRequest, CreateInvoiceResponse
from medistore.services.order_event_service import (
    INVOICE_CREATED,
    INVOICE_FAILED,
    ORDER_CREATED,
    PAYMENT_RECORD_FAILED,
    log_order_event,
)
from medistore.utils.dates import to_naive_utc
from medistore.utils.token import CurrentUser

logger = logging.getLogger(__name__)

SHIPPING_FIELDS = ("shipping_address", "shipping_name", "shipping_phone")


def validate_request(data: CreateInvoiceRequest):
    if not data.items:
        raise ValidationError("items", "No items in order")

    for field in SHIPPING_FIELDS:
        value = getattr(data, field)
        if value is None or not value.strip():
            raise ValidationError(field, f"{field} is required")

    for line in data.items:
        if line.quantity <= 0:
            raise ValidationError("quantity", f"Quantity for {line.product_id} must be positive")


def load_active_products(session: Session, product_ids: List[str]) -> dict:
    requested = set(product_ids)
    products = session.exec(
        select(Product)
        .where(Product.id.in_(requested))
        .where(Product.is_active == True)  # noqa: E712
    ).all()

    if len(products) != len(requested):
        missing = requested - {p.id for p in products}
        logger.warning(f"Product validation failed, unavailable: {sorted(missing)}")
        raise ProductUnavailable(missing)

    return {p.id: p for p in products}


def price_lines(data: CreateInvoiceRequest, products: dict) -> Tuple[List[dict], int]:
    lines = []
    for line in data.items:
        product = products[line.product_id]
        lines.append({
            "product_id": product.id,
            "product_title": product.title_id,
            "quantity": line.quantity,
            "unit_price": product.price,
            "subtotal": product.price * line.quantity,
        })

    total = sum(line["subtotal"] for line in lines)
    if total <= 0:
        raise InvalidTotal(total)

    return lines, total


def _find_replay(session: Session, user_id: str, idempotency_key: str) -> Optional[CreateInvoiceResponse]:
    order = session.exec(
        select(Order)
        .where(Order.user_id == user_id)
        .where(Order.idempotency_key == idempotency_key)
    ).first()
    if not order:
        return None

    payment = session.exec(
        select(Payment).where(Payment.order_id == order.id)
    ).first()
    if not payment or not payment.xendit_invoice_url:
        raise DuplicateRequest(order.id)

    logger.info(f"Idempotent replay for order {order.id} (key {idempotency_key})")
    return CreateInvoiceResponse(
        order_id=order.id,
        payment_id=payment.id,
        invoice_url=payment.xendit_invoice_url,
        invoice_id=payment.xendit_invoice_id,
        amount=order.total_amount,
        expires_at=payment.expires_at,
    )


def _persist_order(
    session: Session,
    user: CurrentUser,
    data: CreateInvoiceRequest,
    lines: List[dict],
    total: int,
    idempotency_key: Optional[str],
) -> Optional[Order]:
    order = Order(
        user_id=user.id,
        total_amount=total,
        shipping_address=data.shipping_address.strip(),
        shipping_name=data.shipping_name.strip(),
        shipping_phone=data.shipping_phone.strip(),
        notes=data.notes or None,
        status=OrderStatus.pending.value,
        idempotency_key=idempotency_key,
    )

    try:
        session.add(order)
        session.flush()  # assign id

        for line in lines:
            session.add(OrderItem(
                order_id=order.id,
                product_id=line["product_id"],
                product_title=line["product_title"],
                quantity=line["quantity"],
                unit_price=line["unit_price"],
            ))

        log_order_event(
            session,
            order.id,
            ORDER_CREATED,
            "Order placed",
            created_by=user.id,
            meta={"total_amount": total, "items": len(lines)},
        )
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if idempotency_key:
            # a concurrent request with the same key committed first
            logger.info(f"Idempotency key {idempotency_key} taken concurrently for user {user.id}")
            return None
        logger.exception(f"Order creation failed for user {user.id}")
        raise OrderCreationFailed("Failed to create order") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception(f"Order creation failed for user {user.id}")
        raise OrderCreationFailed("Failed to create order") from e

    session.refresh(order)
    logger.info(f"Created order {order.id} for user {user.id}, total {total}")
    return order


def _mark_invoice_failed(session: Session, order: Order, reason: str):
    order.status = OrderStatus.invoice_failed.value
    order.updated_at = datetime.utcnow()
    session.add(order)
    log_order_event(session, order.id, INVOICE_FAILED, "Invoice creation failed", meta={"reason": reason})
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception(f"Could not mark order {order.id} as invoice_failed")


def _record_payment(session: Session, user: CurrentUser, order: Order, invoice) -> Optional[Payment]:
    payment = Payment(
        user_id=user.id,
        order_id=order.id,
        amount=order.total_amount,
        status=PaymentStatus.pending.value,
        xendit_invoice_id=invoice.id,
        xendit_invoice_url=invoice.invoice_url,
        xendit_external_id=order.external_id,
        expires_at=to_naive_utc(invoice.expiry_date),
    )
    try:
        session.add(payment)
        log_order_event(
            session,
            order.id,
            INVOICE_CREATED,
            "Invoice issued",
            meta={"invoice_id": invoice.id},
        )
        session.commit()
    except SQLAlchemyError:
        # invoice already issued; keep the order and hand out the URL anyway
        session.rollback()
        logger.exception(f"Payment record error for order {order.id}, invoice {invoice.id}")
        try:
            log_order_event(
                session,
                order.id,
                PAYMENT_RECORD_FAILED,
                "Payment record could not be saved",
                meta={"invoice_id": invoice.id},
            )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
        return None

    session.refresh(payment)
    return payment


def create_product_invoice(
    *,
    session: Session,
    gateway,
    user: CurrentUser,
    data: CreateInvoiceRequest,
    idempotency_key: Optional[str] = None,
) -> CreateInvoiceResponse:
    """
    Validate the cart, persist the order and its items, request a hosted
    invoice and store the pending payment.

    Without an idempotency key every call creates a new order.
    """
    validate_request(data)

    if idempotency_key:
        replay = _find_replay(session, user.id, idempotency_key)
        if replay is not None:
            return replay

    products = load_active_products(session, [line.product_id for line in data.items])
    lines, total = price_lines(data, products)

    order = _persist_order(session, user, data, lines, total, idempotency_key)
    if order is None:
        replay = _find_replay(session, user.id, idempotency_key)
        if replay is None:
            raise OrderCreationFailed("Failed to create order")
        return replay

    try:
        invoice = gateway.create_invoice(
            external_id=order.external_id,
            amount=total,
            description=f"Order #{order.id[:8]}",
            customer={
                "email": user.email,
                "given_names": order.shipping_name,
                "mobile_number": order.shipping_phone,
            },
            items=[
                {"name": line["product_title"], "quantity": line["quantity"], "price": line["unit_price"]}
                for line in lines
            ],
            success_redirect_url=f"{settings.app_url}/payment/success?order_id={order.id}",
            failure_redirect_url=f"{settings.app_url}/payment/failed?order_id={order.id}",
        )
    except PaymentGatewayError as e:
        logger.error(f"Invoice creation failed for order {order.id}: {e.message}")
        _mark_invoice_failed(session, order, e.message)
        raise

    payment = _record_payment(session, user, order, invoice)

    return CreateInvoiceResponse(
        order_id=order.id,
        payment_id=payment.id if payment else None,
        invoice_url=invoice.invoice_url,
        invoice_id=invoice.id,
        amount=total,
        expires_at=invoice.expiry_date,
    )
