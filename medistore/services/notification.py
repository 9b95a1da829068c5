import logging

from medistore.models.order import Order

logger = logging.getLogger(__name__)


def notify_fulfillment(order: Order):
    """Hand a paid order to the fulfillment partner.

    No partner channel is wired yet, so the order is logged for manual
    processing.
    """
    logger.info(f"Order {order.id} paid - notify partner for fulfillment")
    logger.info(
        "Order ready for fulfillment: %s",
        {
            "order_id": order.id,
            "shipping_name": order.shipping_name,
            "shipping_phone": order.shipping_phone,
            "shipping_address": order.shipping_address,
            "items": [
                {"product_title": i.product_title, "quantity": i.quantity, "unit_price": i.unit_price}
                for i in order.items
            ],
            "total": order.total_amount,
        },
    )
