from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    shipped = "shipped"
    completed = "completed"
    cancelled = "cancelled"
    invoice_failed = "invoice_failed"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    expired = "expired"
    failed = "failed"


# Admin-driven transitions. Webhook reconciliation writes directly.
ALLOWED_TRANSITIONS = {
    "pending": ["paid", "cancelled"],
    "paid": ["shipped", "cancelled"],
    "shipped": ["completed"],
    "completed": [],
    "cancelled": [],
    "invoice_failed": [],
}

# statuses counted as revenue on the dashboard
REVENUE_STATUSES = ["paid", "shipped", "completed"]
