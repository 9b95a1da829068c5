"""Domain errors raised by the services layer.

Routers translate these into HTTP responses; services never build
HTTP responses themselves.
"""


class MedistoreError(Exception):
    """Base class for every domain error."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(MedistoreError):
    """Client-fixable input problem. ``field`` names the offending input."""

    def __init__(self, field: str, message: str = None):
        super().__init__(message or f"{field} is required")
        self.field = field


class ProductUnavailable(MedistoreError):
    def __init__(self, missing_ids=None):
        super().__init__("One or more products not found or inactive")
        self.missing_ids = sorted(missing_ids or [])


class InvalidTotal(MedistoreError):
    def __init__(self, total: int):
        super().__init__("Invalid total amount")
        self.total = total


class OrderCreationFailed(MedistoreError):
    pass


class PaymentGatewayError(MedistoreError):
    pass


class DuplicateRequest(MedistoreError):
    def __init__(self, order_id: str):
        super().__init__("A request with this idempotency key is already being processed")
        self.order_id = order_id


class InvalidStatusTransition(MedistoreError):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change order status from {current} to {requested}")
        self.current = current
        self.requested = requested


class StorageError(MedistoreError):
    pass
