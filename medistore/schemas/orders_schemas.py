from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from medistore.constants.order_status import OrderStatus


class OrderItemRead(BaseModel):
    id: str
    product_id: str
    product_title: str
    quantity: int
    unit_price: int

    class Config:
        from_attributes = True


class PaymentRead(BaseModel):
    id: str
    status: str
    amount: int
    xendit_invoice_id: Optional[str]
    xendit_invoice_url: Optional[str]
    xendit_external_id: str
    payment_method: Optional[str]
    payment_channel: Optional[str]
    paid_at: Optional[datetime]

    class Config:
        from_attributes = True


class OrderEventRead(BaseModel):
    event_type: str
    label: str
    meta: Optional[dict]
    created_by: str
    created_at: datetime

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    id: str
    user_id: str
    total_amount: int
    shipping_address: str
    shipping_name: str
    shipping_phone: str
    notes: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemRead] = []
    payment: Optional[PaymentRead] = None


class AdminOrderDetail(OrderRead):
    timeline: List[OrderEventRead] = []


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
