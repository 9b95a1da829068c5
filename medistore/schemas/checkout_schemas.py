from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


# Shipping fields are optional here so missing values surface as a 400
# naming the field instead of a generic 422.
class CartLine(BaseModel):
    product_id: str
    quantity: int


class CreateInvoiceRequest(BaseModel):
    items: List[CartLine] = []
    shipping_address: Optional[str] = None
    shipping_name: Optional[str] = None
    shipping_phone: Optional[str] = None
    notes: Optional[str] = None


class CreateInvoiceResponse(BaseModel):
    success: bool = True
    order_id: str
    payment_id: Optional[str]
    invoice_url: str
    invoice_id: str
    amount: int
    expires_at: Optional[datetime]
