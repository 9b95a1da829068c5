from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class InvoiceStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    SETTLED = "SETTLED"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"


class XenditWebhookPayload(BaseModel):
    id: Optional[str] = None
    external_id: str
    status: str
    amount: Optional[float] = None
    paid_amount: Optional[float] = None
    paid_at: Optional[datetime] = None
    payer_email: Optional[str] = None
    description: Optional[str] = None
    payment_method: Optional[str] = None
    payment_channel: Optional[str] = None


class WebhookAck(BaseModel):
    success: bool
    message: str
