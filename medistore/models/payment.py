from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import uuid4


class Payment(SQLModel, table=True):
    __tablename__ = "payments"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    user_id: str = Field(index=True)
    order_id: str = Field(foreign_key="orders.id", index=True)

    amount: int
    status: str = Field(default="pending")  # pending | paid | expired | failed

    xendit_invoice_id: Optional[str] = Field(default=None, index=True)
    xendit_invoice_url: Optional[str] = None
    xendit_external_id: str = Field(unique=True, index=True)

    payment_method: Optional[str] = None
    payment_channel: Optional[str] = None
    paid_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
