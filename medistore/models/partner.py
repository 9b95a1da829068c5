from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import uuid4


class Partner(SQLModel, table=True):
    __tablename__ = "partners"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str

    description_id: Optional[str] = None
    description_en: Optional[str] = None

    logo_url: Optional[str] = None
    website_url: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None

    status: str = Field(default="pending")
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class PartnerSubmission(SQLModel, table=True):
    __tablename__ = "partner_submissions"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    company_name: str
    contact_person: str
    email: str
    phone: str
    message: str

    status: str = Field(default="new")  # new | contacted | approved | rejected

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
