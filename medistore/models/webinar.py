from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime
from uuid import uuid4


class Webinar(SQLModel, table=True):
    __tablename__ = "webinars"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    title: str
    description: Optional[str] = None

    date: datetime = Field(index=True)
    time: str
    platform: str = Field(default="Via Zoom")

    # [{"name": ..., "role": ...}]
    speakers: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    moderator: Optional[str] = None

    price: str = Field(default="GRATIS")
    image_url: Optional[str] = None
    registration_url: Optional[str] = None
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
