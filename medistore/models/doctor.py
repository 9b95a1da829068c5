from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime
from uuid import uuid4


class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str

    role_id: str
    role_en: str
    specialty_id: str
    specialty_en: str

    image_url: Optional[str] = None

    bio_id: Optional[str] = None
    bio_en: Optional[str] = None
    experience_id: Optional[str] = None
    experience_en: Optional[str] = None

    credentials: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
