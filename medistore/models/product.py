from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime
from uuid import uuid4


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    title_id: str
    title_en: str
    description_id: str
    description_en: str

    category: str = Field(index=True)
    image_url: Optional[str] = None

    # whole rupiah, no minor units
    price: int = Field(default=0, ge=0)

    features_id: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    features_en: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
