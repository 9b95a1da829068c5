from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ProductCreate(BaseModel):
    title_id: str = Field(..., min_length=1, max_length=200)
    title_en: Optional[str] = None
    description_id: str = Field(..., min_length=1)
    description_en: Optional[str] = None

    category: str = Field(..., min_length=1, max_length=100)
    image_url: Optional[str] = None

    price: int = Field(..., ge=0)

    features_id: List[str] = []
    features_en: List[str] = []

    is_active: bool = True


class ProductUpdate(BaseModel):
    title_id: Optional[str] = Field(None, min_length=1, max_length=200)
    title_en: Optional[str] = None
    description_id: Optional[str] = Field(None, min_length=1)
    description_en: Optional[str] = None

    category: Optional[str] = Field(None, min_length=1, max_length=100)
    image_url: Optional[str] = None

    price: Optional[int] = Field(None, ge=0)

    features_id: Optional[List[str]] = None
    features_en: Optional[List[str]] = None

    is_active: Optional[bool] = None


class ProductResponse(BaseModel):
    id: str
    title_id: str
    title_en: str
    description_id: str
    description_en: str
    category: str
    image_url: Optional[str]
    price: int
    features_id: List[str]
    features_en: List[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
