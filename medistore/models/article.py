from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import uuid4


class Article(SQLModel, table=True):
    __tablename__ = "articles"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    title_id: str
    title_en: str
    content_id: str
    content_en: str
    excerpt_id: Optional[str] = None
    excerpt_en: Optional[str] = None

    category: str = Field(index=True)
    image_url: Optional[str] = None
    is_published: bool = Field(default=False, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
