from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


# ---------- Articles ----------

class ArticleCreate(BaseModel):
    title_id: str = Field(..., min_length=1, max_length=300)
    title_en: Optional[str] = None
    content_id: str = Field(..., min_length=1)
    content_en: Optional[str] = None
    excerpt_id: Optional[str] = None
    excerpt_en: Optional[str] = None
    category: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    is_published: bool = False


class ArticleUpdate(BaseModel):
    title_id: Optional[str] = Field(None, min_length=1, max_length=300)
    title_en: Optional[str] = None
    content_id: Optional[str] = Field(None, min_length=1)
    content_en: Optional[str] = None
    excerpt_id: Optional[str] = None
    excerpt_en: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = None
    is_published: Optional[bool] = None


# ---------- Partners ----------

class PartnerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description_id: Optional[str] = None
    description_en: Optional[str] = None
    logo_url: Optional[str] = None
    website_url: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    status: str = "pending"
    is_active: bool = True


class PartnerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description_id: Optional[str] = None
    description_en: Optional[str] = None
    logo_url: Optional[str] = None
    website_url: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    status: Optional[str] = None
    is_active: Optional[bool] = None


class SubmissionStatus(str, Enum):
    new = "new"
    contacted = "contacted"
    approved = "approved"
    rejected = "rejected"


class PartnerSubmissionCreate(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    contact_person: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str = Field(..., min_length=5, max_length=30)
    message: str = Field(..., min_length=1)


class PartnerSubmissionStatusUpdate(BaseModel):
    status: SubmissionStatus


# ---------- Webinars ----------

class Speaker(BaseModel):
    name: str
    role: str = ""


class WebinarCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    date: datetime
    time: str = Field(..., min_length=1)
    platform: str = "Via Zoom"
    speakers: List[Speaker] = []
    moderator: Optional[str] = None
    price: str = "GRATIS"
    image_url: Optional[str] = None
    registration_url: Optional[str] = None
    is_active: bool = True


class WebinarUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    date: Optional[datetime] = None
    time: Optional[str] = None
    platform: Optional[str] = None
    speakers: Optional[List[Speaker]] = None
    moderator: Optional[str] = None
    price: Optional[str] = None
    image_url: Optional[str] = None
    registration_url: Optional[str] = None
    is_active: Optional[bool] = None


# ---------- Doctors ----------

class DoctorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    role_id: str = Field(..., min_length=1)
    role_en: Optional[str] = None
    specialty_id: str = Field(..., min_length=1)
    specialty_en: Optional[str] = None
    image_url: Optional[str] = None
    bio_id: Optional[str] = None
    bio_en: Optional[str] = None
    experience_id: Optional[str] = None
    experience_en: Optional[str] = None
    credentials: List[str] = []
    is_active: bool = True


class DoctorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    role_id: Optional[str] = Field(None, min_length=1)
    role_en: Optional[str] = None
    specialty_id: Optional[str] = Field(None, min_length=1)
    specialty_en: Optional[str] = None
    image_url: Optional[str] = None
    bio_id: Optional[str] = None
    bio_en: Optional[str] = None
    experience_id: Optional[str] = None
    experience_en: Optional[str] = None
    credentials: Optional[List[str]] = None
    is_active: Optional[bool] = None
