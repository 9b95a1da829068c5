import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from medistore.database import get_session
from medistore.models.article import Article
from medistore.models.doctor import Doctor
from medistore.models.partner import Partner, PartnerSubmission
from medistore.models.webinar import Webinar
from medistore.schemas.content_schemas import PartnerSubmissionCreate

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------- ARTICLES ----------
@router.get("/articles")
def list_articles(
    category: str | None = None,
    session: Session = Depends(get_session)
):
    query = select(Article).where(Article.is_published == True)  # noqa: E712
    if category:
        query = query.where(Article.category == category)
    return session.exec(query.order_by(Article.created_at.desc())).all()


@router.get("/articles/{article_id}")
def get_article(article_id: str, session: Session = Depends(get_session)):
    article = session.get(Article, article_id)
    if not article or not article.is_published:
        raise HTTPException(404, "Article not found")
    return article


# ---------- PARTNERS ----------
@router.get("/partners")
def list_partners(session: Session = Depends(get_session)):
    return session.exec(
        select(Partner)
        .where(Partner.is_active == True)  # noqa: E712
        .order_by(Partner.name)
    ).all()


@router.post("/partners/submissions", status_code=201)
def submit_partnership(
    data: PartnerSubmissionCreate,
    session: Session = Depends(get_session)
):
    submission = PartnerSubmission(**data.model_dump())

    session.add(submission)
    session.commit()
    session.refresh(submission)

    logger.info(f"Partner submission {submission.id} from {submission.company_name}")
    return {"message": "Submission received", "submission_id": submission.id}


# ---------- WEBINARS ----------
@router.get("/webinars")
def list_webinars(session: Session = Depends(get_session)):
    return session.exec(
        select(Webinar)
        .where(Webinar.is_active == True)  # noqa: E712
        .order_by(Webinar.date)
    ).all()


# ---------- DOCTORS ----------
@router.get("/doctors")
def list_doctors(session: Session = Depends(get_session)):
    return session.exec(
        select(Doctor)
        .where(Doctor.is_active == True)  # noqa: E712
        .order_by(Doctor.name)
    ).all()
