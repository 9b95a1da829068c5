import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from medistore.database import get_session
from medistore.dependencies.admin import require_admin
from medistore.models.article import Article
from medistore.models.doctor import Doctor
from medistore.models.partner import Partner, PartnerSubmission
from medistore.models.webinar import Webinar
from medistore.schemas.content_schemas import (
    ArticleCreate,
    ArticleUpdate,
    DoctorCreate,
    DoctorUpdate,
    PartnerCreate,
    PartnerSubmissionStatusUpdate,
    PartnerUpdate,
    WebinarCreate,
    WebinarUpdate,
)
from medistore.utils.admin_utils import apply_update, build_record, get_or_404
from medistore.utils.pagination import paginate
from medistore.utils.token import CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter()

ARTICLE_BILINGUAL = ("title", "content", "excerpt")
PARTNER_BILINGUAL = ("description",)
DOCTOR_BILINGUAL = ("role", "specialty", "bio", "experience")


def _save(session: Session, obj):
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj


def _delete(session: Session, obj):
    session.delete(obj)
    session.commit()


# ---------- ARTICLES ----------
@router.post("/articles", status_code=201)
def create_article(
    data: ArticleCreate,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    article = _save(session, build_record(Article, data, ARTICLE_BILINGUAL))
    logger.info(f"Article {article.id} created by {admin.id}")
    return article


@router.get("/articles")
def list_articles_admin(
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    is_published: bool | None = None,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    query = select(Article)
    if search:
        like = f"%{search}%"
        query = query.where(Article.title_id.ilike(like) | Article.title_en.ilike(like))
    if is_published is not None:
        query = query.where(Article.is_published == is_published)
    return paginate(session=session, query=query.order_by(Article.created_at.desc()), page=page, limit=limit)


@router.get("/articles/{article_id}")
def get_article_admin(
    article_id: str,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    return get_or_404(session, Article, article_id, "Article")


@router.patch("/articles/{article_id}")
def update_article(
    article_id: str,
    data: ArticleUpdate,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    article = get_or_404(session, Article, article_id, "Article")
    return _save(session, apply_update(article, data, ARTICLE_BILINGUAL))


@router.delete("/articles/{article_id}")
def delete_article(
    article_id: str,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    _delete(session, get_or_404(session, Article, article_id, "Article"))
    logger.info(f"Article {article_id} deleted by {admin.id}")
    return {"message": "Article deleted"}


# ---------- PARTNERS ----------
@router.post("/partners", status_code=201)
def create_partner(
    data: PartnerCreate,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    partner = _save(session, build_record(Partner, data, PARTNER_BILINGUAL))
    logger.info(f"Partner {partner.id} created by {admin.id}")
    return partner


@router.get("/partners")
def list_partners_admin(
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    query = select(Partner)
    if search:
        query = query.where(Partner.name.ilike(f"%{search}%"))
    return paginate(session=session, query=query.order_by(Partner.name), page=page, limit=limit)


@router.get("/partners/submissions")
def list_partner_submissions(
    page: int = 1,
    limit: int = 10,
    status: str | None = None,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    query = select(PartnerSubmission)
    if status:
        query = query.where(PartnerSubmission.status == status)
    return paginate(
        session=session,
        query=query.order_by(PartnerSubmission.created_at.desc()),
        page=page,
        limit=limit,
    )


@router.patch("/partners/submissions/{submission_id}")
def update_partner_submission(
    submission_id: str,
    data: PartnerSubmissionStatusUpdate,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    submission = get_or_404(session, PartnerSubmission, submission_id, "Submission")
    return _save(session, apply_update(submission, data))


@router.get("/partners/{partner_id}")
def get_partner_admin(
    partner_id: str,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    return get_or_404(session, Partner, partner_id, "Partner")


@router.patch("/partners/{partner_id}")
def update_partner(
    partner_id: str,
    data: PartnerUpdate,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    partner = get_or_404(session, Partner, partner_id, "Partner")
    return _save(session, apply_update(partner, data, PARTNER_BILINGUAL))


@router.delete("/partners/{partner_id}")
def delete_partner(
    partner_id: str,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    _delete(session, get_or_404(session, Partner, partner_id, "Partner"))
    logger.info(f"Partner {partner_id} deleted by {admin.id}")
    return {"message": "Partner deleted"}


# ---------- WEBINARS ----------
@router.post("/webinars", status_code=201)
def create_webinar(
    data: WebinarCreate,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    webinar = _save(session, build_record(Webinar, data))
    logger.info(f"Webinar {webinar.id} created by {admin.id}")
    return webinar


@router.get("/webinars")
def list_webinars_admin(
    page: int = 1,
    limit: int = 10,
    is_active: bool | None = None,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    query = select(Webinar)
    if is_active is not None:
        query = query.where(Webinar.is_active == is_active)
    return paginate(session=session, query=query.order_by(Webinar.date.desc()), page=page, limit=limit)


@router.get("/webinars/{webinar_id}")
def get_webinar_admin(
    webinar_id: str,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    return get_or_404(session, Webinar, webinar_id, "Webinar")


@router.patch("/webinars/{webinar_id}")
def update_webinar(
    webinar_id: str,
    data: WebinarUpdate,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    webinar = get_or_404(session, Webinar, webinar_id, "Webinar")
    return _save(session, apply_update(webinar, data))


@router.delete("/webinars/{webinar_id}")
def delete_webinar(
    webinar_id: str,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    _delete(session, get_or_404(session, Webinar, webinar_id, "Webinar"))
    logger.info(f"Webinar {webinar_id} deleted by {admin.id}")
    return {"message": "Webinar deleted"}


# ---------- DOCTORS ----------
@router.post("/doctors", status_code=201)
def create_doctor(
    data: DoctorCreate,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    doctor = _save(session, build_record(Doctor, data, DOCTOR_BILINGUAL, ("credentials",)))
    logger.info(f"Doctor {doctor.id} created by {admin.id}")
    return doctor


@router.get("/doctors")
def list_doctors_admin(
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    query = select(Doctor)
    if search:
        query = query.where(Doctor.name.ilike(f"%{search}%"))
    return paginate(session=session, query=query.order_by(Doctor.name), page=page, limit=limit)


@router.get("/doctors/{doctor_id}")
def get_doctor_admin(
    doctor_id: str,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    return get_or_404(session, Doctor, doctor_id, "Doctor")


@router.patch("/doctors/{doctor_id}")
def update_doctor(
    doctor_id: str,
    data: DoctorUpdate,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    doctor = get_or_404(session, Doctor, doctor_id, "Doctor")
    return _save(session, apply_update(doctor, data, DOCTOR_BILINGUAL, ("credentials",)))


@router.delete("/doctors/{doctor_id}")
def delete_doctor(
    doctor_id: str,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    _delete(session, get_or_404(session, Doctor, doctor_id, "Doctor"))
    logger.info(f"Doctor {doctor_id} deleted by {admin.id}")
    return {"message": "Doctor deleted"}
