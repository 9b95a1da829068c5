import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from medistore.database import get_session
from medistore.dependencies.admin import require_admin
from medistore.models.product import Product
from medistore.schemas.product_schemas import ProductCreate, ProductResponse, ProductUpdate
from medistore.utils.admin_utils import apply_update, build_record, get_or_404
from medistore.utils.pagination import paginate
from medistore.utils.token import CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter()

BILINGUAL_FIELDS = ("title", "description", "features")
LIST_FIELDS = ("features_id", "features_en")


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(
    data: ProductCreate,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    product = build_record(Product, data, BILINGUAL_FIELDS, LIST_FIELDS)

    session.add(product)
    session.commit()
    session.refresh(product)

    logger.info(f"Product {product.id} created by {admin.id}")
    return product


@router.get("")
def list_products_admin(
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    category: str | None = None,
    is_active: bool | None = None,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    query = select(Product)

    if search:
        like = f"%{search}%"
        query = query.where(Product.title_id.ilike(like) | Product.title_en.ilike(like))

    if category:
        query = query.where(Product.category == category)

    if is_active is not None:
        query = query.where(Product.is_active == is_active)

    return paginate(
        session=session,
        query=query.order_by(Product.created_at.desc()),
        page=page,
        limit=limit,
    )


@router.get("/{product_id}", response_model=ProductResponse)
def get_product_admin(
    product_id: str,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    return get_or_404(session, Product, product_id, "Product")


@router.patch("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    data: ProductUpdate,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    product = get_or_404(session, Product, product_id, "Product")
    apply_update(product, data, BILINGUAL_FIELDS, LIST_FIELDS)

    session.add(product)
    session.commit()
    session.refresh(product)

    logger.info(f"Product {product.id} updated by {admin.id}")
    return product


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    product = get_or_404(session, Product, product_id, "Product")

    try:
        session.delete(product)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(409, "Product has orders, deactivate it instead")

    logger.info(f"Product {product_id} deleted by {admin.id}")
    return {"message": "Product deleted"}
