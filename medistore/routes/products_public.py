from fastapi import APIRouter, Depends, HTTPException
from typing import List
from sqlmodel import Session, select

from medistore.database import get_session
from medistore.models.product import Product
from medistore.schemas.product_schemas import ProductResponse

router = APIRouter()


@router.get("", response_model=List[ProductResponse])
def list_products(
    category: str | None = None,
    session: Session = Depends(get_session)
):
    query = select(Product).where(Product.is_active == True)  # noqa: E712

    if category:
        query = query.where(Product.category == category)

    return session.exec(query.order_by(Product.created_at.desc())).all()


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, session: Session = Depends(get_session)):
    product = session.get(Product, product_id)
    if not product or not product.is_active:
        raise HTTPException(404, "Product not found")
    return product
