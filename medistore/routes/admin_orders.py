# -------- ADMIN ORDERS --------
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlmodel import Session, select, or_

from medistore.constants.order_status import OrderStatus, REVENUE_STATUSES
from medistore.database import get_session
from medistore.dependencies.admin import require_admin
from medistore.exceptions import InvalidStatusTransition
from medistore.models.article import Article
from medistore.models.doctor import Doctor
from medistore.models.order import Order
from medistore.models.partner import Partner
from medistore.models.product import Product
from medistore.models.webinar import Webinar
from medistore.schemas.orders_schemas import AdminOrderDetail, OrderStatusUpdate
from medistore.services.order_service import change_order_status, to_admin_detail
from medistore.utils.pagination import paginate
from medistore.utils.token import CurrentUser

router = APIRouter()


@router.get("/orders")
def list_orders(
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    status: OrderStatus | None = None,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin)
):
    query = select(Order)

    if search:
        like = f"%{search}%"
        query = query.where(
            or_(
                Order.shipping_name.ilike(like),
                Order.shipping_phone.ilike(like),
                Order.id.ilike(like),
            )
        )

    if status:
        query = query.where(Order.status == status.value)

    query = query.order_by(Order.created_at.desc())

    data = paginate(session=session, query=query, page=page, limit=limit)

    data["results"] = [
        {
            "order_id": o.id,
            "user_id": o.user_id,
            "shipping_name": o.shipping_name,
            "shipping_phone": o.shipping_phone,
            "shipping_address": o.shipping_address,
            "total_amount": o.total_amount,
            "status": o.status,
            "created_at": o.created_at,
        }
        for o in data["results"]
    ]
    return data


@router.get("/orders/{order_id}", response_model=AdminOrderDetail)
def order_details(
    order_id: str,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    return to_admin_detail(session, order)


@router.patch("/orders/{order_id}/status", response_model=AdminOrderDetail)
def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    session: Session = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    try:
        change_order_status(session, order, data.status.value, changed_by=admin.id)
    except InvalidStatusTransition as e:
        raise HTTPException(409, e.message)

    return to_admin_detail(session, order)


@router.get("/dashboard")
def dashboard(
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    def count(model):
        return session.exec(select(func.count()).select_from(model)).one()

    by_status = dict(
        session.exec(
            select(Order.status, func.count()).group_by(Order.status)
        ).all()
    )

    revenue = session.exec(
        select(func.coalesce(func.sum(Order.total_amount), 0))
        .where(Order.status.in_(REVENUE_STATUSES))
    ).one()

    return {
        "products": count(Product),
        "articles": count(Article),
        "partners": count(Partner),
        "webinars": count(Webinar),
        "doctors": count(Doctor),
        "orders": {s.value: by_status.get(s.value, 0) for s in OrderStatus},
        "revenue": int(revenue),
    }
