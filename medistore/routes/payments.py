import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlmodel import Session

from medistore.database import get_session
from medistore.dependencies.clients import get_payment_gateway
from medistore.exceptions import (
    DuplicateRequest,
    InvalidTotal,
    OrderCreationFailed,
    PaymentGatewayError,
    ProductUnavailable,
    ValidationError,
)
from medistore.schemas.checkout_schemas import CreateInvoiceRequest, CreateInvoiceResponse
from medistore.services.checkout_service import create_product_invoice
from medistore.utils.token import CurrentUser, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-product-invoice", response_model=CreateInvoiceResponse)
def create_invoice(
    data: CreateInvoiceRequest,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    session: Session = Depends(get_session),
    gateway=Depends(get_payment_gateway),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return create_product_invoice(
            session=session,
            gateway=gateway,
            user=current_user,
            data=data,
            idempotency_key=idempotency_key,
        )
    except ValidationError as e:
        raise HTTPException(400, {"error": e.message, "field": e.field})
    except ProductUnavailable as e:
        raise HTTPException(400, {"error": e.message, "product_ids": e.missing_ids})
    except InvalidTotal as e:
        raise HTTPException(400, {"error": e.message})
    except DuplicateRequest as e:
        raise HTTPException(409, {"error": e.message, "order_id": e.order_id})
    except (OrderCreationFailed, PaymentGatewayError) as e:
        raise HTTPException(500, {"error": e.message})
