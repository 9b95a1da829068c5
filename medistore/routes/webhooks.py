import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from medistore.config import settings
from medistore.database import get_session
from medistore.schemas.webhook_schemas import WebhookAck, XenditWebhookPayload
from medistore.services.webhook_service import handle_invoice_callback
from medistore.services.xendit_client import CALLBACK_TOKEN_HEADER, verify_webhook_token

logger = logging.getLogger(__name__)

router = APIRouter()


def process_callback(session: Session, body: bytes) -> WebhookAck:
    # Always 200 from here on, otherwise Xendit keeps retrying.
    try:
        payload = XenditWebhookPayload.model_validate_json(body)
        return handle_invoice_callback(session, payload)
    except Exception as e:
        session.rollback()
        logger.exception("Webhook processing error")
        return WebhookAck(success=False, message=str(e) or e.__class__.__name__)


@router.post("/xendit", response_model=WebhookAck)
async def xendit_webhook(
    request: Request,
    session: Session = Depends(get_session),
):
    # token first, before the body is even read
    token = request.headers.get(CALLBACK_TOKEN_HEADER)
    if not verify_webhook_token(token, settings.xendit_webhook_token):
        logger.error("Invalid webhook token")
        raise HTTPException(401, {"error": "Invalid webhook token"})

    body = await request.body()
    # database work stays off the event loop
    return await run_in_threadpool(process_callback, session, body)
