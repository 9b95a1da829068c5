"""Xendit invoice API adapter.

Only two things are needed from the provider: creating a hosted invoice
and checking the callback token on webhook deliveries.
"""
import hmac
import logging
from datetime import datetime
from typing import Dict, List, Optional

import requests
from pydantic import BaseModel, ValidationError

from medistore.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

CALLBACK_TOKEN_HEADER = "x-callback-token"


class Invoice(BaseModel):
    id: str
    invoice_url: str
    expiry_date: Optional[datetime] = None
    status: Optional[str] = None


class XenditClient:
    def __init__(
        self,
        secret_key: str,
        api_base: str = "https://api.xendit.co",
        timeout: float = 15.0,
        currency: str = "IDR",
        invoice_duration: int = 86400,
        http: Optional[requests.Session] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.currency = currency
        self.invoice_duration = invoice_duration
        self.http = http or requests.Session()
        # secret key as basic-auth username, empty password
        self.http.auth = (secret_key, "")

    def create_invoice(
        self,
        *,
        external_id: str,
        amount: int,
        description: str,
        customer: Dict[str, Optional[str]],
        items: List[Dict],
        success_redirect_url: str,
        failure_redirect_url: str,
    ) -> Invoice:
        body = {
            "external_id": external_id,
            "amount": amount,
            "description": description,
            "currency": self.currency,
            "invoice_duration": self.invoice_duration,
            "customer": {k: v for k, v in customer.items() if v},
            "items": items,
            "success_redirect_url": success_redirect_url,
            "failure_redirect_url": failure_redirect_url,
        }

        try:
            resp = self.http.post(
                f"{self.api_base}/v2/invoices",
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Xendit request failed for {external_id}: {e}")
            raise PaymentGatewayError("Payment gateway unavailable") from e

        if resp.status_code >= 400:
            logger.error(
                f"Xendit rejected invoice {external_id}: "
                f"{resp.status_code} {resp.text[:500]}"
            )
            raise PaymentGatewayError(f"Payment gateway error ({resp.status_code})")

        try:
            invoice = Invoice.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unexpected Xendit invoice response for {external_id}: {e}")
            raise PaymentGatewayError("Malformed payment gateway response") from e

        logger.info(f"Xendit invoice {invoice.id} created for {external_id}")
        return invoice

    def close(self):
        self.http.close()


def verify_webhook_token(token: Optional[str], expected_token: str) -> bool:
    if not expected_token:
        logger.warning("XENDIT_WEBHOOK_TOKEN not set, rejecting callback")
        return False
    if not token:
        return False
    return hmac.compare_digest(token.encode("utf-8"), expected_token.encode("utf-8"))
