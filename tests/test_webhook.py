import logging
from datetime import datetime

from sqlmodel import Session, select

from medistore.models.order import Order
from medistore.models.order_event import OrderEvent
from medistore.models.payment import Payment
from medistore.schemas.webhook_schemas import XenditWebhookPayload
from medistore.services.webhook_service import handle_invoice_callback, parse_status
from tests.conftest import WEBHOOK_TOKEN, checkout_body

URL = "/api/webhooks/xendit"
HEADERS = {"x-callback-token": WEBHOOK_TOKEN}


def place_order(client, make_product, price=250000, qty=2):
    product = make_product(price=price)
    resp = client.post("/api/payments/create-product-invoice", json=checkout_body((product.id, qty)))
    assert resp.status_code == 200
    return resp.json()


def load(engine, order_id):
    with Session(engine) as s:
        order = s.get(Order, order_id)
        payment = s.exec(select(Payment).where(Payment.order_id == order_id)).first()
        return order, payment


def callback(order_id, status, **extra):
    body = {"id": "inv_1", "external_id": f"ORDER-{order_id}", "status": status, "amount": 500000}
    body.update(extra)
    return body


def test_paid_marks_payment_and_order(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    resp = client.post(
        URL,
        json=callback(
            order_id,
            "PAID",
            paid_at="2026-10-19T08:30:00.000Z",
            payment_method="BANK_TRANSFER",
            payment_channel="BCA",
        ),
        headers=HEADERS,
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Webhook processed: PAID"}
    order, payment = load(engine, order_id)
    assert order.status == "paid"
    assert payment.status == "paid"
    assert payment.paid_at == datetime(2026, 10, 19, 8, 30)
    assert payment.payment_method == "BANK_TRANSFER"
    assert payment.payment_channel == "BCA"


def test_paid_without_timestamp_uses_receipt_time(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]
    before = datetime.utcnow()

    client.post(URL, json=callback(order_id, "PAID"), headers=HEADERS)

    _, payment = load(engine, order_id)
    assert payment.paid_at is not None
    assert payment.paid_at >= before.replace(microsecond=0)


def test_settled_is_treated_as_paid(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    resp = client.post(URL, json=callback(order_id, "SETTLED"), headers=HEADERS)

    assert resp.json()["success"] is True
    order, payment = load(engine, order_id)
    assert order.status == "paid"
    assert payment.status == "paid"


def test_expired_cancels_order(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    client.post(URL, json=callback(order_id, "EXPIRED"), headers=HEADERS)

    order, payment = load(engine, order_id)
    assert payment.status == "expired"
    assert order.status == "cancelled"


def test_failed_only_touches_payment(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    client.post(URL, json=callback(order_id, "FAILED"), headers=HEADERS)

    order, payment = load(engine, order_id)
    assert payment.status == "failed"
    assert order.status == "pending"


def test_pending_is_acknowledged_and_ignored(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    resp = client.post(URL, json=callback(order_id, "PENDING"), headers=HEADERS)

    assert resp.json() == {"success": True, "message": "Webhook ignored: PENDING"}
    order, payment = load(engine, order_id)
    assert order.status == "pending"
    assert payment.status == "pending"


def test_unknown_status_changes_nothing(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    resp = client.post(URL, json=callback(order_id, "REFUNDED"), headers=HEADERS)

    assert resp.status_code == 200
    assert resp.json()["success"] is False
    order, payment = load(engine, order_id)
    assert order.status == "pending"
    assert payment.status == "pending"


def test_missing_token_is_rejected(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    resp = client.post(URL, json=callback(order_id, "PAID"))

    assert resp.status_code == 401
    assert load(engine, order_id)[0].status == "pending"


def test_wrong_token_rejected_before_body_is_parsed(client):
    resp = client.post(
        URL,
        content=b"{not json",
        headers={"x-callback-token": "nope", "content-type": "application/json"},
    )

    assert resp.status_code == 401
    assert resp.json()["detail"] == {"error": "Invalid webhook token"}


def test_unconfigured_token_rejects_everything(client, monkeypatch):
    from medistore.config import settings

    monkeypatch.setattr(settings, "xendit_webhook_token", "")

    resp = client.post(URL, json=callback("x", "PAID"), headers={"x-callback-token": ""})

    assert resp.status_code == 401


def test_external_id_without_prefix_matches_nothing(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    resp = client.post(
        URL,
        json={"external_id": "INV-something-else", "status": "PAID"},
        headers=HEADERS,
    )

    assert resp.status_code == 200
    assert resp.json()["message"] == "Webhook processed: PAID (no matching order)"
    assert load(engine, order_id)[0].status == "pending"


def test_unknown_order_id_is_acknowledged(client):
    resp = client.post(URL, json=callback("00000000-dead-beef", "PAID"), headers=HEADERS)

    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_malformed_payload_is_acknowledged_with_failure(client):
    resp = client.post(URL, json={"status": "PAID"}, headers=HEADERS)

    assert resp.status_code == 200
    assert resp.json()["success"] is False


def test_order_without_payment_row_falls_back_to_prefix(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]
    with Session(engine) as s:
        for payment in s.exec(select(Payment)).all():
            s.delete(payment)
        s.commit()

    resp = client.post(URL, json=callback(order_id, "PAID"), headers=HEADERS)

    assert resp.json()["success"] is True
    order, payment = load(engine, order_id)
    assert order.status == "paid"
    assert payment is None


def test_last_callback_wins(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    client.post(URL, json=callback(order_id, "PAID"), headers=HEADERS)
    client.post(URL, json=callback(order_id, "EXPIRED"), headers=HEADERS)

    order, payment = load(engine, order_id)
    assert payment.status == "expired"
    assert order.status == "cancelled"


def test_repeated_paid_callback_is_harmless(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    for _ in range(2):
        resp = client.post(URL, json=callback(order_id, "PAID"), headers=HEADERS)
        assert resp.json()["success"] is True

    order, payment = load(engine, order_id)
    assert order.status == "paid"
    assert payment.status == "paid"


def test_callback_is_recorded_on_timeline(client, engine, make_product):
    order_id = place_order(client, make_product)["order_id"]

    client.post(URL, json=callback(order_id, "PAID"), headers=HEADERS)

    with Session(engine) as s:
        events = s.exec(
            select(OrderEvent).where(OrderEvent.order_id == order_id).order_by(OrderEvent.created_at)
        ).all()
    assert [e.event_type for e in events][-1] == "payment_paid"
    assert events[-1].created_by == "xendit"
    assert events[-1].meta["external_id"] == f"ORDER-{order_id}"


def test_paid_notifies_fulfillment(client, make_product, caplog):
    order_id = place_order(client, make_product)["order_id"]

    with caplog.at_level(logging.INFO, logger="medistore.services.notification"):
        client.post(URL, json=callback(order_id, "PAID"), headers=HEADERS)

    assert f"Order {order_id} paid" in caplog.text


# ---------- service level ----------

def test_notifier_failure_does_not_undo_payment(session, engine, client, make_product):
    order_id = place_order(client, make_product)["order_id"]

    def broken_notifier(order):
        raise RuntimeError("mail server down")

    ack = handle_invoice_callback(
        session,
        XenditWebhookPayload(external_id=f"ORDER-{order_id}", status="PAID"),
        notifier=broken_notifier,
    )

    assert ack.success is True
    order, payment = load(engine, order_id)
    assert order.status == "paid"
    assert payment.status == "paid"


def test_notifier_only_runs_for_paid(session, client, make_product):
    order_id = place_order(client, make_product)["order_id"]
    notified = []

    handle_invoice_callback(
        session,
        XenditWebhookPayload(external_id=f"ORDER-{order_id}", status="EXPIRED"),
        notifier=notified.append,
    )

    assert notified == []


def test_parse_status():
    assert parse_status("PAID").value == "PAID"
    assert parse_status("paid") is None
    assert parse_status("") is None


def test_callback_is_processed_in_worker_thread(client, engine, make_product, monkeypatch):
    from medistore.routes import webhooks

    order_id = place_order(client, make_product)["order_id"]
    offloaded = []
    real = webhooks.run_in_threadpool

    async def recording(func, *args):
        offloaded.append(func.__name__)
        return await real(func, *args)

    monkeypatch.setattr(webhooks, "run_in_threadpool", recording)

    resp = client.post(URL, json=callback(order_id, "PAID"), headers=HEADERS)

    assert resp.json()["success"] is True
    assert offloaded == ["process_callback"]
    assert load(engine, order_id)[0].status == "paid"


def test_non_json_body_with_valid_token_is_acknowledged(client):
    resp = client.post(
        URL,
        content=b"{not json",
        headers={**HEADERS, "content-type": "application/json"},
    )

    assert resp.status_code == 200
    assert resp.json()["success"] is False
