import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from medistore.exceptions import OrderCreationFailed, ProductUnavailable, ValidationError
from medistore.models.order import Order
from medistore.models.order_event import OrderEvent
from medistore.models.order_item import OrderItem
from medistore.models.payment import Payment
from medistore.schemas.checkout_schemas import CreateInvoiceRequest
from medistore.services.checkout_service import create_product_invoice
from medistore.utils.token import CurrentUser
from tests.conftest import checkout_body

URL = "/api/payments/create-product-invoice"


def all_rows(engine, model):
    with Session(engine) as s:
        return s.exec(select(model)).all()


def test_checkout_creates_order_items_and_pending_payment(client, engine, gateway, make_product):
    p1 = make_product(price=250000)

    resp = client.post(URL, json=checkout_body((p1.id, 2)))

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["amount"] == 500000
    assert body["invoice_url"]
    assert body["invoice_id"] == "inv_1"
    assert body["expires_at"].startswith("2026-10-20T12:01")

    order = all_rows(engine, Order)[0]
    assert order.id == body["order_id"]
    assert order.total_amount == 500000
    assert order.status == "pending"
    assert order.user_id == "user-1"

    items = all_rows(engine, OrderItem)
    assert len(items) == 1
    assert items[0].quantity == 2
    assert items[0].unit_price == 250000
    assert items[0].product_title == "Masker Medis"

    payment = all_rows(engine, Payment)[0]
    assert payment.id == body["payment_id"]
    assert payment.status == "pending"
    assert payment.amount == 500000
    assert payment.xendit_invoice_url == body["invoice_url"]
    assert payment.xendit_external_id == f"ORDER-{order.id}"


def test_invoice_request_references_the_order(client, gateway, make_product):
    p1 = make_product(price=15000, title="Termometer")

    order_id = client.post(URL, json=checkout_body((p1.id, 3))).json()["order_id"]

    call = gateway.calls[0]
    assert call["external_id"] == f"ORDER-{order_id}"
    assert call["amount"] == 45000
    assert order_id[:8] in call["description"]
    assert call["items"] == [{"name": "Termometer", "quantity": 3, "price": 15000}]
    assert call["customer"] == {
        "email": "buyer@example.com",
        "given_names": "Budi Santoso",
        "mobile_number": "081234567890",
    }
    assert call["success_redirect_url"].endswith(f"/payment/success?order_id={order_id}")
    assert call["failure_redirect_url"].endswith(f"/payment/failed?order_id={order_id}")


def test_total_is_sum_of_snapshot_lines(client, engine, make_product):
    a = make_product(price=12500)
    b = make_product(price=99000, title="Tensimeter")
    c = make_product(price=0, title="Brosur")

    resp = client.post(URL, json=checkout_body((a.id, 4), (b.id, 1), (c.id, 7)))

    assert resp.status_code == 200
    order = all_rows(engine, Order)[0]
    items = all_rows(engine, OrderItem)
    assert order.total_amount == sum(i.unit_price * i.quantity for i in items) == 149000


def test_unit_price_is_a_snapshot(client, engine, session, make_product):
    p1 = make_product(price=100000)
    client.post(URL, json=checkout_body((p1.id, 1)))

    p1.price = 175000
    session.add(p1)
    session.commit()

    assert all_rows(engine, OrderItem)[0].unit_price == 100000


def test_empty_cart_is_rejected_before_lookup(client, engine, gateway):
    resp = client.post(URL, json=checkout_body())

    assert resp.status_code == 400
    assert resp.json()["detail"]["field"] == "items"
    assert all_rows(engine, Order) == []
    assert gateway.calls == []


@pytest.mark.parametrize("field", ["shipping_address", "shipping_name", "shipping_phone"])
def test_missing_shipping_field(client, engine, make_product, field):
    p1 = make_product()
    body = checkout_body((p1.id, 1))
    body[field] = "   "

    resp = client.post(URL, json=body)

    assert resp.status_code == 400
    assert resp.json()["detail"]["field"] == field
    assert all_rows(engine, Order) == []


def test_non_positive_quantity_rejected(client, engine, make_product):
    p1 = make_product()

    resp = client.post(URL, json=checkout_body((p1.id, 0)))

    assert resp.status_code == 400
    assert resp.json()["detail"]["field"] == "quantity"


def test_inactive_product_fails_whole_order(client, engine, gateway, make_product):
    ok = make_product()
    hidden = make_product(is_active=False, title="Discontinued")

    resp = client.post(URL, json=checkout_body((ok.id, 1), (hidden.id, 1)))

    assert resp.status_code == 400
    assert resp.json()["detail"]["product_ids"] == [hidden.id]
    assert all_rows(engine, Order) == []
    assert all_rows(engine, OrderItem) == []
    assert gateway.calls == []


def test_unknown_product_fails(client, engine, make_product):
    ok = make_product()

    resp = client.post(URL, json=checkout_body((ok.id, 1), ("does-not-exist", 2)))

    assert resp.status_code == 400
    assert all_rows(engine, Order) == []


def test_zero_total_rejected(client, engine, make_product):
    free = make_product(price=0)

    resp = client.post(URL, json=checkout_body((free.id, 3)))

    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "Invalid total amount"
    assert all_rows(engine, Order) == []


def test_repeated_submission_creates_two_orders(client, engine, gateway, make_product):
    # Known limitation: without an Idempotency-Key nothing is deduplicated.
    p1 = make_product()
    body = checkout_body((p1.id, 1))

    first = client.post(URL, json=body).json()
    second = client.post(URL, json=body).json()

    assert first["order_id"] != second["order_id"]
    assert first["invoice_id"] != second["invoice_id"]
    assert len(all_rows(engine, Order)) == 2
    assert len(all_rows(engine, Payment)) == 2
    assert len(gateway.calls) == 2


def test_idempotency_key_replays_original_invoice(client, engine, gateway, make_product):
    p1 = make_product()
    body = checkout_body((p1.id, 1))
    headers = {"Idempotency-Key": "cart-42"}

    first = client.post(URL, json=body, headers=headers).json()
    second = client.post(URL, json=body, headers=headers).json()

    assert second["order_id"] == first["order_id"]
    assert second["invoice_url"] == first["invoice_url"]
    assert len(all_rows(engine, Order)) == 1
    assert len(gateway.calls) == 1


def test_idempotency_key_is_scoped_per_user(client, engine, identity, make_product):
    p1 = make_product()
    headers = {"Idempotency-Key": "same-key"}

    a = client.post(URL, json=checkout_body((p1.id, 1)), headers=headers).json()
    identity.as_user("user-2")
    b = client.post(URL, json=checkout_body((p1.id, 1)), headers=headers).json()

    assert a["order_id"] != b["order_id"]


def test_replay_of_order_without_invoice_conflicts(client, gateway, make_product):
    p1 = make_product()
    headers = {"Idempotency-Key": "k1"}
    gateway.fail_with()
    assert client.post(URL, json=checkout_body((p1.id, 1)), headers=headers).status_code == 500

    gateway.error = None
    resp = client.post(URL, json=checkout_body((p1.id, 1)), headers=headers)

    assert resp.status_code == 409


def test_gateway_failure_marks_order_invoice_failed(client, engine, gateway, make_product):
    p1 = make_product()
    gateway.fail_with("Payment gateway error (503)")

    resp = client.post(URL, json=checkout_body((p1.id, 2)))

    assert resp.status_code == 500
    orders = all_rows(engine, Order)
    assert len(orders) == 1
    assert orders[0].status == "invoice_failed"
    assert len(all_rows(engine, OrderItem)) == 1
    assert all_rows(engine, Payment) == []
    events = [e.event_type for e in all_rows(engine, OrderEvent)]
    assert events == ["order_created", "invoice_failed"]


def test_payment_row_failure_still_returns_invoice(client, engine, gateway, make_product):
    p1 = make_product()

    def steal_external_id(call):
        # a conflicting row makes the real payment insert violate the unique external id
        order_id = call["external_id"].replace("ORDER-", "")
        with Session(engine) as s:
            s.add(Payment(user_id="x", order_id=order_id, amount=1, xendit_external_id=call["external_id"]))
            s.commit()

    gateway.on_create = steal_external_id

    resp = client.post(URL, json=checkout_body((p1.id, 1)))

    assert resp.status_code == 200
    body = resp.json()
    assert body["payment_id"] is None
    assert body["invoice_url"]
    order = all_rows(engine, Order)[0]
    assert order.status == "pending"
    events = [e.event_type for e in all_rows(engine, OrderEvent)]
    assert "payment_record_failed" in events


def test_unauthenticated_checkout_rejected(client, make_product):
    from medistore.main import app
    from medistore.utils.token import get_current_user

    del app.dependency_overrides[get_current_user]
    p1 = make_product()

    resp = client.post(URL, json=checkout_body((p1.id, 1)))

    assert resp.status_code == 401


# ---------- service level ----------

def test_item_write_failure_leaves_no_rows(session, engine, gateway, make_product, monkeypatch):
    p1 = make_product()
    data = CreateInvoiceRequest(**checkout_body((p1.id, 1)))

    def failing_commit():
        raise OperationalError("INSERT INTO order_items", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "commit", failing_commit)

    with pytest.raises(OrderCreationFailed):
        create_product_invoice(
            session=session,
            gateway=gateway,
            user=CurrentUser(id="user-1", email="buyer@example.com"),
            data=data,
        )

    monkeypatch.undo()
    assert all_rows(engine, Order) == []
    assert all_rows(engine, OrderItem) == []
    assert gateway.calls == []


def test_service_raises_domain_errors(session, gateway, make_product):
    user = CurrentUser(id="user-1")

    with pytest.raises(ValidationError) as exc:
        create_product_invoice(session=session, gateway=gateway, user=user, data=CreateInvoiceRequest())
    assert exc.value.field == "items"

    with pytest.raises(ProductUnavailable):
        create_product_invoice(
            session=session,
            gateway=gateway,
            user=user,
            data=CreateInvoiceRequest(**checkout_body(("nope", 1))),
        )


def miss_first_replay_lookup(monkeypatch):
    """Let the next request slip past the replay lookup, as a concurrent twin would."""
    from medistore.services import checkout_service

    real = checkout_service._find_replay
    calls = []

    def lookup(session, user_id, key):
        calls.append(key)
        if len(calls) == 1:
            return None
        return real(session, user_id, key)

    monkeypatch.setattr(checkout_service, "_find_replay", lookup)
    return calls


def test_concurrent_same_key_returns_original_invoice(client, engine, gateway, make_product, monkeypatch):
    p1 = make_product()
    headers = {"Idempotency-Key": "double-click"}
    first = client.post(URL, json=checkout_body((p1.id, 1)), headers=headers).json()

    calls = miss_first_replay_lookup(monkeypatch)
    resp = client.post(URL, json=checkout_body((p1.id, 1)), headers=headers)

    assert resp.status_code == 200
    assert resp.json()["order_id"] == first["order_id"]
    assert resp.json()["invoice_url"] == first["invoice_url"]
    assert calls == ["double-click", "double-click"]
    assert len(all_rows(engine, Order)) == 1
    assert len(gateway.calls) == 1


def test_concurrent_same_key_without_invoice_conflicts(client, engine, gateway, make_product, monkeypatch):
    p1 = make_product()
    headers = {"Idempotency-Key": "double-click"}
    gateway.fail_with()
    client.post(URL, json=checkout_body((p1.id, 1)), headers=headers)
    gateway.error = None

    miss_first_replay_lookup(monkeypatch)
    resp = client.post(URL, json=checkout_body((p1.id, 1)), headers=headers)

    assert resp.status_code == 409
    assert len(all_rows(engine, Order)) == 1
