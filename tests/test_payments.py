import pytest
import requests
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError

from storefront.core.config import settings
from storefront.core.exceptions import (
    UpstreamServiceError, UpstreamTimeoutError, ConfigurationError
)
from storefront.orders.models import Order, OrderItem, OrderStatus
from storefront.payments.client import MercadoPagoClient
from storefront.products.models import Product
from storefront.products.service import ProductService
from storefront.schemas.payments import PaymentRecord

WEBHOOK_URL = "/api/v1/webhooks/payment"
PREFERENCE_URL = "/api/v1/payments/preference"


@pytest.fixture
def place_order(db_session):
    """Creates a pending order with one line per (product, quantity) pair."""
    def _place(user, *lines, status=OrderStatus.PENDING.value):
        subtotal = sum(product.price * quantity for product, quantity in lines)
        order = Order(user_id=user.id, subtotal=subtotal, total=subtotal, status=status)
        order.order_items = [
            OrderItem(position=i, product_id=product.id, quantity=quantity, unit_price=product.price)
            for i, (product, quantity) in enumerate(lines)
        ]
        db_session.add(order)
        db_session.commit()
        return order
    return _place


def approved(order_id, payment_id="pay-1"):
    return PaymentRecord(id=payment_id, status="approved", external_reference=order_id)


def test_approved_payment_marks_order_paid_and_decrements_stock(
    client, db_session, customer, make_product, place_order, payment_gateway
):
    case = make_product(stock=5)
    order = place_order(customer, (case, 2))
    payment_gateway.get_payment.return_value = approved(order.id)

    response = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})

    assert response.status_code == 200
    assert response.json()["order_id"] == order.id
    payment_gateway.get_payment.assert_called_once_with("pay-1")
    db_session.refresh(order)
    assert order.status == "paid"
    assert order.payment_id == "pay-1"
    assert order.paid_at is not None
    assert db_session.get(Product, case.id).stock == 3


def test_duplicate_delivery_is_already_processed(
    client, db_session, customer, make_product, place_order, payment_gateway
):
    case = make_product(stock=5)
    order = place_order(customer, (case, 2))
    payment_gateway.get_payment.return_value = approved(order.id)

    first = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})
    second = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["error"]["code"] == "ALREADY_PROCESSED"
    assert db_session.get(Product, case.id).stock == 3


def test_stock_is_floored_at_zero(client, db_session, customer, make_product, place_order, payment_gateway):
    case = make_product(stock=5)
    order = place_order(customer, (case, 3))
    # Stock dropped after the order was built
    db_session.get(Product, case.id).stock = 1
    db_session.commit()
    payment_gateway.get_payment.return_value = approved(order.id)

    response = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})

    assert response.status_code == 200
    assert db_session.get(Product, case.id).stock == 0


def test_missing_product_is_skipped(client, db_session, customer, make_product, place_order, payment_gateway):
    kept = make_product(name="Kept", stock=4)
    removed = make_product(name="Removed", stock=4)
    order = place_order(customer, (removed, 1), (kept, 1))
    db_session.delete(db_session.get(Product, removed.id))
    db_session.commit()
    payment_gateway.get_payment.return_value = approved(order.id)

    response = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})

    assert response.status_code == 200
    assert db_session.get(Order, order.id).status == "paid"
    assert db_session.get(Product, kept.id).stock == 3


def test_store_failure_rolls_back_status_and_stock(
    client, db_session, customer, make_product, place_order, payment_gateway, mocker
):
    first = make_product(name="First", stock=5)
    second = make_product(name="Second", stock=5)
    order = place_order(customer, (first, 1), (second, 1))
    payment_gateway.get_payment.return_value = approved(order.id)

    real_decrement = ProductService.decrement_stock
    calls = []

    def flaky_decrement(db, product_id, quantity):
        if calls:
            raise OperationalError("UPDATE products", {}, Exception("database is locked"))
        calls.append(product_id)
        return real_decrement(db, product_id, quantity)

    mocker.patch.object(ProductService, "decrement_stock", side_effect=flaky_decrement)

    response = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "STORE_UNAVAILABLE"
    assert db_session.get(Order, order.id).status == "pending"
    assert db_session.get(Product, first.id).stock == 5

    # A redelivery after the store recovers goes through cleanly
    mocker.stopall()
    retry = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})
    assert retry.status_code == 200
    assert db_session.get(Product, first.id).stock == 4
    assert db_session.get(Product, second.id).stock == 4


def test_newer_notification_format(client, db_session, customer, make_product, place_order, payment_gateway):
    case = make_product(stock=5)
    order = place_order(customer, (case, 1))
    payment_gateway.get_payment.return_value = approved(order.id, payment_id="987")

    response = client.post(WEBHOOK_URL, json={"type": "payment", "data": {"id": 987}})

    assert response.status_code == 200
    payment_gateway.get_payment.assert_called_once_with("987")


def test_query_string_notification(client, customer, make_product, place_order, payment_gateway):
    case = make_product(stock=5)
    order = place_order(customer, (case, 1))
    payment_gateway.get_payment.return_value = approved(order.id, payment_id="555")

    response = client.post(f"{WEBHOOK_URL}?topic=payment&id=555")

    assert response.status_code == 200
    payment_gateway.get_payment.assert_called_once_with("555")


@pytest.mark.parametrize("body", [
    {"topic": "merchant_order", "id": "1"},
    {"topic": "payment"},
    {},
])
def test_invalid_notification(client, payment_gateway, body):
    response = client.post(WEBHOOK_URL, json=body)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_NOTIFICATION"
    payment_gateway.get_payment.assert_not_called()


def test_payment_not_approved_leaves_order_untouched(
    client, db_session, customer, make_product, place_order, payment_gateway
):
    case = make_product(stock=5)
    order = place_order(customer, (case, 2))
    payment_gateway.get_payment.return_value = PaymentRecord(id="pay-1", status="in_process", external_reference=order.id)

    response = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PAYMENT_NOT_APPROVED"
    assert db_session.get(Order, order.id).status == "pending"
    assert db_session.get(Product, case.id).stock == 5


def test_missing_external_reference(client, payment_gateway):
    payment_gateway.get_payment.return_value = PaymentRecord(id="pay-1", status="approved")

    response = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "EXTERNAL_REFERENCE_MISSING"


def test_unknown_order(client, payment_gateway):
    payment_gateway.get_payment.return_value = approved("no-such-order")

    response = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ORDER_NOT_FOUND"


def test_lookup_failure(client, payment_gateway):
    payment_gateway.get_payment.side_effect = UpstreamServiceError(
        "mercado_pago", "Payment not found", upstream_status=404
    )

    response = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PAYMENT_LOOKUP_FAILED"


def test_lookup_timeout_is_transient(client, payment_gateway):
    payment_gateway.get_payment.side_effect = UpstreamTimeoutError("mercado_pago", 10.0)

    response = client.post(WEBHOOK_URL, json={"topic": "payment", "id": "pay-1"})

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "UPSTREAM_TIMEOUT"


def test_preference_uses_frozen_order_total(
    client, customer, auth_headers, make_product, place_order, payment_gateway, monkeypatch
):
    monkeypatch.setattr(settings, "BACKEND_PUBLIC_URL", "https://api.example.com/")
    monkeypatch.setattr(settings, "FRONTEND_PUBLIC_URL", "https://shop.example.com")
    case = make_product(price=40.0, stock=5)
    order = place_order(customer, (case, 2))
    payment_gateway.create_preference.return_value = {"init_point": "https://mp.example/checkout", "preference_id": "pref-1"}

    response = client.post(PREFERENCE_URL, json={"order_id": order.id}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["init_point"] == "https://mp.example/checkout"
    assert response.json()["total"] == 80.0
    kwargs = payment_gateway.create_preference.call_args.kwargs
    assert kwargs["order_id"] == order.id
    assert kwargs["total"] == 80.0
    assert kwargs["payer_email"] == "customer@example.com"
    assert kwargs["notification_url"] == "https://api.example.com/api/v1/webhooks/payment"
    assert kwargs["back_url_base"] == "https://shop.example.com"


def test_preference_rejects_paid_order(
    client, customer, auth_headers, make_product, place_order, payment_gateway, monkeypatch
):
    monkeypatch.setattr(settings, "BACKEND_PUBLIC_URL", "https://api.example.com")
    case = make_product(stock=5)
    order = place_order(customer, (case, 1), status=OrderStatus.PAID.value)

    response = client.post(PREFERENCE_URL, json={"order_id": order.id}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "ALREADY_PROCESSED"
    payment_gateway.create_preference.assert_not_called()


def test_preference_for_someone_elses_order(
    client, admin_user, auth_headers, make_product, place_order, monkeypatch
):
    monkeypatch.setattr(settings, "BACKEND_PUBLIC_URL", "https://api.example.com")
    case = make_product(stock=5)
    order = place_order(admin_user, (case, 1))

    response = client.post(PREFERENCE_URL, json={"order_id": order.id}, headers=auth_headers)

    assert response.status_code == 404


def test_preference_requires_backend_url(client, customer, auth_headers, make_product, place_order, monkeypatch):
    monkeypatch.setattr(settings, "BACKEND_PUBLIC_URL", "")
    case = make_product(stock=5)
    order = place_order(customer, (case, 1))

    response = client.post(PREFERENCE_URL, json={"order_id": order.id}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = payload if payload is not None else {}
    return response


def test_client_get_payment_parses_record():
    session = MagicMock()
    session.request.return_value = _response(200, {"id": 123, "status": "approved", "external_reference": "order-1"})
    gateway = MercadoPagoClient("token", session=session)

    record = gateway.get_payment("123")

    assert record == PaymentRecord(id="123", status="approved", external_reference="order-1")
    method, url = session.request.call_args.args
    assert method == "GET"
    assert url == "https://api.mercadopago.com/v1/payments/123"
    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer token"
    assert session.request.call_args.kwargs["timeout"] == 10.0


def test_client_error_status_raises_upstream_error():
    session = MagicMock()
    session.request.return_value = _response(404, {"message": "Payment not found"})
    gateway = MercadoPagoClient("token", session=session)

    with pytest.raises(UpstreamServiceError) as exc_info:
        gateway.get_payment("123")

    assert exc_info.value.upstream_status == 404
    assert exc_info.value.user_message == "Payment not found"


def test_client_timeout():
    session = MagicMock()
    session.request.side_effect = requests.Timeout()
    gateway = MercadoPagoClient("token", timeout=2.0, session=session)

    with pytest.raises(UpstreamTimeoutError):
        gateway.get_payment("123")


def test_client_requires_token():
    gateway = MercadoPagoClient("", session=MagicMock())

    with pytest.raises(ConfigurationError):
        gateway.get_payment("123")


def test_client_create_preference_body():
    session = MagicMock()
    session.request.return_value = _response(201, {"id": "pref-9", "init_point": "https://mp.example/pay"})
    gateway = MercadoPagoClient("token", session=session)

    result = gateway.create_preference(
        order_id="order-1",
        total=115.0,
        payer_email="customer@example.com",
        notification_url="https://api.example.com/api/v1/webhooks/payment",
        back_url_base="https://shop.example.com"
    )

    assert result == {"init_point": "https://mp.example/pay", "preference_id": "pref-9"}
    body = session.request.call_args.kwargs["json"]
    assert body["external_reference"] == "order-1"
    assert body["items"][0]["unit_price"] == 115.0
    assert body["items"][0]["currency_id"] == "BRL"
    assert body["back_urls"]["success"] == "https://shop.example.com/success"
