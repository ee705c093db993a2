import pytest
import requests
from catalog.tests.factories import ProductFactory
from common.choices import SettlementStatus
from orders.tests.factories import OrderFactory, add_line
from payments.base import PaymentProviderError
from payments.paypal import PayPalClient
from payments.tests.helpers import fake_response, fake_session

TOKEN = fake_response(200, {"access_token": "tok"})


def _captured(order_id, status="COMPLETED", capture_status="COMPLETED"):
    return {
        "id": "PP-1",
        "status": status,
        "payer": {"email_address": "payer@example.com"},
        "purchase_units": [
            {
                "reference_id": str(order_id),
                "custom_id": str(order_id),
                "payments": {"captures": [{"id": "CAP-1", "status": capture_status}]},
            }
        ],
    }


@pytest.mark.django_db
def test_create_session_posts_capture_intent_with_order_correlation():
    order = OrderFactory(shipping_cents=3000)
    add_line(order, ProductFactory(price_cents=1999), 1)
    session = fake_session(
        TOKEN,
        fake_response(201, {"id": "PP-1", "links": [{"rel": "approve", "href": "https://paypal.example/approve"}]}),
    )

    result = PayPalClient(session=session).create_session(order)

    assert result.reference == "PP-1"
    assert result.redirect_url == "https://paypal.example/approve"
    token_call, create_call = session.request.call_args_list
    assert token_call.args == ("POST", "https://api-m.sandbox.paypal.com/v1/oauth2/token")
    assert token_call.kwargs["auth"] == ("paypal-client", "paypal-secret")
    assert token_call.kwargs["data"] == {"grant_type": "client_credentials"}
    assert create_call.args == ("POST", "https://api-m.sandbox.paypal.com/v2/checkout/orders")
    assert create_call.kwargs["headers"]["Authorization"] == "Bearer tok"
    body = create_call.kwargs["json"]
    assert body["intent"] == "CAPTURE"
    unit = body["purchase_units"][0]
    assert unit["reference_id"] == unit["custom_id"] == str(order.id)
    assert unit["amount"] == {"currency_code": "USD", "value": "49.99"}


@pytest.mark.django_db
def test_confirm_completed_capture_is_approved():
    order = OrderFactory()
    session = fake_session(TOKEN, fake_response(201, _captured(order.id)))

    result = PayPalClient(session=session).confirm(order, "PP-1")

    assert result.status == SettlementStatus.APPROVED
    assert result.order_id == order.id
    assert result.references == {
        "paypal_order_id": "PP-1",
        "paypal_capture_id": "CAP-1",
        "paypal_payer_email": "payer@example.com",
    }
    assert session.request.call_args_list[1].args[1].endswith("/v2/checkout/orders/PP-1/capture")


@pytest.mark.django_db
def test_confirm_already_captured_refetches_order():
    order = OrderFactory()
    session = fake_session(
        TOKEN,
        fake_response(422, {"name": "UNPROCESSABLE_ENTITY", "details": [{"issue": "ORDER_ALREADY_CAPTURED"}]}),
        fake_response(200, _captured(order.id)),
    )

    result = PayPalClient(session=session).confirm(order, "PP-1")

    assert result.status == SettlementStatus.APPROVED
    refetch = session.request.call_args_list[2]
    assert refetch.args == ("GET", "https://api-m.sandbox.paypal.com/v2/checkout/orders/PP-1")


@pytest.mark.django_db
@pytest.mark.parametrize(
    "order_status,capture_status,expected",
    [
        ("COMPLETED", "DECLINED", SettlementStatus.REJECTED),
        ("VOIDED", "", SettlementStatus.REJECTED),
        ("COMPLETED", "PENDING", SettlementStatus.PENDING),
        ("APPROVED", "", SettlementStatus.PENDING),
    ],
)
def test_confirm_status_mapping(order_status, capture_status, expected):
    order = OrderFactory()
    payload = _captured(order.id, status=order_status, capture_status=capture_status)
    session = fake_session(TOKEN, fake_response(201, payload))

    assert PayPalClient(session=session).confirm(order, "PP-1").status == expected


@pytest.mark.django_db
def test_unapproved_order_is_pending():
    order = OrderFactory()
    session = fake_session(TOKEN, fake_response(422, {"details": [{"issue": "ORDER_NOT_APPROVED"}]}))

    result = PayPalClient(session=session).confirm(order, "PP-1")

    assert result.status == SettlementStatus.PENDING
    assert result.provider_status == "ORDER_NOT_APPROVED"


@pytest.mark.django_db
def test_http_failures_raise_provider_error():
    order = OrderFactory()
    with pytest.raises(PaymentProviderError):
        PayPalClient(session=fake_session(fake_response(401, {"error": "invalid_client"}))).create_session(order)

    with pytest.raises(PaymentProviderError):
        PayPalClient(session=fake_session(requests.ConnectionError("down"))).create_session(order)


def test_missing_credentials_raise_provider_error():
    client = PayPalClient(session=fake_session(), client_id="", client_secret="")
    with pytest.raises(PaymentProviderError):
        client.access_token()
