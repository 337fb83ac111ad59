"""
Tests for the Stripe and Mailgun clients, run against the mock provider apps.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from infball_service.clients import (
    EmailClient,
    PaymentClient,
    extract_provider_message,
    render_ticket_html,
    render_ticket_text,
)
from infball_service.exceptions import EmailProviderError, PaymentProviderError
from mock_services import mock_email_service, mock_payment_service


@pytest.fixture
def stripe():
    mock_payment_service.reset()
    client = PaymentClient(client=TestClient(mock_payment_service.app))
    yield client
    client.close()


@pytest.fixture
def mailgun():
    mock_email_service.reset()
    client = EmailClient(client=TestClient(mock_email_service.app), domain="comp-soc.com",
                         sender="Informatics Ball <infball@comp-soc.com>")
    yield client
    client.close()


def _unreachable(request):
    raise httpx.ConnectError("connection refused", request=request)


# --- extract_provider_message ---

def test_extracts_stripe_error_message():
    response = httpx.Response(402, json={"error": {"type": "card_error", "message": "Your card was declined."}})
    assert extract_provider_message(response, "fallback") == "Your card was declined."


def test_extracts_mailgun_error_message():
    response = httpx.Response(400, json={"message": "Domain not found"})
    assert extract_provider_message(response, "fallback") == "Domain not found"


@pytest.mark.parametrize("response", [
    httpx.Response(502, text="<html>Bad Gateway</html>"),
    httpx.Response(500, json={"error": "boom"}),
    httpx.Response(500, json=["unexpected"]),
])
def test_falls_back_without_structured_message(response):
    assert extract_provider_message(response, "fallback") == "fallback"


# --- PaymentClient ---

def test_get_sku_reports_inventory(stripe):
    sku = stripe.get_sku("sku_ticket")
    assert sku["inventory"]["quantity"] == mock_payment_service.DEFAULT_STOCK


def test_get_sku_sold_out(stripe):
    assert stripe.get_sku("sku_soldout_ball")["inventory"]["quantity"] == 0


def test_get_missing_sku_raises_with_stripe_message(stripe):
    with pytest.raises(PaymentProviderError) as exc_info:
        stripe.get_sku("sku_missing")
    assert exc_info.value.message == "No such sku: 'sku_missing'"
    assert exc_info.value.status_code == 404


def test_create_order_sends_items_and_metadata(stripe):
    order = stripe.create_order("sku_ticket", "ada@example.com", {"uun": "s1234567", "auth_token": "abc"})

    stored = mock_payment_service.ORDERS[order["id"]]
    assert stored["currency"] == "gbp"
    assert stored["email"] == "ada@example.com"
    assert stored["items"] == [{"type": "sku", "parent": "sku_ticket", "quantity": 1}]
    assert stored["metadata"] == {"uun": "s1234567", "auth_token": "abc"}


def test_pay_order_and_annotate_charge(stripe):
    order = stripe.create_order("sku_ticket", "ada@example.com", {})

    paid = stripe.pay_order(order["id"], "tok_visa")
    assert paid["status"] == "paid"
    assert paid["charge"].startswith("ch_")
    assert stripe.get_sku("sku_ticket")["inventory"]["quantity"] == mock_payment_service.DEFAULT_STOCK - 1

    charge = stripe.update_charge(paid["charge"], "Informatics Ball Ticket")
    assert charge["description"] == "Informatics Ball Ticket"


def test_declined_card_raises_with_stripe_message(stripe):
    order = stripe.create_order("sku_ticket", "ada@example.com", {})
    with pytest.raises(PaymentProviderError) as exc_info:
        stripe.pay_order(order["id"], "tok_decline_insufficient_funds")
    assert exc_info.value.message == "Your card was declined."
    assert exc_info.value.status_code == 402
    assert mock_payment_service.ORDERS[order["id"]]["status"] == "created"


def test_unreachable_stripe_raises_payment_provider_error():
    client = PaymentClient(client=httpx.Client(base_url="http://stripe.invalid",
                                               transport=httpx.MockTransport(_unreachable)))
    with pytest.raises(PaymentProviderError) as exc_info:
        client.get_sku("sku_ticket")
    assert exc_info.value.message == "connection refused"
    assert exc_info.value.status_code is None


# --- EmailClient ---

def test_send_ticket_email(mailgun):
    result = mailgun.send_ticket_email("Ada Lovelace", "ada@example.com", "or_123", "token-456")

    assert result["message"] == "Queued. Thank you."
    [message] = mock_email_service.SENT_MESSAGES
    assert message["domain"] == "comp-soc.com"
    assert message["to"] == "Ada Lovelace <ada@example.com>"
    assert message["from"] == "Informatics Ball <infball@comp-soc.com>"
    assert "or_123" in message["text"]
    assert "token-456" in message["text"]
    assert "token-456" in message["html"]


def test_rejected_email_raises_with_mailgun_message(mailgun):
    with pytest.raises(EmailProviderError) as exc_info:
        mailgun.send_ticket_email("Ada", "ada@bounce.example.com", "or_1", "t")
    assert exc_info.value.message.startswith("'to' parameter is not a valid address")
    assert exc_info.value.status_code == 400
    assert mock_email_service.SENT_MESSAGES == []


def test_unreachable_mailgun_raises_email_provider_error():
    client = EmailClient(client=httpx.Client(base_url="http://mailgun.invalid",
                                             transport=httpx.MockTransport(_unreachable)))
    with pytest.raises(EmailProviderError, match="connection refused"):
        client.send_ticket_email("Ada", "ada@example.com", "or_1", "t")


def test_ticket_html_escapes_name():
    body = render_ticket_html("<b>Ada</b>", "or_1", "t")
    assert "&lt;b&gt;Ada&lt;/b&gt;" in body
    assert "<b>Ada</b>" not in body


def test_ticket_text_names_purchaser_and_codes():
    body = render_ticket_text("Ada", "or_1", "t-1")
    assert body.startswith("Hi Ada,")
    assert "Order reference: or_1" in body
    assert "Ticket code: t-1" in body
