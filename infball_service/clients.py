"""
This module provides communication clients for the external providers used by the ticket service:
- Payment Provider (Stripe REST API): stock lookup, orders, payment, charge annotation
- Email Provider (Mailgun REST API): ticket confirmation emails
Each class encapsulates its protocol logic, error handling, and connection management.
"""

import html
import logging

import httpx

from . import config
from .exceptions import EmailProviderError, PaymentProviderError

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(5.0, read=8.0)


def extract_provider_message(response: httpx.Response, fallback: str) -> str:
    """
    Pulls the human-readable error text out of a provider error response.

    Stripe nests it as `{"error": {"message": ...}}`, Mailgun sends
    `{"message": ...}`. Anything else yields `fallback`.
    """
    try:
        body = response.json()
    except ValueError:
        return fallback
    if not isinstance(body, dict):
        return fallback
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if body.get("message"):
        return body["message"]
    return fallback


# --- Payment Client (Stripe REST) ---
class PaymentClient:
    """
    Client for the Stripe API.
    Looks up ticket stock, creates and pays orders, and annotates charges.
    """
    def __init__(self, client: httpx.Client = None):
        """
        Initializes the HTTP client with bearer authentication and timeouts.
        Args:
            client (httpx.Client): Optional pre-built client, e.g. a test client
                pointed at the mock payment service.
        """
        if client is None:
            client = httpx.Client(
                base_url=config.STRIPE_API_URL,
                headers={"Authorization": f"Bearer {config.STRIPE_SECRET_KEY}"},
                timeout=DEFAULT_TIMEOUT,
            )
        self.client = client

    def close(self):
        self.client.close()

    def _request(self, method: str, path: str, data: dict = None) -> dict:
        try:
            response = self.client.request(method, path, data=data)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            message = extract_provider_message(e.response, str(e))
            if e.response.status_code == 402:
                log.warning(f"Stripe declined {method} {path}: {message}")
            else:
                log.error(f"Stripe error on {method} {path} (HTTP {e.response.status_code}): {message}")
            raise PaymentProviderError(message, e.response.status_code) from e
        except httpx.HTTPError as e:
            log.error(f"Stripe unreachable on {method} {path}: {e!r}")
            raise PaymentProviderError(str(e) or type(e).__name__) from e

    def get_sku(self, sku_id: str) -> dict:
        """
        Fetches a SKU, including its inventory.
        Args:
            sku_id (str): Stripe SKU identifier of the ticket product.
        Returns:
            dict: The SKU object; `inventory.quantity` holds the remaining stock.
        Raises:
            PaymentProviderError: If Stripe rejects the lookup or is unreachable.
        """
        return self._request("GET", f"/v1/skus/{sku_id}")

    def create_order(self, sku_id: str, email: str, metadata: dict, currency: str = "gbp") -> dict:
        """
        Creates an unpaid order for a single unit of `sku_id`.
        Args:
            sku_id (str): Stripe SKU identifier.
            email (str): Customer email recorded on the order.
            metadata (dict): String key/value pairs stored on the order.
            currency (str): ISO currency code, lowercase as Stripe expects.
        Returns:
            dict: The created order object.
        Raises:
            PaymentProviderError: If the order cannot be created.
        """
        data = {
            "currency": currency,
            "email": email,
            "items[0][type]": "sku",
            "items[0][parent]": sku_id,
            "items[0][quantity]": "1",
        }
        for key, value in metadata.items():
            data[f"metadata[{key}]"] = value
        return self._request("POST", "/v1/orders", data=data)

    def pay_order(self, order_id: str, source: str) -> dict:
        """
        Pays an order with the purchaser's card token.
        Returns:
            dict: The paid order; `charge` holds the charge id.
        Raises:
            PaymentProviderError: If the card is declined or the token is invalid.
        """
        return self._request("POST", f"/v1/orders/{order_id}/pay", data={"source": source})

    def update_charge(self, charge_id: str, description: str) -> dict:
        return self._request("POST", f"/v1/charges/{charge_id}", data={"description": description})


# --- Email Client (Mailgun REST) ---
def render_ticket_text(name: str, order_id: str, auth_token: str) -> str:
    return (
        f"Hi {name},\n\n"
        "Thank you for buying a ticket to the Informatics Ball!\n\n"
        f"Order reference: {order_id}\n"
        f"Ticket code: {auth_token}\n\n"
        "Please keep this email, you will need the ticket code at the door.\n"
        "If anything is wrong, email infball@comp-soc.com.\n\n"
        "CompSoc\n"
    )


def render_ticket_html(name: str, order_id: str, auth_token: str) -> str:
    return (
        f"<p>Hi {html.escape(name)},</p>"
        "<p>Thank you for buying a ticket to the Informatics Ball!</p>"
        f"<p>Order reference: <strong>{html.escape(order_id)}</strong><br>"
        f"Ticket code: <strong>{html.escape(auth_token)}</strong></p>"
        "<p>Please keep this email, you will need the ticket code at the door. "
        "If anything is wrong, email "
        '<a href="mailto:infball@comp-soc.com">infball@comp-soc.com</a>.</p>'
        "<p>CompSoc</p>"
    )


class EmailClient:
    """
    Client for the Mailgun messages API.
    Sends the ticket confirmation email after a successful payment.
    """
    def __init__(self, client: httpx.Client = None, domain: str = None, sender: str = None):
        if client is None:
            client = httpx.Client(
                base_url=config.MAILGUN_API_URL,
                auth=("api", config.MAILGUN_API_KEY),
                timeout=DEFAULT_TIMEOUT,
            )
        self.client = client
        self.domain = domain or config.MAILGUN_DOMAIN
        self.sender = sender or config.MAILGUN_SENDER

    def close(self):
        self.client.close()

    def send_ticket_email(self, name: str, email: str, order_id: str, auth_token: str) -> dict:
        """
        Sends the ticket confirmation to the purchaser.
        Args:
            name (str): Purchaser's full name.
            email (str): Recipient address.
            order_id (str): Paid Stripe order id.
            auth_token (str): Ticket code checked at the door.
        Returns:
            dict: Mailgun's response, containing the queued message id.
        Raises:
            EmailProviderError: If Mailgun rejects the message or is unreachable.
        """
        data = {
            "from": self.sender,
            "to": f"{name} <{email}>",
            "subject": config.TICKET_EMAIL_SUBJECT,
            "text": render_ticket_text(name, order_id, auth_token),
            "html": render_ticket_html(name, order_id, auth_token),
        }
        try:
            response = self.client.post(f"/v3/{self.domain}/messages", data=data)
            response.raise_for_status()
            log.info(f"[Order: {order_id}] Ticket email queued for {email}.")
            return response.json()
        except httpx.HTTPStatusError as e:
            message = extract_provider_message(e.response, str(e))
            log.error(f"[Order: {order_id}] Mailgun rejected ticket email (HTTP {e.response.status_code}): {message}")
            raise EmailProviderError(message, e.response.status_code) from e
        except httpx.HTTPError as e:
            log.error(f"[Order: {order_id}] Mailgun unreachable: {e!r}")
            raise EmailProviderError(str(e) or type(e).__name__) from e
