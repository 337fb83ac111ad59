"""
workflow.py — Core Orchestration Logic for Ticket Purchases

This module contains the purchase workflow. It coordinates the form checks and
the provider calls in the correct sequence.

Workflow Overview:
1. Validate the purchase form
2. Check remaining ticket stock via Stripe
3. Create the order with the purchaser's details as metadata
4. Pay the order with the purchaser's card token
5. Annotate the charge on a daemon thread (best effort)
6. Email the ticket via Mailgun
"""

import logging
import threading
import uuid

from .clients import EmailClient, PaymentClient
from .exceptions import (
    EmailProviderError,
    NotificationError,
    PaymentError,
    PaymentProviderError,
    SoldOutError,
    UpstreamError,
)
from .models import PurchaseRequest
from .validation import check_uun, validate_purchase

log = logging.getLogger(__name__)

CHARGE_DESCRIPTION = "Informatics Ball Ticket"


def new_auth_token() -> str:
    """Mints the ticket code stored on the order and emailed to the purchaser."""
    return str(uuid.uuid4())


def run_in_thread(target, *args):
    """Starts `target` on a daemon thread and returns without joining it."""
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()
    return thread


def annotate_charge(payment_client: PaymentClient, charge_id: str, order_id: str):
    """
    Sets the description of a charge. Runs off the request path; failures
    are logged and dropped.
    """
    try:
        payment_client.update_charge(charge_id, CHARGE_DESCRIPTION)
        log.info(f"[Order: {order_id}] Charge {charge_id} annotated.")
    except PaymentProviderError as e:
        log.warning(f"[Order: {order_id}] Could not annotate charge {charge_id}: {e.message}")
    except Exception:
        log.warning(f"[Order: {order_id}] Could not annotate charge {charge_id}", exc_info=True)


class OrderHandler:
    """
    Sells one ticket per request.

    Args:
        payment_client (PaymentClient): Stripe client.
        email_client (EmailClient): Mailgun client.
        sku (str): Stripe SKU of the ticket product.
        uun_checker (Callable[[str], bool]): UUN format check.
        run_in_background (Callable): Starts a fire-and-forget call, `run(fn, *args)`.
    """
    def __init__(self, payment_client: PaymentClient, email_client: EmailClient, sku: str,
                 uun_checker=check_uun, run_in_background=run_in_thread):
        self.payment_client = payment_client
        self.email_client = email_client
        self.sku = sku
        self.uun_checker = uun_checker
        self.run_in_background = run_in_background

    def handle(self, purchase: PurchaseRequest) -> dict:
        """
        Executes the purchase workflow for a single request.

        Args:
            purchase (PurchaseRequest): Decoded request body.

        Returns:
            dict: `{"status": "success", "data": <order id>}`.

        Raises:
            BadRequestError: A form field is missing or invalid.
            SoldOutError: Stripe reports zero tickets left.
            UpstreamError: Stripe failed during the stock check or order creation.
            PaymentError: Stripe refused the payment.
            NotificationError: Mailgun refused the ticket email. The order is
                already paid at this point and is not refunded.
        """
        starter, main, dessert = validate_purchase(purchase, self.uun_checker)

        log_prefix = f"[UUN: {purchase.uun}]"
        log.info(f"{log_prefix} Valid purchase form received.")

        # --- 1. Stock check ---
        try:
            sku = self.payment_client.get_sku(self.sku)
        except PaymentProviderError as e:
            raise UpstreamError(e.message)

        if (sku.get("inventory") or {}).get("quantity") == 0:
            log.warning(f"{log_prefix} Rejected: SKU {self.sku} is sold out.")
            raise SoldOutError()

        # --- 2. Order creation ---
        auth_token = new_auth_token()
        metadata = {
            "uun": purchase.uun,
            "purchaser_email": purchase.email,
            "purchaser_name": purchase.fullName,
            "owner_email": purchase.email,
            "owner_name": purchase.fullName,
            "over18": str(purchase.over18).lower(),
            "meal_starter": starter.value,
            "meal_main": main.value,
            "meal_dessert": dessert.value,
            "special_requests": purchase.specialReqs,
            "auth_token": auth_token,
        }
        try:
            order = self.payment_client.create_order(self.sku, purchase.email, metadata, currency="gbp")
        except PaymentProviderError as e:
            raise UpstreamError(e.message)

        log_prefix = f"[Order: {order['id']}]"
        log.info(f"{log_prefix} Order created, charging card.")

        # --- 3. Payment ---
        try:
            paid = self.payment_client.pay_order(order["id"], purchase.token)
        except PaymentProviderError as e:
            log.info(f"{log_prefix} Payment failed: {e.message}")
            raise PaymentError(e.message)

        order_id = paid["id"]
        log.info(f"{log_prefix} Payment succeeded.")

        charge = paid.get("charge")
        charge_id = charge.get("id") if isinstance(charge, dict) else charge
        if charge_id:
            self.run_in_background(annotate_charge, self.payment_client, charge_id, order_id)

        # --- 4. Confirmation email ---
        try:
            self.email_client.send_ticket_email(purchase.fullName, purchase.email, order_id, auth_token)
        except EmailProviderError as e:
            # Paid but not notified; needs manual follow-up.
            log.critical(f"{log_prefix} Order paid but ticket email failed: {e.message}")
            raise NotificationError(e.message)

        log.info(f"{log_prefix} Purchase complete.")
        return {"status": "success", "data": order_id}
