"""
mock_payment_service.py — Mock Implementation of the Payment Provider (Stripe REST API)

This module provides a simulated subset of the Stripe API for local development
and for exercising the ticket service's payment client.
It exposes a FastAPI application that keeps SKUs, orders and charges in memory.

Simulation Scenarios:
    • SKU id starting with "sku_soldout" → inventory quantity 0
    • SKU id starting with "sku_missing" → 404 resource_missing
    • Payment source starting with "tok_decline_" → 402 card_declined
    • Anything else → success, inventory decremented on payment

Endpoints:
    GET  /v1/skus/{sku_id}
    POST /v1/orders
    POST /v1/orders/{order_id}/pay
    POST /v1/charges/{charge_id}

Port:
    Default: 8001 (HTTP)
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

app = FastAPI(title="Mock Payment Service")
log = logging.getLogger(__name__)

DEFAULT_STOCK = 100

SKUS = {}
ORDERS = {}
CHARGES = {}


def reset():
    """Clears all in-memory state."""
    SKUS.clear()
    ORDERS.clear()
    CHARGES.clear()


def stripe_error(status_code: int, error_type: str, message: str, code: str = None) -> JSONResponse:
    error = {"type": error_type, "message": message}
    if code:
        error["code"] = code
    return JSONResponse(status_code=status_code, content={"error": error})


def _sku(sku_id: str):
    if sku_id.startswith("sku_missing"):
        return None
    if sku_id not in SKUS:
        quantity = 0 if sku_id.startswith("sku_soldout") else DEFAULT_STOCK
        SKUS[sku_id] = {
            "id": sku_id,
            "object": "sku",
            "currency": "gbp",
            "inventory": {"type": "finite", "quantity": quantity, "value": None},
        }
    return SKUS[sku_id]


def _metadata(form) -> dict:
    return {key[len("metadata["):-1]: value for key, value in form.items() if key.startswith("metadata[")}


@app.get("/v1/skus/{sku_id}")
def retrieve_sku(sku_id: str):
    sku = _sku(sku_id)
    if sku is None:
        return stripe_error(404, "invalid_request_error", f"No such sku: '{sku_id}'", "resource_missing")
    return sku


@app.post("/v1/orders")
async def create_order(request: Request):
    """
    Creates an order for one SKU item.

    Form fields mirror Stripe's: `currency`, `email`, `items[0][type]`,
    `items[0][parent]`, `items[0][quantity]` and `metadata[...]`.
    """
    form = await request.form()
    sku_id = form.get("items[0][parent]", "")
    sku = _sku(sku_id)
    if sku is None:
        return stripe_error(404, "invalid_request_error", f"No such sku: '{sku_id}'", "resource_missing")

    order_id = f"or_{uuid.uuid4().hex[:24]}"
    order = {
        "id": order_id,
        "object": "order",
        "currency": form.get("currency"),
        "email": form.get("email"),
        "items": [{
            "type": form.get("items[0][type]"),
            "parent": sku_id,
            "quantity": int(form.get("items[0][quantity]", "1")),
        }],
        "metadata": _metadata(form),
        "status": "created",
        "charge": None,
        "created": int(time.time()),
    }
    ORDERS[order_id] = order
    log.info(f"[PS] Order {order_id} created for {order['email']}.")
    return order


@app.post("/v1/orders/{order_id}/pay")
async def pay_order(order_id: str, request: Request):
    form = await request.form()
    source = form.get("source", "")
    order = ORDERS.get(order_id)
    if order is None:
        return stripe_error(404, "invalid_request_error", f"No such order: '{order_id}'", "resource_missing")

    if source.startswith("tok_decline_"):
        log.warning(f"[PS] Payment for {order_id} declined.")
        return stripe_error(402, "card_error", "Your card was declined.", "card_declined")

    charge_id = f"ch_{uuid.uuid4().hex[:24]}"
    CHARGES[charge_id] = {"id": charge_id, "object": "charge", "order": order_id, "description": None}
    order["status"] = "paid"
    order["charge"] = charge_id
    for item in order["items"]:
        SKUS[item["parent"]]["inventory"]["quantity"] -= item["quantity"]
    log.info(f"[PS] Order {order_id} paid with charge {charge_id}.")
    return order


@app.post("/v1/charges/{charge_id}")
async def update_charge(charge_id: str, request: Request):
    form = await request.form()
    charge = CHARGES.get(charge_id)
    if charge is None:
        return stripe_error(404, "invalid_request_error", f"No such charge: '{charge_id}'", "resource_missing")
    if "description" in form:
        charge["description"] = form["description"]
    return charge


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8001)
