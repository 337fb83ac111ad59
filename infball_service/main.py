"""
main.py — FastAPI Entry Point for the Ticket Service

This module provides the REST API for the Informatics Ball ticket shop.
It receives purchase forms from the website and hands them to the order
workflow, which talks to Stripe and Mailgun.

Responsibilities:
    • Accept ticket purchases via HTTP API
    • Own the provider clients for the lifetime of the process
    • Render workflow errors as `{"status": "error", "message": ...}`
    • Provide system health information
"""

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import config
from .clients import EmailClient, PaymentClient
from .exceptions import PurchaseError
from .logging_config import get_logger, setup_logging
from .models import PurchaseRequest
from .workflow import OrderHandler

# Initialization
setup_logging()
log = get_logger(__name__)
app = FastAPI(title="Informatics Ball Ticket Service")


@app.on_event("startup")
def on_startup():
    """Creates the provider clients shared by all requests."""
    log.info("Ticket service starting...")
    if not config.STRIPE_SKU:
        log.warning("STRIPE_SKU is not set; every purchase will fail the stock check.")
    app.state.payment_client = PaymentClient()
    app.state.email_client = EmailClient()


@app.on_event("shutdown")
def on_shutdown():
    app.state.payment_client.close()
    app.state.email_client.close()
    log.info("Ticket service stopped.")


def get_order_handler(request: Request) -> OrderHandler:
    state = request.app.state
    return OrderHandler(state.payment_client, state.email_client, config.STRIPE_SKU)


# Exception handlers
@app.exception_handler(PurchaseError)
async def purchase_error_handler(request: Request, exc: PurchaseError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error(f"Purchase failed upstream: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"status": "error", "message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = errors[0].get("msg", "invalid value") if errors else "invalid value"
    log.info(f"Undecodable purchase request: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": "error", "message": f"Invalid request body: {detail}"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.critical(f"Unhandled error: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "error", "message": "Internal server error."},
    )


# API Endpoint: website → ticket service
@app.post("/charge")
def make_charge(
        purchase: PurchaseRequest,
        handler: OrderHandler = Depends(get_order_handler)
):
    """
    Sells one ticket.

    Validates the form, checks stock, creates and pays the Stripe order and
    emails the ticket. The charge description is set on a background thread
    that the request does not wait for.

    Args:
        purchase (PurchaseRequest): Ticket-purchase form.
        handler (OrderHandler): Workflow wired to the provider clients.

    Returns:
        dict: `{"status": "success", "data": <order id>}` on success. Failures
        are raised as `PurchaseError` and rendered by `purchase_error_handler`.
    """
    return handler.handle(purchase)


# Health Check Endpoint
@app.get("/health")
def health_check():
    """
    Simple health check endpoint for monitoring systems and container orchestrators.

    Returns:
        dict: A basic JSON object indicating service availability.
    """
    return {"status": "ok"}
