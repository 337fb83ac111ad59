"""
exceptions.py — Error Types for the Ticket Service

Two families of errors live here:
    • PurchaseError and its subclasses are raised by the order workflow and
      rendered by the API as `{"status": "error", "message": ...}` responses.
    • ProviderError and its subclasses are raised by the HTTP clients when
      Stripe or Mailgun reject a call or cannot be reached.
"""


class PurchaseError(Exception):
    """Base class for failures that end a purchase request."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class BadRequestError(PurchaseError):
    """Invalid form input."""

    def __init__(self, message: str):
        super().__init__(message, 400)


class PaymentError(PurchaseError):
    """The card was declined or the payment token was rejected."""

    def __init__(self, message: str):
        super().__init__(message, 400)


class NotificationError(PurchaseError):
    """The confirmation email could not be sent (the order is already paid)."""

    def __init__(self, message: str):
        super().__init__(message, 400)


class SoldOutError(PurchaseError):
    def __init__(self, message: str = "Sorry! We have run out of tickets... for now."):
        super().__init__(message, 410)


class UpstreamError(PurchaseError):
    """The payment provider failed while checking stock or creating the order."""

    def __init__(self, message: str):
        super().__init__(message, 500)


class ProviderError(Exception):
    """
    Raised by a provider client.

    Attributes:
        message (str): The provider's own error text when it sent one,
            otherwise the text of the underlying transport error.
        status_code (int | None): HTTP status returned by the provider, if any.
    """

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class PaymentProviderError(ProviderError):
    pass


class EmailProviderError(ProviderError):
    pass
