"""
validation.py — Field Checks for the Ticket-Purchase Form

The checks run in a fixed order and stop at the first failure, raising
`BadRequestError` with a message meant to be shown to the purchaser.
"""

import logging
import re

from email_validator import EmailNotValidError, validate_email

from .exceptions import BadRequestError
from .models import Dessert, Main, PurchaseRequest, Starter

log = logging.getLogger(__name__)

MAX_SPECIAL_REQUESTS_LENGTH = 500

# Edinburgh student UUNs: 's' followed by seven digits
UUN_PATTERN = re.compile(r"^s\d{7}$")


def check_uun(uun: str) -> bool:
    """Returns True if `uun` looks like a University of Edinburgh UUN."""
    return bool(UUN_PATTERN.match(uun))


def is_valid_email(address: str) -> bool:
    try:
        validate_email(address, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def parse_meal(purchase: PurchaseRequest):
    """
    Converts the three menu strings into their enums.

    Returns:
        tuple[Starter, Main, Dessert]: The validated courses.

    Raises:
        BadRequestError: If any course is not on the menu.
    """
    try:
        return Starter(purchase.starter), Main(purchase.main), Dessert(purchase.dessert)
    except ValueError:
        raise BadRequestError("Invalid food selection.")


def validate_purchase(purchase: PurchaseRequest, uun_checker=check_uun):
    """
    Runs every form check against a purchase request.

    Args:
        purchase (PurchaseRequest): The decoded request body.
        uun_checker (Callable[[str], bool]): Format check for the UUN field.

    Returns:
        tuple[Starter, Main, Dessert]: The validated meal selection.

    Raises:
        BadRequestError: On the first check that fails.
    """
    if not purchase.token:
        raise BadRequestError("Stripe token missing.")

    if not purchase.over18:
        raise BadRequestError("You must be atleast 18 years of age to attend.")

    if not purchase.fullName:
        raise BadRequestError("Full name missing.")

    if not is_valid_email(purchase.email):
        raise BadRequestError(
            "Invalid email format provided. Please email infball@comp-soc.com if this is a mistake."
        )

    if not uun_checker(purchase.uun):
        log.info(f"[UUN: {purchase.uun!r}] Rejected UUN.")
        raise BadRequestError("Invalid UUN provided. Please email infball@comp-soc.com if this is a mistake.")

    meal = parse_meal(purchase)

    if len(purchase.specialReqs) > MAX_SPECIAL_REQUESTS_LENGTH:
        raise BadRequestError(
            "Sorry, your request is limited to 500 characters. Please email infball@comp-soc.com for assistance."
        )

    return meal
