"""
models.py — Data Models for Ticket Purchases

This module defines the request payload accepted by the purchase endpoint and
the closed menu choices a purchaser can pick from.

Models:
    - Starter, Main, Dessert: The fixed three-course menu.
    - PurchaseRequest: The ticket-purchase form submitted by the browser.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, StrictBool, field_validator


class Starter(str, Enum):
    SOUP = "soup"
    SALMON = "salmon"
    PORK = "pork"


class Main(str, Enum):
    BEEF = "beef"
    SALMON = "salmon"
    CHICKEN = "chicken"
    MUSHROOMS = "mushrooms"


class Dessert(str, Enum):
    BROWNIE = "brownie"
    TOFFEE = "toffee"


class PurchaseRequest(BaseModel):
    """
    Represents a ticket-purchase form.

    Every field has a zero-value default, and an explicit JSON null decodes to
    that same value, so that an absent field reaches the validation sequence
    and is reported with its own message instead of a generic decoding error.
    Menu fields stay plain strings here and are converted to their enums by
    `validation.validate_purchase`.

    Attributes:
        token (str): Stripe payment source created by Stripe.js in the browser.
        fullName (str): Purchaser's full name.
        uun (str): University user name, e.g. 's1234567'.
        email (str): Address the ticket is sent to.
        over18 (bool): Purchaser confirms they are at least 18. Only a JSON
            boolean is accepted; "yes", "true" or 1 are rejected.
        starter (str): One of `Starter`.
        main (str): One of `Main`.
        dessert (str): One of `Dessert`.
        specialReqs (str): Dietary or accessibility requests, max 500 characters.
    """
    token: Optional[str] = ""
    fullName: Optional[str] = ""
    uun: Optional[str] = ""
    email: Optional[str] = ""
    over18: StrictBool = False
    starter: Optional[str] = ""
    main: Optional[str] = ""
    dessert: Optional[str] = ""
    specialReqs: Optional[str] = ""

    @field_validator("token", "fullName", "uun", "email", "starter", "main", "dessert", "specialReqs", mode="before")
    @classmethod
    def null_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("over18", mode="before")
    @classmethod
    def null_to_false(cls, v):
        return False if v is None else v
