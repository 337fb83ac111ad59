"""
config.py — Environment Configuration for the Ticket Service

All settings are read once from environment variables at import time.
Defaults point at the public provider endpoints; credentials have no defaults.
"""

import os

# Stripe (payment provider)
STRIPE_API_URL = os.environ.get("STRIPE_API_URL", "https://api.stripe.com")
STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")
STRIPE_SKU = os.environ.get("STRIPE_SKU", "")

# Mailgun (email provider)
MAILGUN_API_URL = os.environ.get("MAILGUN_API_URL", "https://api.mailgun.net")
MAILGUN_DOMAIN = os.environ.get("MAILGUN_DOMAIN", "comp-soc.com")
MAILGUN_API_KEY = os.environ.get("MAILGUN_API_KEY", "")
MAILGUN_SENDER = os.environ.get("MAILGUN_SENDER", "Informatics Ball <infball@comp-soc.com>")
TICKET_EMAIL_SUBJECT = os.environ.get("TICKET_EMAIL_SUBJECT", "Your Informatics Ball Ticket")

LOG_FILE = os.environ.get("LOG_FILE", "infball_service.log")
