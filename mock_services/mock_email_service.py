"""
mock_email_service.py — Mock Implementation of the Email Provider (Mailgun REST API)

This module simulates Mailgun's messages endpoint so the ticket service can be
run and tested without sending real email. Accepted messages are kept in memory.

Simulation Scenarios:
    • Recipient address ending in "@bounce.example.com" → 400 rejected
    • Anything else → 200 queued

Endpoints:
    POST /v3/{domain}/messages

Port:
    Default: 8002 (HTTP)
"""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

app = FastAPI(title="Mock Email Service")
log = logging.getLogger(__name__)

SENT_MESSAGES = []


def reset():
    SENT_MESSAGES.clear()


@app.post("/v3/{domain}/messages")
async def send_message(domain: str, request: Request):
    form = await request.form()
    recipient = form.get("to", "")
    if not recipient or recipient.rstrip(">").endswith("@bounce.example.com"):
        log.warning(f"[MAIL] Rejected message to {recipient!r}.")
        return JSONResponse(
            status_code=400,
            content={"message": "'to' parameter is not a valid address. please check documentation"},
        )

    message_id = f"<{uuid.uuid4().hex}@{domain}>"
    SENT_MESSAGES.append({"id": message_id, "domain": domain, **dict(form)})
    log.info(f"[MAIL] Queued {message_id} to {recipient}.")
    return {"id": message_id, "message": "Queued. Thank you."}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8002)
