"""
Notification relay endpoints - voice alert and email on new submissions.

Both POST endpoints sit behind the relay guard (relay key when configured,
per-client rate limit).
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse
import logging

from app.core.exceptions import RelayError
from app.dependencies import require_relay_access
from app.models.notification import AlertResponse, EmailRequest, RelayMessage
from app.services.email_service import get_email_service
from app.services.telephony_service import get_telephony_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Relay"])


@router.get("/", response_class=PlainTextResponse)
def hello():
    """Liveness probe."""
    return "Hello World"


@router.post("/alert", response_model=AlertResponse, dependencies=[Depends(require_relay_access)])
def place_alert():
    """
    Place the voice alert call.

    Returns the provider's call id; 502 if the call could not be placed.
    """
    call_id = get_telephony_service().place_alert_call()
    return AlertResponse(call_id=call_id)


@router.post(
    "/send-email",
    response_model=RelayMessage,
    responses={500: {"model": RelayMessage}},
    dependencies=[Depends(require_relay_access)],
)
def send_email(request: EmailRequest):
    """
    Send the notification email (subject "Emergency Report: {title}").

    Failure detail is logged only; the caller gets a generic 500 message.
    """
    try:
        get_email_service().send_report_email(request.title, request.content)
    except RelayError as e:
        logger.error(f"Error sending email: {e.message}")
        return JSONResponse(status_code=500, content={"message": "Failed to send report"})

    return RelayMessage(message="Report sent successfully")
