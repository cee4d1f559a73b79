"""Support contact form endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from core.email import send_support_email
from core.ratelimit import check_rate_limit
from dependencies.auth import CurrentUserDep
from schemas.support import SupportEmailRequest, SupportEmailResponse


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/support", tags=["support"])


@router.post(
    "/email",
    summary="Send a message to support",
    response_model=SupportEmailResponse,
    dependencies=[Depends(check_rate_limit)],
    responses={
        401: {"description": "Authentication required"},
        502: {"description": "Email could not be sent"},
    },
)
def send_support_request(
    payload: SupportEmailRequest, current_user: CurrentUserDep
) -> SupportEmailResponse:
    """Forward the message to the support inbox, tagged with the sender.

    Declared sync so the blocking email client runs in the threadpool.
    """
    sender = current_user.email or current_user.id
    if not send_support_email(sender, payload.message):
        logger.error("Support email from user %s was not sent", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to send email",
        )
    return SupportEmailResponse(success=True)
