import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from eventhub.application.dev_tools import latest_dev_otp, recent_dev_emails
from eventhub.domain.errors import DevModeDisabled
from eventhub.domain.otp import OtpService
from eventhub.infrastructure.email.dev_mailbox import DevMailbox
from eventhub.presentation.dependencies import (
    get_dev_mailbox,
    get_dev_mode,
    get_otp_service,
)
from eventhub.schemas.responses import DevEmailOut, DevOtpOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth/dev", tags=["Development Utils"])

DEV_ONLY = "This endpoint is only available in development mode"


@router.get("/latest-otp/{email}", response_model=DevOtpOut)
async def get_latest_otp(
    email: str,
    otp: Annotated[OtpService, Depends(get_otp_service)],
    mailbox: Annotated[DevMailbox, Depends(get_dev_mailbox)],
    dev_mode: Annotated[bool, Depends(get_dev_mode)],
):
    """[DEV ONLY] Latest OTP for an address."""
    try:
        code = await latest_dev_otp(otp, mailbox, email=email, dev_mode=dev_mode)
    except DevModeDisabled:
        logger.warning("dev endpoint refused", extra={"path": "latest-otp"})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=DEV_ONLY)
    return DevOtpOut(otp=code)


@router.get("/emails", response_model=list[DevEmailOut])
async def get_recent_emails(
    mailbox: Annotated[DevMailbox, Depends(get_dev_mailbox)],
    dev_mode: Annotated[bool, Depends(get_dev_mode)],
):
    """[DEV ONLY] Recently captured outgoing emails, newest first."""
    try:
        messages = recent_dev_emails(mailbox, dev_mode=dev_mode)
    except DevModeDisabled:
        logger.warning("dev endpoint refused", extra={"path": "emails"})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=DEV_ONLY)
    return [DevEmailOut.from_email(m) for m in messages]
