"""Inbound payment provider webhooks."""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError

from app.database import (
    STORE_NOT_CONFIGURED_DETAIL,
    STORE_UNAVAILABLE_DETAIL,
    get_sessionmaker,
    is_store_configured,
    is_store_connection_error,
)
from app.schemas import WebhookAckResponse
from app.services.donation_service import WEBHOOK_PROVIDERS, reconcile_webhook

router = APIRouter(prefix="/payments/webhooks", tags=["webhooks"])
logger = logging.getLogger(__name__)


@router.post("/{provider}", response_model=WebhookAckResponse, response_model_exclude_none=True)
async def provider_webhook(provider: str, request: Request):
    """
    Verify a provider callback against its shared secret, record the event id
    once, and apply the reported status to the tracked donation.
    """
    if provider not in WEBHOOK_PROVIDERS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported webhook provider.")

    if not is_store_configured():
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_NOT_CONFIGURED_DETAIL)

    # Signature checks need the body exactly as sent
    raw_body = (await request.body()).decode("utf-8", errors="replace")

    try:
        async with get_sessionmaker()() as db:
            return await reconcile_webhook(db, provider, raw_body, request.headers)
    except HTTPException:
        raise
    except (SQLAlchemyError, OSError) as exc:
        if is_store_connection_error(exc):
            logger.error("Store unreachable while processing %s webhook: %s", provider, exc)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE_DETAIL)
        logger.exception("Webhook processing failed for %s: %s", provider, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to process webhook right now.",
        )
