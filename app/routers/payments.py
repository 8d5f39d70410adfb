"""Donor-facing payment endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.core.rate_limit import payment_rate_limit
from app.database import (
    STORE_NOT_CONFIGURED_DETAIL,
    STORE_UNAVAILABLE_DETAIL,
    get_sessionmaker,
    is_store_configured,
    is_store_connection_error,
)
from app.dependencies import get_donation_config, get_request_user_id
from app.schemas import (
    BankProofResponse,
    BankProofSubmit,
    DonationIntentCreate,
    DonationIntentResponse,
    PaymentMethodsResponse,
)
from app.services.donation_config import DonationConfig
from app.services.donation_service import create_donation_intent, submit_bank_proof

router = APIRouter(prefix="/payments", tags=["payments"])
logger = logging.getLogger(__name__)


@router.get("/methods", response_model=PaymentMethodsResponse)
async def list_payment_methods(config: DonationConfig = Depends(get_donation_config)):
    """Donation mode, every method with its availability, and bank transfer details."""
    return PaymentMethodsResponse(
        mode=config.mode,
        methods=config.method_configs(),
        bank=config.bank_instructions(),
    )


@router.post(
    "/create-intent",
    response_model=DonationIntentResponse,
    dependencies=[Depends(payment_rate_limit)],
)
async def create_intent(
    payload: DonationIntentCreate,
    config: DonationConfig = Depends(get_donation_config),
    user_id: Optional[str] = Depends(get_request_user_id),
):
    return await create_donation_intent(payload, config, user_id=user_id)


@router.post(
    "/bank/submit-proof",
    response_model=BankProofResponse,
    dependencies=[Depends(payment_rate_limit)],
)
async def bank_submit_proof(
    payload: BankProofSubmit,
    user_id: Optional[str] = Depends(get_request_user_id),
):
    """Attach transfer proof to a manual bank donation and mark it pending review."""
    if not is_store_configured():
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_NOT_CONFIGURED_DETAIL)

    try:
        async with get_sessionmaker()() as db:
            return await submit_bank_proof(db, payload, user_id=user_id)
    except HTTPException:
        raise
    except (SQLAlchemyError, OSError) as exc:
        if is_store_connection_error(exc):
            logger.error("Store unreachable during bank proof submission: %s", exc)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE_DETAIL)
        logger.exception("Bank proof submission failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to submit proof right now.",
        )
