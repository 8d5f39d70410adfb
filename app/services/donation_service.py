"""Donation intent creation, webhook reconciliation and bank proof submission."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_sessionmaker, is_store_configured
from app.models import DonationTransaction
from app.schemas import (
    BankProofResponse,
    BankProofSubmit,
    DonationIntentCreate,
    DonationIntentResponse,
    DonationMethod,
    DonationMode,
    DonationStatus,
    WebhookAckResponse,
)
from app.services.donation_config import DonationConfig
from app.services.idempotency_service import claim_webhook_event
from app.services.payment_service import get_payment_provider
from app.services.providers.base import PaymentIntentRequest, create_provider_ref

logger = logging.getLogger(__name__)

WEBHOOK_PROVIDERS = frozenset({
    DonationMethod.PAYPAL.value,
    DonationMethod.STRIPE.value,
    DonationMethod.MPESA.value,
    DonationMethod.AIRTM.value,
    DonationMethod.BANK.value,
})


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def get_transaction_for_update(
    db: AsyncSession,
    provider: str,
    provider_ref: str,
) -> Optional[DonationTransaction]:
    result = await db.execute(
        select(DonationTransaction)
        .where(
            DonationTransaction.provider == provider,
            DonationTransaction.provider_ref == provider_ref,
        )
        .with_for_update()
    )
    return result.scalar_one_or_none()


async def record_transaction(
    *,
    user_id: Optional[str],
    provider: str,
    provider_ref: str,
    status_value: str,
    payload: DonationIntentCreate,
) -> bool:
    """Persist the tracking row. Returns False instead of raising on any store failure."""
    if not is_store_configured():
        return False

    try:
        async with get_sessionmaker()() as db:
            db.add(
                DonationTransaction(
                    user_id=user_id,
                    amount=payload.amount,
                    currency=payload.currency.upper(),
                    provider=provider,
                    status=status_value,
                    provider_ref=provider_ref,
                    donor_email=payload.donor_email or "",
                    donor_name=payload.donor_name or "",
                    metadata_json=payload.metadata or {},
                    webhook_events=[],
                )
            )
            await db.commit()
        return True
    except Exception as exc:
        logger.warning("Donation tracking not saved for %s %s: %s", provider, provider_ref, exc)
        return False


async def create_donation_intent(
    payload: DonationIntentCreate,
    config: DonationConfig,
    user_id: Optional[str] = None,
) -> DonationIntentResponse:
    mode = config.mode
    provider = payload.provider
    method_config = config.method_config(provider)
    if method_config is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported payment provider.")

    provider_ref = create_provider_ref(provider)
    checkout_url: Optional[str] = None
    status_value = DonationStatus.CREATED.value
    message = ""

    if mode == DonationMode.HOSTED.value:
        checkout_url = config.hosted_url(provider)
        if provider == DonationMethod.BANK.value:
            status_value = DonationStatus.PENDING.value
            message = "Manual bank transfer initialized."
        elif not checkout_url:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{method_config.label} is not configured yet.",
            )
    else:
        adapter = get_payment_provider(provider)
        try:
            intent = await adapter.create_intent(
                PaymentIntentRequest(
                    amount=payload.amount,
                    currency=payload.currency,
                    donor_email=payload.donor_email,
                    donor_name=payload.donor_name,
                    metadata=payload.metadata or {},
                )
            )
        except Exception as exc:
            logger.exception("Payment intent creation failed for %s: %s", provider, exc)
            message = f"{method_config.label} is unavailable right now. Please try again later."
        else:
            provider_ref = intent.provider_ref or provider_ref
            checkout_url = intent.checkout_url
            status_value = intent.status
            message = intent.message or ""

    tracking_saved = await record_transaction(
        user_id=user_id,
        provider=provider,
        provider_ref=provider_ref,
        status_value=status_value,
        payload=payload,
    )

    return DonationIntentResponse(
        mode=mode,
        provider=provider,
        provider_ref=provider_ref,
        status=status_value,
        checkout_url=checkout_url,
        tracking_saved=tracking_saved,
        message=message,
    )


async def reconcile_webhook(
    db: AsyncSession,
    provider: str,
    raw_body: str,
    headers: Mapping[str, str],
) -> WebhookAckResponse:
    """Verify, deduplicate and apply one provider webhook delivery."""
    adapter = get_payment_provider(provider)
    try:
        verified = await adapter.verify_webhook(raw_body, headers)
    except Exception as exc:
        logger.exception("Webhook verification raised for %s: %s", provider, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Webhook payload could not be verified.",
        )

    if not verified.ok or not verified.event_id:
        logger.warning("Rejected %s webhook: %s", provider, verified.message or "no event id")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=verified.message or "Invalid webhook payload.",
        )

    claimed = await claim_webhook_event(db, provider, verified.event_id)
    if not claimed:
        await db.rollback()
        logger.info("Duplicate %s webhook event %s ignored", provider, verified.event_id)
        return WebhookAckResponse(duplicate=True)

    if verified.provider_ref and verified.status:
        tx = await get_transaction_for_update(db, provider, verified.provider_ref)
        if tx is None:
            logger.info("No tracked %s transaction for %s; event recorded only", provider, verified.provider_ref)
        else:
            tx.status = verified.status
            tx.metadata_json = {
                "webhookPayload": verified.payload or {},
                "lastWebhookAt": _utc_now_iso(),
            }
            events = list(tx.webhook_events or [])
            if verified.event_id not in events:
                tx.webhook_events = events + [verified.event_id]

    await db.commit()
    return WebhookAckResponse(processed=True)


async def submit_bank_proof(
    db: AsyncSession,
    payload: BankProofSubmit,
    user_id: Optional[str] = None,
) -> BankProofResponse:
    tx = await get_transaction_for_update(db, DonationMethod.BANK.value, payload.provider_ref)
    if tx is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bank transaction was not found.")

    proof: Dict[str, Any] = {
        "transferReference": payload.transfer_reference,
        "proofUrl": payload.proof_url or "",
        "notes": payload.notes or "",
        "submittedAt": _utc_now_iso(),
        "amount": payload.amount,
        "currency": payload.currency,
        "submittedByUserId": user_id,
    }
    tx.status = DonationStatus.PENDING.value
    tx.metadata_json = {**(tx.metadata_json or {}), **proof}
    await db.commit()

    return BankProofResponse(provider_ref=tx.provider_ref, status=tx.status)
