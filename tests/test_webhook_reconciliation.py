import asyncio
import json

import pytest
from fastapi import HTTPException
from sqlalchemy import func, select

from app.models import DonationTransaction, PaymentWebhookEvent
from app.services.donation_service import reconcile_webhook
from app.services.idempotency_service import claim_webhook_event, find_webhook_event


async def _seed(session_factory, provider, provider_ref, status="created"):
    async with session_factory() as db:
        db.add(
            DonationTransaction(
                amount=5,
                currency="USD",
                provider=provider,
                provider_ref=provider_ref,
                status=status,
                metadata_json={"source": "test"},
                webhook_events=[],
            )
        )
        await db.commit()


async def _deliver(session_factory, provider, body, headers):
    async with session_factory() as db:
        return await reconcile_webhook(db, provider, json.dumps(body), headers)


async def _transaction(session_factory, provider, provider_ref):
    async with session_factory() as db:
        result = await db.execute(
            select(DonationTransaction).where(
                DonationTransaction.provider == provider,
                DonationTransaction.provider_ref == provider_ref,
            )
        )
        return result.scalar_one()


async def _event_count(session_factory):
    async with session_factory() as db:
        return (await db.execute(select(func.count()).select_from(PaymentWebhookEvent))).scalar_one()


STRIPE_PAID = {"id": "evt_1", "data": {"object": {"id": "stripe_abc", "status": "succeeded"}}}


def test_stripe_paid_webhook_updates_transaction(store, set_env):
    set_env(STRIPE_WEBHOOK_SECRET="whsec")
    headers = {"stripe-signature": "whsec"}

    async def scenario():
        await _seed(store, "stripe", "stripe_abc")
        ack = await _deliver(store, "stripe", STRIPE_PAID, headers)
        return ack, await _transaction(store, "stripe", "stripe_abc")

    ack, tx = asyncio.run(scenario())

    assert ack.processed is True
    assert tx.status == "paid"
    assert tx.webhook_events == ["evt_1"]
    assert tx.metadata_json["webhookPayload"] == STRIPE_PAID
    assert "lastWebhookAt" in tx.metadata_json
    assert "source" not in tx.metadata_json


def test_duplicate_event_is_applied_once(store, set_env):
    set_env(STRIPE_WEBHOOK_SECRET="whsec")
    headers = {"stripe-signature": "whsec"}
    refund = {"id": "evt_1", "data": {"object": {"id": "stripe_abc", "status": "canceled"}}}

    async def scenario():
        await _seed(store, "stripe", "stripe_abc")
        first = await _deliver(store, "stripe", STRIPE_PAID, headers)
        # same event id, different content: must not be applied
        second = await _deliver(store, "stripe", refund, headers)
        return first, second, await _transaction(store, "stripe", "stripe_abc"), await _event_count(store)

    first, second, tx, events = asyncio.run(scenario())

    assert first.processed is True
    assert second.duplicate is True
    assert second.processed is None
    assert tx.status == "paid"
    assert tx.webhook_events == ["evt_1"]
    assert events == 1


def test_invalid_signature_never_touches_store(store, set_env):
    set_env(BANK_TRANSFER_REFERENCE_SECRET="bank-secret")

    async def scenario():
        await _seed(store, "bank", "bank_1", status="pending")
        with pytest.raises(HTTPException) as exc_info:
            await _deliver(store, "bank", {"eventId": "evt-1", "providerRef": "bank_1", "status": "paid"},
                           {"x-provider-signature": "forged"})
        return exc_info.value, await _transaction(store, "bank", "bank_1"), await _event_count(store)

    error, tx, events = asyncio.run(scenario())

    assert error.status_code == 400
    assert error.detail == "Invalid bank webhook signature"
    assert tx.status == "pending"
    assert tx.webhook_events == []
    assert events == 0


def test_adapter_exception_becomes_verification_failure(store, monkeypatch):
    from app.services.payment_service import PROVIDERS

    async def boom(raw_body, headers):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(PROVIDERS["airtm"], "verify_webhook", boom)

    async def scenario():
        with pytest.raises(HTTPException) as exc_info:
            await _deliver(store, "airtm", {"eventId": "evt-1"}, {})
        return exc_info.value, await _event_count(store)

    error, events = asyncio.run(scenario())

    assert error.status_code == 400
    assert "secret internals" not in error.detail
    assert events == 0


def test_event_without_tracked_transaction_is_still_recorded(store, set_env):
    set_env(MPESA_WEBHOOK_SECRET="mpesa")

    async def scenario():
        ack = await _deliver(store, "mpesa", {"eventId": "evt-9", "providerRef": "mpesa_unknown", "status": "paid"},
                             {"x-provider-signature": "mpesa"})
        async with store() as db:
            event = await find_webhook_event(db, "mpesa", "evt-9")
        return ack, event

    ack, event = asyncio.run(scenario())

    assert ack.processed is True
    assert event is not None
    assert event.processed_at is not None


def test_same_event_id_is_scoped_per_provider(store):
    async def scenario():
        async with store() as db:
            first = await claim_webhook_event(db, "bank", "evt-1")
            other_provider = await claim_webhook_event(db, "mpesa", "evt-1")
            again = await claim_webhook_event(db, "bank", "evt-1")
            await db.commit()
        return first, other_provider, again

    assert asyncio.run(scenario()) == (True, True, False)


def test_concurrent_duplicate_deliveries_apply_once(store, set_env):
    set_env(BANK_TRANSFER_REFERENCE_SECRET="bank")
    headers = {"x-provider-signature": "bank"}
    body = {"eventId": "evt-1", "providerRef": "bank_1", "status": "paid"}

    async def scenario():
        await _seed(store, "bank", "bank_1", status="pending")
        acks = await asyncio.gather(
            _deliver(store, "bank", body, headers),
            _deliver(store, "bank", body, headers),
        )
        return acks, await _transaction(store, "bank", "bank_1"), await _event_count(store)

    acks, tx, events = asyncio.run(scenario())

    assert sorted([bool(a.processed), bool(a.duplicate)] for a in acks) == [[False, True], [True, False]]
    assert events == 1
    assert tx.status == "paid"
    assert tx.webhook_events == ["evt-1"]
