"""Webhook event ledger: at-most-once application per (provider, event_id)."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import PaymentWebhookEvent

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def claim_webhook_event(db: AsyncSession, provider: str, event_id: str) -> bool:
    """Insert the event if absent. False means it was already processed.

    The unique (provider, event_id) index decides the winner when the same
    delivery arrives concurrently.
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise RuntimeError(f"Unsupported store dialect for webhook ledger: {dialect}")

    stmt = (
        insert(PaymentWebhookEvent)
        .values(provider=provider, event_id=event_id, processed_at=datetime.utcnow())
        .on_conflict_do_nothing(index_elements=["provider", "event_id"])
        .returning(PaymentWebhookEvent.id)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none() is not None


async def find_webhook_event(
    db: AsyncSession,
    provider: str,
    event_id: str,
) -> Optional[PaymentWebhookEvent]:
    result = await db.execute(
        select(PaymentWebhookEvent).where(
            PaymentWebhookEvent.provider == provider,
            PaymentWebhookEvent.event_id == event_id,
        )
    )
    return result.scalar_one_or_none()
