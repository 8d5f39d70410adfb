"""SQLAlchemy database models for donation tracking."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB

from app.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class DonationTransaction(Base):
    """One donation/payment attempt and its lifecycle status."""

    __tablename__ = "donation_transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), nullable=True, index=True)
    amount = Column(Integer, nullable=False)
    currency = Column(String(6), nullable=False, default="USD")
    provider = Column(String(20), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="created", index=True)  # see DonationStatus
    provider_ref = Column(String(255), nullable=False, index=True)
    donor_email = Column(String(255), nullable=False, default="")
    donor_name = Column(String(120), nullable=False, default="")
    metadata_json = Column("metadata", JSONType, nullable=False, default=dict)
    webhook_events = Column(JSONType, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("provider", "provider_ref", name="uq_donation_provider_ref"),
        Index("idx_donation_user_created", "user_id", "created_at"),
    )


class PaymentWebhookEvent(Base):
    """Append-only ledger of webhook events already applied, per provider."""

    __tablename__ = "payment_webhook_events"

    id = Column(Integer, primary_key=True, index=True)
    provider = Column(String(20), nullable=False, index=True)
    event_id = Column(String(255), nullable=False)
    processed_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("provider", "event_id", name="uq_webhook_provider_event"),
    )
