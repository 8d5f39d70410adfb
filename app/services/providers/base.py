"""Payment provider adapter contract.

Every provider answers two questions: how to start a payment attempt
(``create_intent``) and whether an inbound webhook is authentic and what it
says (``verify_webhook``). Providers with a shared-secret webhook only need
to declare their header, secret and status table; see ``SharedSecretProvider``.
"""

import hmac
import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from app.config import Settings, get_settings


@dataclass
class PaymentIntentRequest:
    amount: int
    currency: str
    donor_email: Optional[str] = None
    donor_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PaymentIntent:
    provider_ref: str
    status: str
    checkout_url: Optional[str] = None
    message: str = ""


@dataclass
class WebhookVerification:
    ok: bool
    event_id: Optional[str] = None
    provider_ref: Optional[str] = None
    status: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    message: str = ""


def create_provider_ref(provider: str) -> str:
    return f"{provider}_{uuid.uuid4().hex}"


def header_value(headers: Mapping[str, str], name: str) -> str:
    """Case-insensitive header lookup for plain dicts and Starlette headers alike."""
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if key.lower() == lowered:
                value = candidate
                break
    return (value or "").strip()


def secrets_match(expected: Optional[str], provided: str) -> bool:
    expected = (expected or "").strip()
    if not expected or not provided:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))


def parse_payload(raw_body: str) -> Optional[Dict[str, Any]]:
    try:
        payload = json.loads(raw_body)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


class PaymentProvider:
    name: str = ""

    def settings(self) -> Settings:
        return get_settings()

    async def create_intent(self, request: PaymentIntentRequest) -> PaymentIntent:
        raise NotImplementedError

    async def verify_webhook(self, raw_body: str, headers: Mapping[str, str]) -> WebhookVerification:
        raise NotImplementedError


class SharedSecretProvider(PaymentProvider):
    """Webhook verified by comparing a header against a configured shared secret."""

    label: str = ""
    signature_headers: tuple = ("x-provider-signature",)
    secret_setting: str = ""
    # Provider-native status -> DonationStatus; anything unmapped gets DEFAULT_STATUS
    STATUS_MAP: Dict[str, str] = {}
    DEFAULT_STATUS: str = "created"
    case_insensitive_status: bool = True

    def normalize_status(self, raw: Any) -> str:
        if not isinstance(raw, str):
            return self.DEFAULT_STATUS
        key = raw.lower() if self.case_insensitive_status else raw
        return self.STATUS_MAP.get(key, self.DEFAULT_STATUS)

    def extract(self, payload: Dict[str, Any]) -> tuple:
        """Return (event_id, provider_ref, native_status) from a parsed payload."""
        return payload.get("eventId"), payload.get("providerRef"), payload.get("status")

    def signature(self, headers: Mapping[str, str]) -> str:
        for name in self.signature_headers:
            value = header_value(headers, name)
            if value:
                return value
        return ""

    async def verify_webhook(self, raw_body: str, headers: Mapping[str, str]) -> WebhookVerification:
        secret = getattr(self.settings(), self.secret_setting, None)
        if not secrets_match(secret, self.signature(headers)):
            return WebhookVerification(ok=False, message=f"Invalid {self.label} webhook signature")

        payload = parse_payload(raw_body)
        if payload is None:
            return WebhookVerification(ok=False, message="Malformed webhook payload")

        event_id, provider_ref, native_status = self.extract(payload)
        if not isinstance(event_id, str) or not event_id:
            # No stable id: retried deliveries of this payload are not deduplicated
            event_id = f"{self.name}_evt_{uuid.uuid4()}"

        return WebhookVerification(
            ok=True,
            event_id=event_id,
            provider_ref=provider_ref if isinstance(provider_ref, str) and provider_ref else None,
            status=self.normalize_status(native_status),
            payload=payload,
        )
