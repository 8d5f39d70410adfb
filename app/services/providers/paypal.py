"""PayPal adapter: hosted PayPal.me checkout, webhook keyed by webhook id."""

from typing import Any, Dict

from app.services.donation_config import is_valid_donation_url
from app.services.providers.base import PaymentIntent, PaymentIntentRequest, SharedSecretProvider, create_provider_ref


class PaypalProvider(SharedSecretProvider):
    name = "paypal"
    label = "PayPal"
    signature_headers = ("paypal-transmission-sig",)
    secret_setting = "PAYPAL_WEBHOOK_ID"
    STATUS_MAP = {
        "COMPLETED": "paid",
        "PENDING": "pending",
        "FAILED": "failed",
        "VOIDED": "failed",
        "DECLINED": "failed",
        "REFUNDED": "refunded",
    }
    DEFAULT_STATUS = "created"
    case_insensitive_status = False

    def extract(self, payload: Dict[str, Any]) -> tuple:
        resource = payload.get("resource")
        if not isinstance(resource, dict):
            resource = {}
        return payload.get("id"), resource.get("id"), resource.get("status")

    async def create_intent(self, request: PaymentIntentRequest) -> PaymentIntent:
        paypal_me = (self.settings().PAYPAL_ME_URL or "").strip()
        if not is_valid_donation_url(self.name, paypal_me):
            return PaymentIntent(
                provider_ref=create_provider_ref(self.name),
                status="created",
                message="PayPal link is not configured.",
            )

        return PaymentIntent(
            provider_ref=create_provider_ref(self.name),
            status="created",
            checkout_url=paypal_me,
            message=f"Hosted PayPal checkout initialized for {request.currency.upper()} {request.amount}.",
        )
