"""Stripe adapter: Payment Link checkout, webhook keyed by shared secret."""

from typing import Any, Dict

from app.services.donation_config import is_valid_donation_url
from app.services.providers.base import PaymentIntent, PaymentIntentRequest, SharedSecretProvider, create_provider_ref


class StripeProvider(SharedSecretProvider):
    name = "stripe"
    label = "Stripe"
    signature_headers = ("stripe-signature", "x-provider-signature")
    secret_setting = "STRIPE_WEBHOOK_SECRET"
    STATUS_MAP = {
        "succeeded": "paid",
        "processing": "pending",
        "requires_action": "pending",
        "canceled": "failed",
        "requires_payment_method": "failed",
    }
    DEFAULT_STATUS = "created"
    case_insensitive_status = False

    def extract(self, payload: Dict[str, Any]) -> tuple:
        data = payload.get("data")
        obj = data.get("object") if isinstance(data, dict) else None
        if not isinstance(obj, dict):
            obj = {}
        return payload.get("id"), obj.get("id"), obj.get("status")

    async def create_intent(self, request: PaymentIntentRequest) -> PaymentIntent:
        payment_link = (self.settings().STRIPE_PAYMENT_LINK or "").strip()
        if not is_valid_donation_url(self.name, payment_link):
            return PaymentIntent(
                provider_ref=create_provider_ref(self.name),
                status="created",
                message="Stripe payment link is not configured.",
            )

        return PaymentIntent(
            provider_ref=create_provider_ref(self.name),
            status="created",
            checkout_url=payment_link,
            message=f"Hosted Stripe checkout initialized for {request.currency.upper()} {request.amount}.",
        )
