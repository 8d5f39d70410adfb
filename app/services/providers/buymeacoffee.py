"""Buy Me a Coffee: hosted link only, no webhooks."""

from typing import Mapping

from app.services.donation_config import is_valid_donation_url
from app.services.providers.base import (
    PaymentIntent,
    PaymentIntentRequest,
    PaymentProvider,
    WebhookVerification,
    create_provider_ref,
)


class BuyMeACoffeeProvider(PaymentProvider):
    name = "buymeacoffee"

    async def create_intent(self, request: PaymentIntentRequest) -> PaymentIntent:
        url = (self.settings().BUY_ME_A_COFFEE_URL or "").strip()
        return PaymentIntent(
            provider_ref=create_provider_ref(self.name),
            status="created",
            checkout_url=url if is_valid_donation_url(self.name, url) else None,
        )

    async def verify_webhook(self, raw_body: str, headers: Mapping[str, str]) -> WebhookVerification:
        return WebhookVerification(ok=False, message="Buy Me a Coffee webhook not configured in this app.")
