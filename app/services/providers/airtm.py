"""Airtm adapter, pending API approval."""

from app.services.providers.base import PaymentIntent, PaymentIntentRequest, SharedSecretProvider, create_provider_ref


class AirtmProvider(SharedSecretProvider):
    name = "airtm"
    label = "Airtm"
    secret_setting = "AIRTM_WEBHOOK_SECRET"
    STATUS_MAP = {"paid": "paid", "pending": "pending"}
    DEFAULT_STATUS = "failed"

    async def create_intent(self, request: PaymentIntentRequest) -> PaymentIntent:
        return PaymentIntent(
            provider_ref=create_provider_ref(self.name),
            status="created",
            message="Airtm API flow is not configured yet. Enable after Airtm API approval.",
        )
