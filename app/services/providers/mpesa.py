"""M-Pesa adapter. The STK push API is not wired up yet."""

from app.services.providers.base import PaymentIntent, PaymentIntentRequest, SharedSecretProvider, create_provider_ref


class MpesaProvider(SharedSecretProvider):
    name = "mpesa"
    label = "M-Pesa"
    secret_setting = "MPESA_WEBHOOK_SECRET"
    STATUS_MAP = {"paid": "paid", "pending": "pending"}
    DEFAULT_STATUS = "failed"

    async def create_intent(self, request: PaymentIntentRequest) -> PaymentIntent:
        return PaymentIntent(
            provider_ref=create_provider_ref(self.name),
            status="created",
            message="M-Pesa API flow is not configured yet. Set MPESA_* server env vars to enable.",
        )
