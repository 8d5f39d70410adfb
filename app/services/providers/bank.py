"""Manual bank transfer: always pending until proof is reviewed."""

from app.services.providers.base import PaymentIntent, PaymentIntentRequest, SharedSecretProvider, create_provider_ref


class BankTransferProvider(SharedSecretProvider):
    name = "bank"
    label = "bank"
    secret_setting = "BANK_TRANSFER_REFERENCE_SECRET"
    STATUS_MAP = {"paid": "paid", "failed": "failed"}
    DEFAULT_STATUS = "pending"

    async def create_intent(self, request: PaymentIntentRequest) -> PaymentIntent:
        return PaymentIntent(
            provider_ref=create_provider_ref(self.name),
            status="pending",
            message=f"Manual bank transfer flow initialized for {request.currency.upper()} {request.amount}.",
        )
