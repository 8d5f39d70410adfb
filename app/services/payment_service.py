"""Payment provider registry (one adapter per donation method)."""

from typing import Dict

from app.schemas import DonationMethod
from app.services.providers.airtm import AirtmProvider
from app.services.providers.bank import BankTransferProvider
from app.services.providers.base import PaymentProvider
from app.services.providers.buymeacoffee import BuyMeACoffeeProvider
from app.services.providers.mpesa import MpesaProvider
from app.services.providers.paypal import PaypalProvider
from app.services.providers.stripe import StripeProvider

PROVIDERS: Dict[str, PaymentProvider] = {
    DonationMethod.BUYMEACOFFEE.value: BuyMeACoffeeProvider(),
    DonationMethod.PAYPAL.value: PaypalProvider(),
    DonationMethod.STRIPE.value: StripeProvider(),
    DonationMethod.MPESA.value: MpesaProvider(),
    DonationMethod.AIRTM.value: AirtmProvider(),
    DonationMethod.BANK.value: BankTransferProvider(),
}


def get_payment_provider(method: str) -> PaymentProvider:
    """Raises KeyError for an unregistered method."""
    if isinstance(method, DonationMethod):
        method = method.value
    return PROVIDERS[method]
