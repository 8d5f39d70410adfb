"""Donation method availability, hosted checkout URLs and bank details."""

import logging
from typing import Dict, FrozenSet, List, Optional, Set, Tuple
from urllib.parse import urlsplit

from app.config import Settings
from app.schemas import BankInstructions, DonationMethod, DonationMethodConfig, DonationMode

logger = logging.getLogger(__name__)

URL_HOST_ALLOWLIST: Dict[str, FrozenSet[str]] = {
    DonationMethod.BUYMEACOFFEE.value: frozenset({"buymeacoffee.com", "www.buymeacoffee.com"}),
    DonationMethod.PAYPAL.value: frozenset({"paypal.com", "www.paypal.com", "paypal.me", "www.paypal.me"}),
    DonationMethod.STRIPE.value: frozenset({"buy.stripe.com", "checkout.stripe.com"}),
    DonationMethod.MPESA.value: frozenset(),
    DonationMethod.AIRTM.value: frozenset({"airtm.com", "www.airtm.com"}),
    DonationMethod.BANK.value: frozenset(),
}

# Manual-only and API-only methods never take a hosted URL
NO_HOSTED_URL = frozenset({DonationMethod.BANK.value, DonationMethod.MPESA.value})


def get_donation_mode(settings: Settings) -> str:
    raw = (settings.DONATION_MODE or "").strip().lower()
    return DonationMode.API.value if raw == DonationMode.API.value else DonationMode.HOSTED.value


def is_valid_donation_url(method: str, value: str) -> bool:
    """https URL whose host is on the method's allow-list."""
    trimmed = (value or "").strip()
    if not trimmed or method in NO_HOSTED_URL:
        return False

    try:
        parsed = urlsplit(trimmed)
        host = (parsed.hostname or "").lower()
    except ValueError:
        return False
    if parsed.scheme.lower() != "https":
        return False
    return host in URL_HOST_ALLOWLIST.get(method, frozenset())


class InvalidUrlWarnings:
    """Invalid hosted URLs already reported during this process."""

    def __init__(self) -> None:
        self._seen: Set[Tuple[str, str]] = set()

    def first_time(self, method: str, value: str) -> bool:
        key = (method, value)
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def reset(self) -> None:
        self._seen.clear()


class DonationConfig:
    """Resolves donation methods for one request from settings."""

    def __init__(self, settings: Settings, warnings: InvalidUrlWarnings):
        self.settings = settings
        self.warnings = warnings

    @property
    def mode(self) -> str:
        return get_donation_mode(self.settings)

    def _validated_url(self, method: str, raw: Optional[str]) -> Optional[str]:
        value = (raw or "").strip()
        if not value:
            return None
        if not is_valid_donation_url(method, value):
            if not self.settings.is_production and self.warnings.first_time(method, value):
                logger.warning("Invalid donation URL for %s. The method will be hidden.", method)
            return None
        return value

    def hosted_url(self, method: str) -> Optional[str]:
        if method == DonationMethod.BUYMEACOFFEE.value:
            return self._validated_url(method, self.settings.BUY_ME_A_COFFEE_URL)
        if method == DonationMethod.PAYPAL.value:
            return self._validated_url(method, self.settings.PAYPAL_ME_URL)
        if method == DonationMethod.STRIPE.value:
            return self._validated_url(method, self.settings.STRIPE_PAYMENT_LINK)
        return None

    def method_configs(self) -> List[DonationMethodConfig]:
        coffee = self.hosted_url(DonationMethod.BUYMEACOFFEE.value)
        paypal = self.hosted_url(DonationMethod.PAYPAL.value)
        stripe = self.hosted_url(DonationMethod.STRIPE.value)

        return [
            DonationMethodConfig(
                method=DonationMethod.BUYMEACOFFEE,
                label="Buy Me a Coffee",
                enabled=bool(coffee),
                hosted_url=coffee,
                description="Fast support checkout with card and wallet options.",
            ),
            DonationMethodConfig(
                method=DonationMethod.PAYPAL,
                label="PayPal",
                enabled=bool(paypal),
                hosted_url=paypal,
                description="Pay using PayPal balance or linked cards.",
            ),
            DonationMethodConfig(
                method=DonationMethod.STRIPE,
                label="Stripe",
                enabled=bool(stripe),
                hosted_url=stripe,
                description="Secure hosted card checkout via Stripe Payment Link.",
            ),
            DonationMethodConfig(
                method=DonationMethod.MPESA,
                label="M-Pesa",
                enabled=False,
                hosted_url=None,
                description="Planned API checkout for Kenya mobile payments.",
            ),
            DonationMethodConfig(
                method=DonationMethod.AIRTM,
                label="Airtm",
                enabled=False,
                hosted_url=None,
                description="Planned integration pending account/API approval.",
            ),
            DonationMethodConfig(
                method=DonationMethod.BANK,
                label="Local Bank Transfer",
                enabled=True,
                hosted_url=None,
                description="Manual transfer with payment proof submission.",
            ),
        ]

    def method_config(self, method: str) -> Optional[DonationMethodConfig]:
        for config in self.method_configs():
            if config.method == method:
                return config
        return None

    def has_any_enabled(self) -> bool:
        return any(m.enabled for m in self.method_configs())

    def bank_instructions(self) -> BankInstructions:
        s = self.settings
        return BankInstructions(
            bank_name=s.BANK_NAME.strip(),
            account_name=s.BANK_ACCOUNT_NAME.strip(),
            account_number=s.BANK_ACCOUNT_NUMBER.strip(),
            swift_code=s.BANK_SWIFT.strip(),
            reference_note=s.BANK_REFERENCE_NOTE.strip() or "Use your email as transfer reference.",
        )
