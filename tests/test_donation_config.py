import logging

from app.config import Settings
from app.services.donation_config import (
    DonationConfig,
    InvalidUrlWarnings,
    get_donation_mode,
    is_valid_donation_url,
)


def _config(**values):
    return DonationConfig(Settings(_env_file=None, **values), InvalidUrlWarnings())


def _by_method(config):
    return {m.method: m for m in config.method_configs()}


def test_donation_mode_defaults_to_hosted():
    assert get_donation_mode(Settings(_env_file=None)) == "hosted"


def test_donation_mode_accepts_api_in_any_case():
    assert get_donation_mode(Settings(_env_file=None, DONATION_MODE="api")) == "api"
    assert get_donation_mode(Settings(_env_file=None, DONATION_MODE=" API ")) == "api"
    assert get_donation_mode(Settings(_env_file=None, DONATION_MODE="live")) == "hosted"


def test_is_valid_donation_url_requires_https_and_allowed_host():
    assert is_valid_donation_url("stripe", "https://buy.stripe.com/abc")
    assert is_valid_donation_url("stripe", "https://checkout.stripe.com/c/pay")
    assert not is_valid_donation_url("stripe", "http://buy.stripe.com/abc")
    assert not is_valid_donation_url("stripe", "https://stripe.com.evil.example/abc")
    assert is_valid_donation_url("paypal", "https://paypal.me/productivityhub")
    assert is_valid_donation_url("paypal", "https://WWW.PayPal.com/donate")
    assert not is_valid_donation_url("paypal", "https://buymeacoffee.com/x")
    assert is_valid_donation_url("buymeacoffee", "  https://www.buymeacoffee.com/team  ")
    assert is_valid_donation_url("airtm", "https://airtm.com/me")
    assert not is_valid_donation_url("buymeacoffee", "")
    assert not is_valid_donation_url("buymeacoffee", "not a url")


def test_bank_and_mpesa_never_have_valid_hosted_urls():
    for value in ["https://buy.stripe.com/abc", "https://bank.example/pay", ""]:
        assert not is_valid_donation_url("bank", value)
        assert not is_valid_donation_url("mpesa", value)


def test_method_configs_enable_valid_hosted_urls():
    config = _config(
        BUY_ME_A_COFFEE_URL="https://buymeacoffee.com/productivityhub",
        PAYPAL_ME_URL="https://paypal.me/productivityhub",
        STRIPE_PAYMENT_LINK="https://buy.stripe.com/test_123",
    )
    methods = _by_method(config)

    assert [m.method for m in config.method_configs()] == [
        "buymeacoffee", "paypal", "stripe", "mpesa", "airtm", "bank",
    ]
    assert methods["buymeacoffee"].enabled is True
    assert methods["paypal"].hosted_url == "https://paypal.me/productivityhub"
    assert methods["stripe"].enabled is True
    assert methods["mpesa"].enabled is False
    assert methods["airtm"].enabled is False
    assert methods["bank"].enabled is True
    assert methods["bank"].hosted_url is None


def test_invalid_hosted_url_disables_method():
    methods = _by_method(_config(PAYPAL_ME_URL="http://example.com/paypal"))

    assert methods["paypal"].enabled is False
    assert methods["paypal"].hosted_url is None


def test_has_any_enabled_is_true_through_bank():
    config = _config()

    assert config.has_any_enabled() is True
    assert [m.method for m in config.method_configs() if m.enabled] == ["bank"]


def test_invalid_url_is_warned_once_per_process(caplog):
    warnings = InvalidUrlWarnings()
    settings = Settings(_env_file=None, STRIPE_PAYMENT_LINK="https://evil.example/pay")

    with caplog.at_level(logging.WARNING, logger="app.services.donation_config"):
        DonationConfig(settings, warnings).method_configs()
        DonationConfig(settings, warnings).method_configs()
    assert len([r for r in caplog.records if "Invalid donation URL" in r.getMessage()]) == 1

    caplog.clear()
    warnings.reset()
    with caplog.at_level(logging.WARNING, logger="app.services.donation_config"):
        DonationConfig(settings, warnings).method_configs()
    assert len([r for r in caplog.records if "Invalid donation URL" in r.getMessage()]) == 1


def test_invalid_url_is_not_warned_in_production(caplog):
    settings = Settings(_env_file=None, ENVIRONMENT="production", STRIPE_PAYMENT_LINK="http://buy.stripe.com/x")

    with caplog.at_level(logging.WARNING, logger="app.services.donation_config"):
        DonationConfig(settings, InvalidUrlWarnings()).method_configs()
    assert not [r for r in caplog.records if "Invalid donation URL" in r.getMessage()]


def test_bank_instructions_default_reference_note():
    bank = _config(BANK_NAME=" Equity Bank ", BANK_SWIFT="EQBLKENA").bank_instructions()

    assert bank.bank_name == "Equity Bank"
    assert bank.swift_code == "EQBLKENA"
    assert bank.account_number == ""
    assert bank.reference_note == "Use your email as transfer reference."
