"""Pydantic schemas for request/response validation."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

_HTTP_URL = TypeAdapter(HttpUrl)


class DonationMethod(str, Enum):
    BUYMEACOFFEE = "buymeacoffee"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    MPESA = "mpesa"
    AIRTM = "airtm"
    BANK = "bank"


class DonationStatus(str, Enum):
    CREATED = "created"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    DISPUTED = "disputed"


class DonationMode(str, Enum):
    HOSTED = "hosted"
    API = "api"


class CamelModel(BaseModel):
    """Base for payloads exchanged with the web client (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


# --- Method configuration ---
class DonationMethodConfig(CamelModel):
    method: DonationMethod
    label: str
    enabled: bool
    hosted_url: Optional[str] = None
    description: str


class BankInstructions(CamelModel):
    bank_name: str = ""
    account_name: str = ""
    account_number: str = ""
    swift_code: str = ""
    reference_note: str = ""


class PaymentMethodsResponse(CamelModel):
    mode: DonationMode
    methods: List[DonationMethodConfig]
    bank: BankInstructions


# --- Intent creation ---
class DonationIntentCreate(CamelModel):
    """Body of POST /payments/create-intent."""

    provider: DonationMethod
    amount: int = Field(default=5, gt=0)
    currency: str = Field(default="USD")
    donor_name: Optional[str] = Field(default=None, max_length=120)
    donor_email: Optional[EmailStr] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("donor_name", "donor_email", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        v = v.strip()
        if not 3 <= len(v) <= 6:
            raise ValueError("Currency must be 3 to 6 characters")
        return v


class DonationIntentResponse(CamelModel):
    ok: bool = True
    mode: DonationMode
    provider: DonationMethod
    provider_ref: str
    status: DonationStatus
    checkout_url: Optional[str] = None
    tracking_saved: bool
    message: str = ""


# --- Webhooks ---
class WebhookAckResponse(BaseModel):
    ok: bool = True
    duplicate: Optional[bool] = None
    processed: Optional[bool] = None


# --- Manual bank transfer ---
class BankProofSubmit(CamelModel):
    """Body of POST /payments/bank/submit-proof."""

    provider_ref: str = Field(..., min_length=3)
    transfer_reference: str = Field(..., min_length=3, max_length=120)
    amount: Optional[int] = Field(default=None, gt=0)
    currency: Optional[str] = None
    proof_url: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("provider_ref", "transfer_reference", "proof_url", "notes", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("proof_url")
    @classmethod
    def validate_proof_url(cls, v: Optional[str]) -> Optional[str]:
        """Must parse as an http(s) URL; the donor's text is kept as sent."""
        if not v:
            return None
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError:
            raise ValueError("Proof URL must be a valid http(s) URL")
        return v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not 3 <= len(v) <= 6:
            raise ValueError("Currency must be 3 to 6 characters")
        return v.upper()


class BankProofResponse(CamelModel):
    ok: bool = True
    provider_ref: str
    status: DonationStatus
