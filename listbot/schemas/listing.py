from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


PropertyType = Literal["house", "apartment", "warehouse", "office", "other"]

CURRENCIES = ("USD", "EUR", "GBP", "ETB", "KES", "UGX")

MAX_AMOUNT_DIGITS = 15

PROPERTY_TYPE_LABELS: dict[str, str] = {
    "house": "House",
    "apartment": "Apartment",
    "warehouse": "Warehouse",
    "office": "Office",
    "other": "Other",
}


def _normalize_amount(v: Any) -> str:
    if isinstance(v, bool):
        raise ValueError("amount must be a number")
    s = str(v).strip()
    try:
        amount = Decimal(s)
    except InvalidOperation:
        raise ValueError(f"'{s}' is not a valid amount")
    if not amount.is_finite():
        raise ValueError("amount must be finite")
    if amount < 0:
        raise ValueError("amount must be >= 0")
    if amount and amount.adjusted() >= MAX_AMOUNT_DIGITS:
        raise ValueError(f"amount must have at most {MAX_AMOUNT_DIGITS} integer digits")
    return s


class ListingRecord(BaseModel):
    """
    A rent listing as the listings backend (and the listing form) sends it.

    Read-only here; unknown backend fields are ignored.
    """
    model_config = ConfigDict(extra="ignore")

    id: int | str | None = None

    property_type: PropertyType = "other"
    property_type_other: str | None = Field(default=None, max_length=120)

    description: str = Field(default="", max_length=10_000)
    location: str = Field(default="", max_length=300)

    bedrooms: int = Field(default=0, ge=0, le=100)
    bathrooms: int = Field(default=0, ge=0, le=100)

    amenities: list[str] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)

    monthly_rent: str = Field(description="Decimal amount as a string, e.g. '1500' or '1500.00'.")
    currency: str = "USD"
    initial_deposit: str | None = None
    negotiable: bool = False

    phone_number: str | None = Field(default=None, max_length=40)

    @field_validator("property_type", mode="before")
    @classmethod
    def normalize_property_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or "other"
        return v

    @field_validator("monthly_rent", mode="before")
    @classmethod
    def validate_rent(cls, v: Any) -> str:
        return _normalize_amount(v)

    @field_validator("initial_deposit", mode="before")
    @classmethod
    def validate_deposit(cls, v: Any) -> str | None:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return _normalize_amount(v)

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        v2 = v.strip().upper()
        if v2 not in CURRENCIES:
            raise ValueError(f"currency must be one of {', '.join(CURRENCIES)}")
        return v2

    @field_validator("amenities", "photos", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("description", "location", mode="before")
    @classmethod
    def none_as_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def property_type_label(self) -> str:
        if self.property_type_other and self.property_type_other.strip():
            return self.property_type_other.strip()
        return PROPERTY_TYPE_LABELS.get(self.property_type, self.property_type)

    @property
    def listing_id(self) -> str | None:
        if self.id is None or self.id == "":
            return None
        return str(self.id)


class PostListingOut(BaseModel):
    success: bool
    messageId: int | None = None
    skipped: bool | None = None
    error: str | None = None
