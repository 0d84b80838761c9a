"""Pydantic models describing the public API surface."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

__all__ = [
    "FamilyInput",
    "OptionsInput",
    "CalculationRequest",
    "FeeLine",
    "PropertyBreakdown",
    "PermitBreakdown",
    "AdditionalBreakdown",
    "BreakdownSections",
    "ChartEntry",
    "ExcludedFee",
    "TierSummary",
    "SummaryLabels",
    "Summary",
    "ResponseMeta",
    "CalculationResponse",
    "MAX_CUSTOM_PRICE",
    "MAX_FAMILY_COUNT",
    "format_validation_error",
    "parse_amount",
]


MAX_CUSTOM_PRICE = Decimal("1000000000000")
MAX_FAMILY_COUNT = 99


def parse_amount(value: Any) -> Decimal | None:
    """Parse a user-entered amount, returning ``None`` when it is blank or non-numeric."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    if not amount.is_finite():
        return None
    return amount


def _clamp_count(value: Any, minimum: int) -> int:
    if value is None or value == "":
        return minimum
    if isinstance(value, bool):
        raise ValueError("Family counts must be whole numbers")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError("Family counts must be whole numbers") from exc
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError("Family counts must be whole numbers")
    return max(minimum, int(number))


class FamilyInput(BaseModel):
    """Family composition supplied by the user.

    Counts are clamped the same way the calculator form clamps them: at least
    one adult (the main applicant) and never fewer than zero children.
    """

    model_config = ConfigDict(extra="forbid")

    adults: int = Field(default=1, ge=1, le=MAX_FAMILY_COUNT)
    children_15_plus: int = Field(default=0, ge=0, le=MAX_FAMILY_COUNT)
    children_under_15: int = Field(default=0, ge=0, le=MAX_FAMILY_COUNT)
    minors: int | None = Field(default=None, ge=0, le=MAX_FAMILY_COUNT)

    @field_validator("adults", mode="before")
    @classmethod
    def _clamp_adults(cls, value: Any) -> int:
        return _clamp_count(value, 1)

    @field_validator("children_15_plus", "children_under_15", mode="before")
    @classmethod
    def _clamp_children(cls, value: Any) -> int:
        return _clamp_count(value, 0)

    @field_validator("minors", mode="before")
    @classmethod
    def _clamp_minors(cls, value: Any) -> int | None:
        if value is None:
            return None
        return _clamp_count(value, 0)


class OptionsInput(BaseModel):
    """Optional service toggles."""

    model_config = ConfigDict(extra="forbid")

    express_processing: bool = False
    power_of_attorney: bool = False
    max_health_insurance: bool = False

    @field_validator(
        "express_processing",
        "power_of_attorney",
        "max_health_insurance",
        mode="before",
    )
    @classmethod
    def _normalise_optional_bool(cls, value: Any) -> Any:
        if value is None:
            return False
        return value


class CalculationRequest(BaseModel):
    """Complete payload accepted by the calculation endpoint."""

    model_config = ConfigDict(extra="forbid")

    tier_id: str | None = None
    custom_price: Decimal | None = Field(default=None, le=MAX_CUSTOM_PRICE)
    locale: str = Field(default="en")
    profile: str | None = None
    family: FamilyInput = Field(default_factory=FamilyInput)
    options: OptionsInput = Field(default_factory=OptionsInput)

    @field_validator("tier_id", "profile", mode="before")
    @classmethod
    def _normalise_identifier(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("custom_price", mode="before")
    @classmethod
    def _normalise_custom_price(cls, value: Any) -> Decimal | None:
        amount = parse_amount(value)
        if amount is None or amount <= 0:
            return None
        return amount

    @field_validator("locale", mode="before")
    @classmethod
    def _normalise_locale(cls, value: Any) -> str:
        if value is None:
            return "en"
        text = str(value).strip()
        return text or "en"

    @field_validator("family", "options", mode="before")
    @classmethod
    def _default_sections(cls, value: Any) -> Any:
        return {} if value is None else value


class FeeLine(BaseModel):
    """Professional fee split into its base amount and VAT."""

    model_config = ConfigDict(extra="forbid")

    base: float
    vat: float
    total: float


class PropertyBreakdown(BaseModel):
    """Property acquisition costs."""

    model_config = ConfigDict(extra="forbid")

    purchase_price: float
    transfer_tax: float
    consultancy: FeeLine
    notary: FeeLine
    lawyer: FeeLine
    government_registration: float
    total: float
    labels: dict[str, str]


class PermitBreakdown(BaseModel):
    """Residence permit costs."""

    model_config = ConfigDict(extra="forbid")

    application_prep: float
    main_card: float
    dependent_cards: float
    health_insurance: float
    translation: float
    express_fee: float
    total: float
    labels: dict[str, str]


class AdditionalBreakdown(BaseModel):
    """Ancillary service costs."""

    model_config = ConfigDict(extra="forbid")

    bank_account_tax_number: float
    power_of_attorney_fee: float
    total: float
    labels: dict[str, str]


class BreakdownSections(BaseModel):
    """Itemised cost sections."""

    model_config = ConfigDict(extra="forbid")

    property: PropertyBreakdown
    permit: PermitBreakdown
    additional: AdditionalBreakdown


class ChartEntry(BaseModel):
    """Single slice of the proportional cost chart."""

    model_config = ConfigDict(extra="forbid")

    key: str
    label: str
    value: float
    share: float


class ExcludedFee(BaseModel):
    """Fee that may apply but is left out of every total."""

    model_config = ConfigDict(extra="forbid")

    key: str
    label: str
    amount: float


class TierSummary(BaseModel):
    """Localised description of the selected investment tier."""

    model_config = ConfigDict(extra="forbid")

    id: str
    label: str
    subtitle: str
    description: str
    min_investment: float


class SummaryLabels(BaseModel):
    """Localized labels for summary fields."""

    model_config = ConfigDict(extra="forbid")

    purchase_price: str
    property_total: str
    property_and_acquisition: str
    permit_total: str
    additional_total: str
    grand_total: str
    total_family_members: str


class Summary(BaseModel):
    """Aggregated calculation results."""

    model_config = ConfigDict(extra="forbid")

    purchase_price: float
    property_total: float
    property_and_acquisition: float
    permit_total: float
    additional_total: float
    grand_total: float
    total_family_members: int
    dependents: int
    labels: SummaryLabels


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    locale: str
    profile: str
    currency: str
    tier_fallback: bool = False


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    summary: Summary
    tier: TierSummary
    breakdown: BreakdownSections
    chart: list[ChartEntry]
    not_included: list[ExcludedFee] = Field(default_factory=list)
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        elif "greater than or equal to 1" in message.lower():
            message = "at least one adult (the main applicant) is required"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
