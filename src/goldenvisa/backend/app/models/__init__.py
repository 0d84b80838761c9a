"""Typed input snapshot and result models shared across the fee services.

Each calculation receives an explicit, frozen :class:`CalculationInput` and
returns a fresh :class:`Breakdown`. Inputs are Pydantic models so that
structural problems are rejected when the snapshot is built, while results are
slotted dataclasses holding exact ``Decimal`` amounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from goldenvisa.backend.config.fee_config import available_profiles
from goldenvisa.backend.config.schema import TierConfig

from .api import (
    MAX_CUSTOM_PRICE,
    MAX_FAMILY_COUNT,
    AdditionalBreakdown,
    BreakdownSections,
    CalculationRequest,
    CalculationResponse,
    ChartEntry,
    ExcludedFee,
    FamilyInput,
    FeeLine,
    OptionsInput,
    PermitBreakdown,
    PropertyBreakdown,
    ResponseMeta,
    Summary,
    SummaryLabels,
    TierSummary,
    format_validation_error,
    parse_amount,
)

__all__ = [
    "InvalidInput",
    "CalculationInput",
    "FeeAmount",
    "PropertyCosts",
    "PermitCosts",
    "AdditionalCosts",
    "ChartSlice",
    "Breakdown",
    "CHART_ORDER",
    "AdditionalBreakdown",
    "BreakdownSections",
    "CalculationRequest",
    "CalculationResponse",
    "ChartEntry",
    "ExcludedFee",
    "FamilyInput",
    "FeeLine",
    "OptionsInput",
    "PermitBreakdown",
    "PropertyBreakdown",
    "ResponseMeta",
    "Summary",
    "SummaryLabels",
    "TierSummary",
    "MAX_CUSTOM_PRICE",
    "MAX_FAMILY_COUNT",
    "format_validation_error",
    "parse_amount",
]

ZERO = Decimal("0")

CHART_ORDER: tuple[str, ...] = (
    "purchase_price",
    "transfer_tax",
    "professional_fees",
    "government_registration",
    "permit_and_cards",
    "health_and_translation",
    "additional_total",
)


class InvalidInput(ValueError):
    """Raised when a calculation input snapshot is structurally invalid."""


class CalculationInput(BaseModel):
    """Validated, immutable input for a single fee calculation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    tier_id: str
    custom_price: Decimal | None = Field(default=None, ge=0, le=MAX_CUSTOM_PRICE)
    adults: int = Field(default=1, ge=1, le=MAX_FAMILY_COUNT)
    children_15_plus: int = Field(default=0, ge=0, le=MAX_FAMILY_COUNT)
    children_under_15: int = Field(default=0, ge=0, le=MAX_FAMILY_COUNT)
    minors: int = Field(default=0, ge=0, le=MAX_FAMILY_COUNT)
    express_processing: bool = False
    power_of_attorney: bool = False
    max_health_insurance: bool = False
    locale: str = "en"
    profile: str | None = None

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise InvalidInput(format_validation_error(exc)) from exc

    @field_validator("custom_price", mode="before")
    @classmethod
    def _parse_custom_price(cls, value: Any) -> Decimal | None:
        return parse_amount(value)

    @field_validator("profile")
    @classmethod
    def _check_profile(cls, value: str | None) -> str | None:
        if value is not None and value not in available_profiles():
            raise ValueError(f"Unknown fee profile '{value}'")
        return value

    @model_validator(mode="after")
    def _check_children_variant(self) -> CalculationInput:
        if self.minors and (self.children_15_plus or self.children_under_15):
            raise ValueError(
                "Provide either 'minors' or the split children counts, not both"
            )
        return self

    @property
    def children(self) -> int:
        return self.minors + self.children_15_plus + self.children_under_15

    @property
    def total_family_members(self) -> int:
        return self.adults + self.children

    @property
    def dependents(self) -> int:
        return self.total_family_members - 1

    @property
    def effective_custom_price(self) -> Decimal | None:
        if self.custom_price is None or self.custom_price <= 0:
            return None
        return self.custom_price


@dataclass(frozen=True, slots=True)
class FeeAmount:
    """Fee line expressed as base, VAT and VAT-inclusive total."""

    base: Decimal
    vat: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.base + self.vat


@dataclass(frozen=True, slots=True)
class PropertyCosts:
    transfer_tax: Decimal
    consultancy: FeeAmount
    notary: FeeAmount
    lawyer: FeeAmount
    government_registration: Decimal

    @property
    def professional_fees(self) -> Decimal:
        return self.consultancy.total + self.notary.total + self.lawyer.total

    @property
    def total(self) -> Decimal:
        return self.transfer_tax + self.professional_fees + self.government_registration


@dataclass(frozen=True, slots=True)
class PermitCosts:
    application_prep: Decimal
    main_card: Decimal
    dependent_cards: Decimal
    health_insurance: Decimal
    translation: Decimal
    express_fee: Decimal

    @property
    def permit_and_cards(self) -> Decimal:
        return self.application_prep + self.main_card + self.dependent_cards + self.express_fee

    @property
    def health_and_translation(self) -> Decimal:
        return self.health_insurance + self.translation

    @property
    def total(self) -> Decimal:
        return self.permit_and_cards + self.health_and_translation


@dataclass(frozen=True, slots=True)
class AdditionalCosts:
    """Ancillary services; ``legal_check_fee`` is informational and excluded from ``total``."""

    bank_account_tax_number: Decimal
    power_of_attorney_fee: Decimal
    legal_check_fee: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.bank_account_tax_number + self.power_of_attorney_fee


@dataclass(frozen=True, slots=True)
class ChartSlice:
    """Named aggregate used for proportional rendering."""

    key: str
    value: Decimal


@dataclass(frozen=True, slots=True)
class Breakdown:
    """Complete, immutable result of one fee calculation."""

    tier: TierConfig
    profile_id: str
    purchase_price: Decimal
    property: PropertyCosts
    permit: PermitCosts
    additional: AdditionalCosts
    total_family_members: int
    dependents: int
    chart_series: tuple[ChartSlice, ...]
    tier_fallback: bool = False

    @property
    def property_and_acquisition(self) -> Decimal:
        return self.purchase_price + self.property.total

    @property
    def grand_total(self) -> Decimal:
        return (
            self.purchase_price
            + self.property.total
            + self.permit.total
            + self.additional.total
        )
