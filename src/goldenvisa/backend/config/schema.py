"""Pydantic models describing the fee profile configuration schema."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Literal, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _coerce_decimal(value: Any) -> Decimal:
    """Convert YAML scalars into exact decimals without float artefacts."""

    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ConfigurationError("Monetary values and rates must be numeric")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ConfigurationError(f"Invalid numeric value: {value!r}") from exc


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in {0, "0", "false", "False", None}:
        return False
    if value in {1, "1", "true", "True"}:
        return True
    raise ConfigurationError("Boolean flags must be explicit true/false values")


class TierConfig(ImmutableModel):
    """Investment zone with its minimum qualifying property price."""

    id: str
    label: str
    subtitle: str = ""
    min_investment: Decimal
    description: str = ""

    @field_validator("min_investment", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return _coerce_decimal(value)

    @model_validator(mode="after")
    def _validate_values(self) -> TierConfig:
        if not self.id.strip():
            raise ConfigurationError("Tier identifiers must be non-empty")
        if self.min_investment <= 0:
            raise ConfigurationError("Tier minimum investments must be positive")
        return self


class TierCatalogue(ImmutableModel):
    """Ordered collection of tiers; the first entry is the fallback tier."""

    tiers: Sequence[TierConfig]

    @field_validator("tiers", mode="before")
    @classmethod
    def _coerce_tiers(cls, value: Any) -> Sequence[Any]:
        if isinstance(value, Iterable) and not isinstance(value, (str, Mapping)):
            return tuple(value)
        raise ConfigurationError("Tier catalogue must define 'tiers' as a list")

    @model_validator(mode="after")
    def _validate_tiers(self) -> TierCatalogue:
        if not self.tiers:
            raise ConfigurationError("At least one tier must be defined")
        seen: set[str] = set()
        for tier in self.tiers:
            if tier.id in seen:
                raise ConfigurationError(f"Duplicate tier identifier '{tier.id}'")
            seen.add(tier.id)
        return self

    @property
    def default_tier(self) -> TierConfig:
        return self.tiers[0]

    def get(self, tier_id: str | None) -> TierConfig | None:
        for tier in self.tiers:
            if tier.id == tier_id:
                return tier
        return None

    @computed_field
    @property
    def tier_ids(self) -> tuple[str, ...]:
        return tuple(tier.id for tier in self.tiers)


class ProfessionalFeeConfig(ImmutableModel):
    """Percentage-of-price fee with optional VAT on top of the base."""

    rate: Decimal
    apply_vat: bool = True

    @field_validator("rate", mode="before")
    @classmethod
    def _coerce_rate(cls, value: Any) -> Decimal:
        return _coerce_decimal(value)

    @field_validator("apply_vat", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return _coerce_boolean(value)

    @model_validator(mode="after")
    def _validate_rate(self) -> ProfessionalFeeConfig:
        if self.rate < 0:
            raise ConfigurationError("Professional fee rates must be non-negative")
        return self


class PropertyFeeConfig(ImmutableModel):
    """Rates applied to the purchase price during acquisition."""

    transfer_tax: Decimal
    consultancy: ProfessionalFeeConfig
    notary: ProfessionalFeeConfig
    lawyer: ProfessionalFeeConfig
    government_registration: Decimal

    @field_validator("transfer_tax", "government_registration", mode="before")
    @classmethod
    def _coerce_rates(cls, value: Any) -> Decimal:
        return _coerce_decimal(value)

    @model_validator(mode="after")
    def _validate_rates(self) -> PropertyFeeConfig:
        if self.transfer_tax < 0 or self.government_registration < 0:
            raise ConfigurationError("Property rates must be non-negative")
        return self


class DependentCardConfig(ImmutableModel):
    """Per-dependent residence card pricing policy."""

    mode: Literal["flat", "age_banded"]
    per_dependent: Decimal | None = None
    child_15_plus: Decimal | None = None
    child_under_15: Decimal | None = None
    additional_adult: Decimal = Decimal("0")

    @field_validator(
        "per_dependent",
        "child_15_plus",
        "child_under_15",
        "additional_adult",
        mode="before",
    )
    @classmethod
    def _coerce_amounts(cls, value: Any) -> Decimal | None:
        if value is None:
            return None
        return _coerce_decimal(value)

    @model_validator(mode="after")
    def _validate_policy(self) -> Self:
        if self.mode == "flat":
            if self.per_dependent is None:
                raise ConfigurationError(
                    "Flat dependent card pricing requires 'per_dependent'"
                )
        elif self.child_15_plus is None or self.child_under_15 is None:
            raise ConfigurationError(
                "Age-banded dependent card pricing requires 'child_15_plus' and "
                "'child_under_15'"
            )
        for amount in (
            self.per_dependent,
            self.child_15_plus,
            self.child_under_15,
            self.additional_adult,
        ):
            if amount is not None and amount < 0:
                raise ConfigurationError("Dependent card fees must be non-negative")
        return self


class HealthInsuranceConfig(ImmutableModel):
    """Per-person health insurance premiums."""

    standard: Decimal
    premium: Decimal

    @field_validator("standard", "premium", mode="before")
    @classmethod
    def _coerce_amounts(cls, value: Any) -> Decimal:
        return _coerce_decimal(value)

    @model_validator(mode="after")
    def _validate_amounts(self) -> HealthInsuranceConfig:
        if self.standard < 0 or self.premium < 0:
            raise ConfigurationError("Health insurance rates must be non-negative")
        return self

    def rate(self, premium: bool) -> Decimal:
        return self.premium if premium else self.standard


class PermitFeeConfig(ImmutableModel):
    """Fixed residence permit costs."""

    application_prep: Decimal
    main_card: Decimal
    dependent_cards: DependentCardConfig
    health_insurance: HealthInsuranceConfig
    translation: Decimal
    express_processing: Decimal

    @field_validator(
        "application_prep",
        "main_card",
        "translation",
        "express_processing",
        mode="before",
    )
    @classmethod
    def _coerce_amounts(cls, value: Any) -> Decimal:
        return _coerce_decimal(value)

    @model_validator(mode="after")
    def _validate_amounts(self) -> PermitFeeConfig:
        for amount in (
            self.application_prep,
            self.main_card,
            self.translation,
            self.express_processing,
        ):
            if amount < 0:
                raise ConfigurationError("Permit fees must be non-negative")
        return self


class AdditionalFeeConfig(ImmutableModel):
    """Ancillary service fees."""

    bank_account_tax_number: Decimal
    power_of_attorney: Decimal
    power_of_attorney_apply_vat: bool = True
    legal_check: Decimal = Decimal("0")

    @field_validator(
        "bank_account_tax_number", "power_of_attorney", "legal_check", mode="before"
    )
    @classmethod
    def _coerce_amounts(cls, value: Any) -> Decimal:
        return _coerce_decimal(value)

    @field_validator("power_of_attorney_apply_vat", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return _coerce_boolean(value)

    @model_validator(mode="after")
    def _validate_amounts(self) -> AdditionalFeeConfig:
        if min(self.bank_account_tax_number, self.power_of_attorney, self.legal_check) < 0:
            raise ConfigurationError("Additional fees must be non-negative")
        return self


class FeeProfile(ImmutableModel):
    """Complete fee schedule for one calculation policy."""

    id: str
    description: str = ""
    currency: str = "EUR"
    vat_rate: Decimal
    acquisition: PropertyFeeConfig
    permit: PermitFeeConfig
    additional: AdditionalFeeConfig
    meta: Mapping[str, Any] = Field(default_factory=dict)

    @field_validator("vat_rate", mode="before")
    @classmethod
    def _coerce_vat(cls, value: Any) -> Decimal:
        return _coerce_decimal(value)

    @model_validator(mode="before")
    @classmethod
    def _default_meta(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Fee profile must define a mapping at the top level")
        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")
        return prepared

    @model_validator(mode="after")
    def _validate_profile(self) -> FeeProfile:
        if self.vat_rate < 0:
            raise ConfigurationError("VAT rate must be non-negative")
        if self.currency != "EUR":
            raise ConfigurationError("Only EUR fee profiles are supported")
        return self

    def with_vat(self, base: Decimal, apply_vat: bool = True) -> tuple[Decimal, Decimal]:
        """Return ``(vat, total)`` for ``base`` under this profile's VAT rate."""

        vat = base * self.vat_rate if apply_vat else Decimal("0")
        return vat, base + vat


class FeeProfileManifestEntry(ImmutableModel):
    """Entry describing an available fee profile in the manifest."""

    id: str
    filename: str | None = None
    status: str = "active"

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.id}.yaml"


class FeeManifest(ImmutableModel):
    """Manifest describing the available fee profiles and tier data."""

    default_profile: str
    tiers_file: str = "tiers.yaml"
    profiles: Sequence[FeeProfileManifestEntry]

    @model_validator(mode="after")
    def _validate_profiles(self) -> FeeManifest:
        seen: set[str] = set()
        for entry in self.profiles:
            if entry.id in seen:
                raise ConfigurationError(
                    f"Duplicate profile {entry.id} declared in the configuration manifest"
                )
            seen.add(entry.id)
        if self.default_profile not in seen:
            raise ConfigurationError(
                f"Default profile '{self.default_profile}' is not declared in the manifest"
            )
        return self

    def get_entry(self, profile_id: str) -> FeeProfileManifestEntry:
        for entry in self.profiles:
            if entry.id == profile_id:
                return entry
        raise KeyError(profile_id)

    @computed_field
    @property
    def profile_ids(self) -> tuple[str, ...]:
        return tuple(entry.id for entry in self.profiles)


__all__ = [
    "AdditionalFeeConfig",
    "ConfigurationError",
    "DependentCardConfig",
    "FeeManifest",
    "FeeProfile",
    "FeeProfileManifestEntry",
    "HealthInsuranceConfig",
    "ImmutableModel",
    "PermitFeeConfig",
    "ProfessionalFeeConfig",
    "PropertyFeeConfig",
    "TierCatalogue",
    "TierConfig",
    "ValidationError",
]
