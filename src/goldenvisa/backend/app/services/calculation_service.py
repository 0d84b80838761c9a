"""Orchestrate request validation, normalisation, and fee calculations.

The calculation service ties together the shared request models, the
translation layer and the YAML fee profiles so that each calculator module can
focus on its own arithmetic. :func:`compute` is the pure fee engine; it reads no
files and never raises for a validated :class:`CalculationInput`.
:func:`calculate_costs` is the entry point used by the HTTP layer and turns a
raw payload into a localised, JSON-ready response.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from decimal import Decimal
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from goldenvisa.backend.app.localization import Translator, get_translator
from goldenvisa.backend.app.models import (
    Breakdown,
    CalculationInput,
    CalculationRequest,
    CalculationResponse,
    FeeAmount,
    InvalidInput,
    format_validation_error,
)
from goldenvisa.backend.config.fee_config import (
    FeeProfile,
    TierCatalogue,
    TierConfig,
    load_tiers,
    resolve_fee_profile,
)

from .calculators import (
    build_chart_series,
    calculate_additional_costs,
    calculate_permit_costs,
    calculate_property_costs,
    round_currency,
    round_rate,
)

_LOGGER = logging.getLogger(__name__)

_PROPERTY_LABEL_KEYS = (
    "purchase_price",
    "transfer_tax",
    "consultancy",
    "notary",
    "lawyer",
    "government_registration",
    "total",
)
_PERMIT_LABEL_KEYS = (
    "application_prep",
    "main_card",
    "dependent_cards",
    "health_insurance",
    "translation",
    "express_fee",
    "total",
)
_ADDITIONAL_LABEL_KEYS = ("bank_account_tax_number", "power_of_attorney_fee", "total")
_SUMMARY_LABEL_KEYS = (
    "purchase_price",
    "property_total",
    "property_and_acquisition",
    "permit_total",
    "additional_total",
    "grand_total",
    "total_family_members",
)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("GOLDENVISA_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _resolve_tier(tier_id: str, tiers: TierCatalogue) -> tuple[TierConfig, bool]:
    tier = tiers.get(tier_id)
    if tier is not None:
        return tier, False

    fallback = tiers.default_tier
    _LOGGER.warning(
        "Unknown investment tier %r; falling back to %s", tier_id, fallback.id
    )
    return fallback, True


def _purchase_price(payload: CalculationInput, tier: TierConfig) -> Decimal:
    custom_price = payload.effective_custom_price
    if custom_price is None:
        return tier.min_investment
    return max(custom_price, tier.min_investment)


def compute(
    payload: CalculationInput,
    profile: FeeProfile | None = None,
    tiers: TierCatalogue | None = None,
) -> Breakdown:
    """Return the itemised fee breakdown for ``payload``.

    ``profile`` and ``tiers`` default to the configured fee profile (honouring
    ``payload.profile``) and the bundled tier catalogue. An unknown tier id
    resolves to the first tier and flags the result with ``tier_fallback``.
    """

    profile = profile or resolve_fee_profile(payload.profile)
    tiers = tiers or load_tiers()

    tier, tier_fallback = _resolve_tier(payload.tier_id, tiers)
    purchase_price = _purchase_price(payload, tier)

    property_costs = calculate_property_costs(purchase_price, profile)
    permit_costs = calculate_permit_costs(payload, profile)
    additional_costs = calculate_additional_costs(payload, profile)

    return Breakdown(
        tier=tier,
        profile_id=profile.id,
        purchase_price=purchase_price,
        property=property_costs,
        permit=permit_costs,
        additional=additional_costs,
        total_family_members=payload.total_family_members,
        dependents=payload.dependents,
        chart_series=build_chart_series(
            purchase_price, property_costs, permit_costs, additional_costs
        ),
        tier_fallback=tier_fallback,
    )


def _validate_request(payload: Mapping[str, Any] | CalculationRequest) -> CalculationRequest:
    if isinstance(payload, CalculationRequest):
        source: Any = payload.model_dump(mode="python")
    elif isinstance(payload, Mapping):
        source = payload
    else:
        raise InvalidInput("Payload must be a mapping")

    try:
        return CalculationRequest.model_validate(source)
    except ValidationError as exc:
        raise InvalidInput(format_validation_error(exc)) from exc


def _normalise_payload(request: CalculationRequest, tiers: TierCatalogue) -> CalculationInput:
    family = request.family
    options = request.options

    children_fields: dict[str, int] = {}
    if family.minors is not None:
        children_fields["minors"] = family.minors
    if family.children_15_plus or family.children_under_15 or family.minors is None:
        children_fields["children_15_plus"] = family.children_15_plus
        children_fields["children_under_15"] = family.children_under_15

    return CalculationInput(
        tier_id=request.tier_id or tiers.default_tier.id,
        custom_price=request.custom_price,
        adults=family.adults,
        express_processing=options.express_processing,
        power_of_attorney=options.power_of_attorney,
        max_health_insurance=options.max_health_insurance,
        locale=request.locale,
        profile=request.profile,
        **children_fields,
    )


def _labels(translator: Translator, section: str, keys: tuple[str, ...]) -> dict[str, str]:
    return {key: translator(f"{section}.{key}") for key in keys}


def _fee_line(amount: FeeAmount) -> dict[str, float]:
    return {
        "base": round_currency(amount.base),
        "vat": round_currency(amount.vat),
        "total": round_currency(amount.total),
    }


def localise_tier(tier: TierConfig, translator: Translator) -> dict[str, Any]:
    """Return the tier description using catalogue text where available."""

    def _text(field: str, default: str) -> str:
        key = f"tiers.{tier.id}.{field}"
        value = translator(key)
        return default if value == key else value

    return {
        "id": tier.id,
        "label": _text("label", tier.label),
        "subtitle": _text("subtitle", tier.subtitle),
        "description": _text("description", tier.description),
        "min_investment": round_currency(tier.min_investment),
    }


def _chart_payload(breakdown: Breakdown, translator: Translator) -> list[dict[str, Any]]:
    grand_total = breakdown.grand_total
    entries: list[dict[str, Any]] = []
    for entry in breakdown.chart_series:
        share = entry.value / grand_total if grand_total > 0 else Decimal("0")
        entries.append(
            {
                "key": entry.key,
                "label": translator(f"chart.{entry.key}"),
                "value": round_currency(entry.value),
                "share": round_rate(share),
            }
        )
    return entries


def _not_included_payload(
    breakdown: Breakdown, translator: Translator
) -> list[dict[str, Any]]:
    legal_check = breakdown.additional.legal_check_fee
    if legal_check <= 0:
        return []
    return [
        {
            "key": "legal_check",
            "label": translator("not_included.legal_check"),
            "amount": round_currency(legal_check),
        }
    ]


def build_response(
    breakdown: Breakdown, translator: Translator, currency: str = "EUR"
) -> dict[str, Any]:
    """Serialise ``breakdown`` into the localised API response payload."""

    property_costs = breakdown.property
    permit_costs = breakdown.permit
    additional_costs = breakdown.additional

    summary = {
        "purchase_price": round_currency(breakdown.purchase_price),
        "property_total": round_currency(property_costs.total),
        "property_and_acquisition": round_currency(breakdown.property_and_acquisition),
        "permit_total": round_currency(permit_costs.total),
        "additional_total": round_currency(additional_costs.total),
        "grand_total": round_currency(breakdown.grand_total),
        "total_family_members": breakdown.total_family_members,
        "dependents": breakdown.dependents,
        "labels": _labels(translator, "summary", _SUMMARY_LABEL_KEYS),
    }

    sections = {
        "property": {
            "purchase_price": round_currency(breakdown.purchase_price),
            "transfer_tax": round_currency(property_costs.transfer_tax),
            "consultancy": _fee_line(property_costs.consultancy),
            "notary": _fee_line(property_costs.notary),
            "lawyer": _fee_line(property_costs.lawyer),
            "government_registration": round_currency(
                property_costs.government_registration
            ),
            "total": round_currency(property_costs.total),
            "labels": _labels(translator, "property", _PROPERTY_LABEL_KEYS),
        },
        "permit": {
            "application_prep": round_currency(permit_costs.application_prep),
            "main_card": round_currency(permit_costs.main_card),
            "dependent_cards": round_currency(permit_costs.dependent_cards),
            "health_insurance": round_currency(permit_costs.health_insurance),
            "translation": round_currency(permit_costs.translation),
            "express_fee": round_currency(permit_costs.express_fee),
            "total": round_currency(permit_costs.total),
            "labels": _labels(translator, "permit", _PERMIT_LABEL_KEYS),
        },
        "additional": {
            "bank_account_tax_number": round_currency(
                additional_costs.bank_account_tax_number
            ),
            "power_of_attorney_fee": round_currency(
                additional_costs.power_of_attorney_fee
            ),
            "total": round_currency(additional_costs.total),
            "labels": _labels(translator, "additional", _ADDITIONAL_LABEL_KEYS),
        },
    }

    response_model = CalculationResponse.model_validate(
        {
            "summary": summary,
            "tier": localise_tier(breakdown.tier, translator),
            "breakdown": sections,
            "chart": _chart_payload(breakdown, translator),
            "not_included": _not_included_payload(breakdown, translator),
            "meta": {
                "locale": translator.locale,
                "profile": breakdown.profile_id,
                "currency": currency,
                "tier_fallback": breakdown.tier_fallback,
            },
        }
    )

    return response_model.model_dump(mode="json", exclude_none=True)


def calculate_costs(
    payload: Mapping[str, Any] | CalculationRequest,
) -> dict[str, Any]:
    """Compute the localised cost breakdown for the provided payload."""

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("validate_request", timings):
        request_model = _validate_request(payload)

    with _profile_section("load_configuration", timings):
        tiers = load_tiers()
        try:
            profile = resolve_fee_profile(request_model.profile)
        except FileNotFoundError as exc:
            raise InvalidInput(f"Unknown fee profile '{request_model.profile}'") from exc

    with _profile_section("normalise_payload", timings):
        normalised = _normalise_payload(request_model, tiers)

    translator = get_translator(normalised.locale)

    with _profile_section("compute", timings):
        breakdown = compute(normalised, profile, tiers)

    with _profile_section("build_response", timings):
        response = build_response(breakdown, translator, profile.currency)

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_costs timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    return response


__all__ = ["build_response", "calculate_costs", "compute", "localise_tier"]
