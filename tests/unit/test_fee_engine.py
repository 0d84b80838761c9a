"""Unit tests for the pure fee engine."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from goldenvisa.backend.app.models import (
    CHART_ORDER,
    MAX_CUSTOM_PRICE,
    MAX_FAMILY_COUNT,
    CalculationInput,
)
from goldenvisa.backend.app.services.calculation_service import compute
from goldenvisa.backend.app.services.calculators import (
    calculate_dependent_cards,
    round_currency,
)
from goldenvisa.backend.config.fee_config import load_fee_profile, load_tiers
from goldenvisa.backend.config.schema import DependentCardConfig


@pytest.fixture()
def age_banded():
    return load_fee_profile("age_banded")


@pytest.fixture()
def flat_rate():
    return load_fee_profile("flat_rate")


def _scenario_c(**overrides) -> CalculationInput:
    fields = {
        "tier_id": "tier-250",
        "custom_price": "500000",
        "adults": 2,
        "children_15_plus": 1,
        "children_under_15": 1,
        "express_processing": True,
        "power_of_attorney": True,
        "max_health_insurance": True,
    }
    fields.update(overrides)
    return CalculationInput(**fields)


def test_minimum_investment_without_options(age_banded) -> None:
    breakdown = compute(CalculationInput(tier_id="tier-400"), age_banded)

    assert breakdown.purchase_price == Decimal("400000")
    assert breakdown.property.transfer_tax == Decimal("12360")
    assert breakdown.property.government_registration == Decimal("3200")
    assert breakdown.property.consultancy.vat == Decimal("1920")
    assert breakdown.property.total == Decimal("35400")
    assert breakdown.permit.total == Decimal("4396")
    assert breakdown.permit.dependent_cards == 0
    assert breakdown.additional.total == Decimal("300")
    assert breakdown.grand_total == Decimal("440096")
    assert breakdown.tier_fallback is False


def test_custom_price_below_minimum_is_floored(age_banded) -> None:
    breakdown = compute(
        CalculationInput(tier_id="tier-400", custom_price=Decimal("300000")), age_banded
    )

    assert breakdown.purchase_price == Decimal("400000")
    assert breakdown.grand_total == Decimal("440096")


def test_custom_price_above_minimum_is_used(age_banded) -> None:
    breakdown = compute(
        CalculationInput(tier_id="tier-800", custom_price="950000"), age_banded
    )

    assert breakdown.purchase_price == Decimal("950000")


@pytest.mark.parametrize("price", [None, "", "abc", 0])
def test_absent_custom_price_uses_tier_minimum(age_banded, price) -> None:
    breakdown = compute(CalculationInput(tier_id="tier-800", custom_price=price), age_banded)

    assert breakdown.purchase_price == Decimal("800000")


def test_all_surcharges_with_age_banded_cards(age_banded) -> None:
    breakdown = compute(_scenario_c(), age_banded)

    assert breakdown.purchase_price == Decimal("500000")
    assert breakdown.property.total == Decimal("44250")
    assert breakdown.permit.dependent_cards == Decimal("166")
    assert breakdown.permit.health_insurance == Decimal("440")
    assert breakdown.permit.express_fee == Decimal("3000")
    assert breakdown.permit.total == Decimal("7922")
    assert breakdown.additional.power_of_attorney_fee == Decimal("248")
    assert breakdown.additional.total == Decimal("548")
    assert breakdown.grand_total == Decimal("552720")
    assert breakdown.total_family_members == 4
    assert breakdown.dependents == 3


def test_all_surcharges_with_flat_cards(flat_rate) -> None:
    breakdown = compute(_scenario_c(), flat_rate)

    assert breakdown.property.consultancy.vat == 0
    assert breakdown.property.total == Decimal("41850")
    assert breakdown.permit.dependent_cards == Decimal("498")
    assert breakdown.permit.total == Decimal("8254")
    assert breakdown.grand_total == Decimal("550652")
    assert breakdown.profile_id == "flat_rate"


def test_minors_are_charged_at_older_child_rate(age_banded) -> None:
    breakdown = compute(
        CalculationInput(tier_id="tier-400", adults=1, minors=2), age_banded
    )

    assert breakdown.permit.dependent_cards == Decimal("300")
    assert breakdown.total_family_members == 3


def test_minors_use_flat_fee_per_dependent(flat_rate) -> None:
    breakdown = compute(
        CalculationInput(tier_id="tier-400", adults=2, minors=2), flat_rate
    )

    assert breakdown.permit.dependent_cards == Decimal("498")


def test_additional_adults_have_no_card_fee_under_age_bands(age_banded) -> None:
    breakdown = compute(CalculationInput(tier_id="tier-400", adults=3), age_banded)

    assert breakdown.permit.dependent_cards == 0
    assert breakdown.permit.health_insurance == Decimal("240")


def test_grand_total_is_sum_of_sections(age_banded) -> None:
    breakdown = compute(_scenario_c(express_processing=False), age_banded)

    assert breakdown.grand_total == (
        breakdown.purchase_price
        + breakdown.property.total
        + breakdown.permit.total
        + breakdown.additional.total
    )
    assert breakdown.property_and_acquisition == (
        breakdown.purchase_price + breakdown.property.total
    )


@pytest.mark.parametrize("profile_id", ["age_banded", "flat_rate"])
def test_chart_series_partitions_grand_total(profile_id: str) -> None:
    breakdown = compute(_scenario_c(), load_fee_profile(profile_id))

    keys = [entry.key for entry in breakdown.chart_series]
    assert keys == list(CHART_ORDER)
    assert sum(entry.value for entry in breakdown.chart_series) == breakdown.grand_total


def test_chart_series_omits_zero_entries(age_banded) -> None:
    free_additional = age_banded.additional.model_copy(
        update={"bank_account_tax_number": Decimal("0")}
    )
    profile = age_banded.model_copy(update={"additional": free_additional})

    breakdown = compute(CalculationInput(tier_id="tier-400"), profile)

    keys = [entry.key for entry in breakdown.chart_series]
    assert "additional_total" not in keys
    assert all(entry.value > 0 for entry in breakdown.chart_series)


def test_toggles_only_add_their_own_fees(age_banded) -> None:
    base = compute(CalculationInput(tier_id="tier-400"), age_banded)
    express = compute(
        CalculationInput(tier_id="tier-400", express_processing=True), age_banded
    )
    attorney = compute(
        CalculationInput(tier_id="tier-400", power_of_attorney=True), age_banded
    )
    premium = compute(
        CalculationInput(tier_id="tier-400", max_health_insurance=True), age_banded
    )

    assert express.grand_total - base.grand_total == Decimal("3000")
    assert express.permit.express_fee == Decimal("3000")
    assert express.property == base.property
    assert express.additional == base.additional
    assert express.permit.health_and_translation == base.permit.health_and_translation

    assert attorney.grand_total - base.grand_total == Decimal("248")
    assert attorney.property == base.property
    assert attorney.permit == base.permit

    assert premium.grand_total - base.grand_total == Decimal("30")
    assert premium.property == base.property
    assert premium.additional == base.additional


@pytest.mark.parametrize(
    ("family", "members"),
    [
        ({"adults": 2}, 2),
        ({"adults": 2, "children_15_plus": 1, "children_under_15": 1}, 4),
        ({"adults": 1, "minors": 5}, 6),
    ],
)
def test_premium_health_scales_with_family_size(age_banded, family, members) -> None:
    standard = compute(CalculationInput(tier_id="tier-400", **family), age_banded)
    premium = compute(
        CalculationInput(tier_id="tier-400", max_health_insurance=True, **family),
        age_banded,
    )

    assert standard.permit.health_insurance == Decimal("80") * members
    assert premium.permit.health_insurance == Decimal("110") * members
    assert premium.grand_total - standard.grand_total == Decimal("30") * members
    assert premium.permit.dependent_cards == standard.permit.dependent_cards


def test_legal_check_fee_is_reported_but_not_counted(age_banded) -> None:
    breakdown = compute(CalculationInput(tier_id="tier-400"), age_banded)

    assert breakdown.additional.legal_check_fee == Decimal("150")
    assert breakdown.additional.total == Decimal("300")
    assert breakdown.grand_total == Decimal("440096")


def test_compute_handles_largest_accepted_inputs(age_banded) -> None:
    payload = CalculationInput(
        tier_id="tier-800",
        custom_price=MAX_CUSTOM_PRICE,
        adults=MAX_FAMILY_COUNT,
        children_15_plus=MAX_FAMILY_COUNT,
        children_under_15=MAX_FAMILY_COUNT,
        express_processing=True,
        power_of_attorney=True,
        max_health_insurance=True,
    )

    breakdown = compute(payload, age_banded)

    assert breakdown.purchase_price == MAX_CUSTOM_PRICE
    assert round_currency(breakdown.grand_total) > float(MAX_CUSTOM_PRICE)


def test_unknown_tier_falls_back_to_first_tier(age_banded, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        breakdown = compute(CalculationInput(tier_id="tier-999"), age_banded)

    assert breakdown.tier.id == load_tiers().tiers[0].id
    assert breakdown.purchase_price == Decimal("250000")
    assert breakdown.tier_fallback is True
    assert "tier-999" in caplog.text


def test_compute_uses_default_profile_when_none_given(monkeypatch) -> None:
    monkeypatch.delenv("GOLDENVISA_FEE_PROFILE", raising=False)

    breakdown = compute(CalculationInput(tier_id="tier-400"))

    assert breakdown.profile_id == "age_banded"


def test_compute_honours_profile_named_in_input() -> None:
    breakdown = compute(_scenario_c(profile="flat_rate"))

    assert breakdown.profile_id == "flat_rate"
    assert breakdown.grand_total == Decimal("550652")


def test_compute_is_deterministic(age_banded) -> None:
    payload = _scenario_c()

    assert compute(payload, age_banded) == compute(payload, age_banded)


def test_dependent_cards_flat_policy() -> None:
    cards = DependentCardConfig.model_validate({"mode": "flat", "per_dependent": 166})

    family = CalculationInput(tier_id="tier-400", adults=2, children_under_15=2)

    assert calculate_dependent_cards(family, cards) == Decimal("498")
    assert calculate_dependent_cards(CalculationInput(tier_id="tier-400"), cards) == 0


def test_dependent_cards_age_banded_policy_charges_extra_adults() -> None:
    cards = DependentCardConfig.model_validate(
        {
            "mode": "age_banded",
            "child_15_plus": 150,
            "child_under_15": 16,
            "additional_adult": 50,
        }
    )

    family = CalculationInput(
        tier_id="tier-400", adults=3, children_15_plus=1, children_under_15=2
    )

    assert calculate_dependent_cards(family, cards) == Decimal("282")
