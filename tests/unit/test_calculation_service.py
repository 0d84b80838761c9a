"""Unit tests for the calculation service."""
from __future__ import annotations

import logging
from typing import Any

import pytest

from goldenvisa.backend.app.models import CalculationRequest, InvalidInput
from goldenvisa.backend.app.services.calculation_service import (
    _normalise_payload,
    calculate_costs,
)
from goldenvisa.backend.config.fee_config import load_tiers

SCENARIO_C: dict[str, Any] = {
    "tier_id": "tier-250",
    "custom_price": 500000,
    "family": {"adults": 2, "children_15_plus": 1, "children_under_15": 1},
    "options": {
        "express_processing": True,
        "power_of_attorney": True,
        "max_health_insurance": True,
    },
}


def test_calculate_costs_returns_summary_sections() -> None:
    result = calculate_costs({"tier_id": "tier-400"})

    summary = result["summary"]
    assert summary["purchase_price"] == pytest.approx(400_000)
    assert summary["property_total"] == pytest.approx(35_400)
    assert summary["property_and_acquisition"] == pytest.approx(435_400)
    assert summary["permit_total"] == pytest.approx(4_396)
    assert summary["additional_total"] == pytest.approx(300)
    assert summary["grand_total"] == pytest.approx(440_096)
    assert summary["total_family_members"] == 1
    assert summary["labels"]["grand_total"] == "Total investment"

    assert set(result["breakdown"]) == {"property", "permit", "additional"}
    assert result["breakdown"]["property"]["consultancy"] == {
        "base": 8000.0,
        "vat": 1920.0,
        "total": 9920.0,
    }
    assert result["meta"] == {
        "locale": "en",
        "profile": "age_banded",
        "currency": "EUR",
        "tier_fallback": False,
    }


def test_calculate_costs_defaults_to_first_tier_when_none_selected() -> None:
    result = calculate_costs({})

    assert result["tier"]["id"] == load_tiers().default_tier.id
    assert result["meta"]["tier_fallback"] is False


def test_calculate_costs_reports_tier_fallback() -> None:
    result = calculate_costs({"tier_id": "tier-unknown"})

    assert result["tier"]["id"] == "tier-250"
    assert result["meta"]["tier_fallback"] is True


def test_chart_shares_sum_to_one_and_values_to_grand_total() -> None:
    result = calculate_costs(SCENARIO_C)

    chart = result["chart"]
    assert [entry["key"] for entry in chart][0] == "purchase_price"
    assert sum(entry["value"] for entry in chart) == pytest.approx(
        result["summary"]["grand_total"]
    )
    assert sum(entry["share"] for entry in chart) == pytest.approx(1.0, abs=1e-3)
    assert all(entry["label"] for entry in chart)


def test_calculate_costs_selects_requested_profile() -> None:
    result = calculate_costs({**SCENARIO_C, "profile": "flat_rate"})

    assert result["meta"]["profile"] == "flat_rate"
    assert result["summary"]["grand_total"] == pytest.approx(550_652)
    assert result["breakdown"]["permit"]["dependent_cards"] == pytest.approx(498)


def test_calculate_costs_uses_environment_default_profile(monkeypatch) -> None:
    monkeypatch.setenv("GOLDENVISA_FEE_PROFILE", "flat_rate")

    result = calculate_costs(SCENARIO_C)

    assert result["meta"]["profile"] == "flat_rate"


def test_unknown_environment_profile_is_ignored(monkeypatch, caplog) -> None:
    monkeypatch.setenv("GOLDENVISA_FEE_PROFILE", "does-not-exist")

    with caplog.at_level(logging.WARNING):
        result = calculate_costs(SCENARIO_C)

    assert result["meta"]["profile"] == "age_banded"
    assert "does-not-exist" in caplog.text


def test_unknown_requested_profile_is_rejected() -> None:
    with pytest.raises(InvalidInput, match="Unknown fee profile"):
        calculate_costs({"profile": "premium"})


def test_calculate_costs_localises_labels() -> None:
    result = calculate_costs({**SCENARIO_C, "locale": "el"})

    assert result["meta"]["locale"] == "el"
    assert result["summary"]["labels"]["grand_total"] == "Συνολική επένδυση"
    assert result["tier"]["label"] == "Μετατροπή/Αποκατάσταση"


def test_calculate_costs_accepts_request_models() -> None:
    request = CalculationRequest.model_validate(SCENARIO_C)

    result = calculate_costs(request)

    assert result["summary"]["grand_total"] == pytest.approx(552_720)


def test_calculate_costs_rejects_unknown_fields() -> None:
    with pytest.raises(InvalidInput, match="Invalid calculation payload"):
        calculate_costs({"tier_id": "tier-400", "currency": "USD"})


def test_calculate_costs_rejects_non_mapping_payload() -> None:
    with pytest.raises(InvalidInput):
        calculate_costs(["tier-400"])  # type: ignore[arg-type]


def test_calculate_costs_rejects_fractional_family_counts() -> None:
    with pytest.raises(InvalidInput, match="whole numbers"):
        calculate_costs({"family": {"adults": 1.5}})


def test_mixing_minors_and_split_children_is_rejected() -> None:
    with pytest.raises(InvalidInput, match="minors"):
        calculate_costs({"family": {"minors": 1, "children_under_15": 1}})


def test_normalise_payload_maps_minors_variant() -> None:
    request = CalculationRequest.model_validate({"family": {"adults": 2, "minors": 3}})

    normalised = _normalise_payload(request, load_tiers())

    assert normalised.minors == 3
    assert normalised.children_15_plus == 0
    assert normalised.total_family_members == 5
    assert normalised.tier_id == "tier-250"


def test_negative_and_blank_custom_prices_are_treated_as_absent() -> None:
    negative = calculate_costs({"tier_id": "tier-400", "custom_price": -5})
    blank = calculate_costs({"tier_id": "tier-400", "custom_price": ""})

    assert negative["summary"]["purchase_price"] == pytest.approx(400_000)
    assert blank["summary"]["purchase_price"] == pytest.approx(400_000)


def test_profiling_logs_section_timings(monkeypatch, caplog) -> None:
    monkeypatch.setenv("GOLDENVISA_PROFILE_CALCULATIONS", "1")

    with caplog.at_level(
        logging.DEBUG, logger="goldenvisa.backend.app.services.calculation_service"
    ):
        calculate_costs({"tier_id": "tier-400"})

    assert "calculate_costs timings" in caplog.text
    assert "compute" in caplog.text


@pytest.mark.parametrize(
    "payload",
    [
        {"tier_id": "tier-400", "custom_price": "1e30"},
        {"tier_id": "tier-400", "custom_price": 10**27},
        {"tier_id": "tier-400", "family": {"adults": "1e400"}},
    ],
)
def test_oversized_inputs_are_rejected_as_invalid(payload: dict[str, Any]) -> None:
    with pytest.raises(InvalidInput, match="less than or equal to"):
        calculate_costs(payload)


def test_not_included_fees_are_listed_separately() -> None:
    result = calculate_costs({"tier_id": "tier-400"})

    assert result["not_included"] == [
        {
            "key": "legal_check",
            "label": "Legal check (only charged if the property proves unsuitable)",
            "amount": 150.0,
        }
    ]
    assert result["summary"]["grand_total"] == pytest.approx(440_096)
    assert result["summary"]["additional_total"] == pytest.approx(300)
