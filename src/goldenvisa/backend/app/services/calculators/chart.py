"""Projection of a breakdown onto the proportional chart series."""

from __future__ import annotations

from decimal import Decimal

from goldenvisa.backend.app.models import (
    CHART_ORDER,
    AdditionalCosts,
    ChartSlice,
    PermitCosts,
    PropertyCosts,
)


def build_chart_series(
    purchase_price: Decimal,
    property_costs: PropertyCosts,
    permit_costs: PermitCosts,
    additional_costs: AdditionalCosts,
) -> tuple[ChartSlice, ...]:
    """Return the non-zero chart slices in display order.

    The slices partition the grand total, so their values always sum to it.
    """

    values = {
        "purchase_price": purchase_price,
        "transfer_tax": property_costs.transfer_tax,
        "professional_fees": property_costs.professional_fees,
        "government_registration": property_costs.government_registration,
        "permit_and_cards": permit_costs.permit_and_cards,
        "health_and_translation": permit_costs.health_and_translation,
        "additional_total": additional_costs.total,
    }
    return tuple(
        ChartSlice(key=key, value=values[key]) for key in CHART_ORDER if values[key] > 0
    )


__all__ = ["build_chart_series"]
