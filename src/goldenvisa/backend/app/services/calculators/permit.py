"""Residence permit cost calculator."""

from __future__ import annotations

from decimal import Decimal

from goldenvisa.backend.app.models import CalculationInput, PermitCosts
from goldenvisa.backend.config.schema import DependentCardConfig, FeeProfile

_ZERO = Decimal("0")


def _amount(value: Decimal | None) -> Decimal:
    return _ZERO if value is None else value


def calculate_dependent_cards(
    payload: CalculationInput, cards: DependentCardConfig
) -> Decimal:
    """Return the card fees owed for every family member beyond the main applicant.

    Flat pricing charges the same fee for each dependent. Age-banded pricing
    charges children by age band, counts an undifferentiated ``minors`` figure
    at the 15+ rate and applies ``additional_adult`` to adults beyond the main
    applicant.
    """

    if payload.dependents <= 0:
        return _ZERO

    if cards.mode == "flat":
        return _amount(cards.per_dependent) * payload.dependents

    older_children = payload.children_15_plus + payload.minors
    return (
        older_children * _amount(cards.child_15_plus)
        + payload.children_under_15 * _amount(cards.child_under_15)
        + (payload.adults - 1) * cards.additional_adult
    )


def calculate_permit_costs(payload: CalculationInput, profile: FeeProfile) -> PermitCosts:
    """Return residence permit costs for the family described in ``payload``."""

    permit = profile.permit
    health_rate = permit.health_insurance.rate(payload.max_health_insurance)

    return PermitCosts(
        application_prep=permit.application_prep,
        main_card=permit.main_card,
        dependent_cards=calculate_dependent_cards(payload, permit.dependent_cards),
        health_insurance=health_rate * payload.total_family_members,
        translation=permit.translation,
        express_fee=permit.express_processing if payload.express_processing else _ZERO,
    )


__all__ = ["calculate_dependent_cards", "calculate_permit_costs"]
