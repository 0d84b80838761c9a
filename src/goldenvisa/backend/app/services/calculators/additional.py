"""Additional service cost calculator."""

from __future__ import annotations

from decimal import Decimal

from goldenvisa.backend.app.models import AdditionalCosts, CalculationInput
from goldenvisa.backend.config.schema import FeeProfile


def calculate_additional_costs(
    payload: CalculationInput, profile: FeeProfile
) -> AdditionalCosts:
    """Return bank/tax-number setup and optional power-of-attorney costs.

    The conditional legal check fee is carried along but never counted.
    """

    additional = profile.additional
    power_of_attorney_fee = Decimal("0")
    if payload.power_of_attorney:
        _, power_of_attorney_fee = profile.with_vat(
            additional.power_of_attorney, additional.power_of_attorney_apply_vat
        )

    return AdditionalCosts(
        bank_account_tax_number=additional.bank_account_tax_number,
        power_of_attorney_fee=power_of_attorney_fee,
        legal_check_fee=additional.legal_check,
    )


__all__ = ["calculate_additional_costs"]
