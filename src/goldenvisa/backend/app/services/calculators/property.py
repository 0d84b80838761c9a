"""Property acquisition cost calculator."""

from __future__ import annotations

from decimal import Decimal

from goldenvisa.backend.app.models import FeeAmount, PropertyCosts
from goldenvisa.backend.config.schema import FeeProfile, ProfessionalFeeConfig

from .utils import percentage_of


def _professional_fee(
    price: Decimal, fee: ProfessionalFeeConfig, profile: FeeProfile
) -> FeeAmount:
    base = percentage_of(price, fee.rate)
    vat, _ = profile.with_vat(base, fee.apply_vat)
    return FeeAmount(base=base, vat=vat)


def calculate_property_costs(price: Decimal, profile: FeeProfile) -> PropertyCosts:
    """Return acquisition costs for a property bought at ``price``."""

    acquisition = profile.acquisition
    return PropertyCosts(
        transfer_tax=percentage_of(price, acquisition.transfer_tax),
        consultancy=_professional_fee(price, acquisition.consultancy, profile),
        notary=_professional_fee(price, acquisition.notary, profile),
        lawyer=_professional_fee(price, acquisition.lawyer, profile),
        government_registration=percentage_of(
            price, acquisition.government_registration
        ),
    )


__all__ = ["calculate_property_costs"]
