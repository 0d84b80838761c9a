"""Domain-specific calculation helpers."""

from .additional import calculate_additional_costs
from .chart import build_chart_series
from .permit import calculate_dependent_cards, calculate_permit_costs
from .property import calculate_property_costs
from .utils import percentage_of, round_currency, round_rate

__all__ = [
    "build_chart_series",
    "calculate_additional_costs",
    "calculate_dependent_cards",
    "calculate_permit_costs",
    "calculate_property_costs",
    "percentage_of",
    "round_currency",
    "round_rate",
]
