"""Service-layer helpers for the golden visa backend."""

from goldenvisa.backend.app.services.calculation_service import calculate_costs

from .request_parser import parse_calculation_payload, request_locale
from .response_builder import build_calculation_response, build_download_response

__all__ = [
    "calculate_costs",
    "parse_calculation_payload",
    "request_locale",
    "build_calculation_response",
    "build_download_response",
]
