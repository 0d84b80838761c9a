"""REST endpoints for golden visa cost calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, Response, request

from goldenvisa.backend.app.http import problem_response
from goldenvisa.backend.app.services.calculation_service import calculate_costs
from goldenvisa.backend.app.services.export_service import EXPORT_FORMATS, RENDERERS
from goldenvisa.backend.services.request_parser import parse_calculation_payload
from goldenvisa.backend.services.response_builder import (
    build_calculation_response,
    build_download_response,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Create a cost calculation using the submitted JSON payload."""

    payload = parse_calculation_payload(request)
    result = calculate_costs(payload)

    return build_calculation_response(result)


@blueprint.post("/calculations/export/<string:fmt>")
def export_calculation(fmt: str) -> Response | tuple[Any, int]:
    """Calculate and return the breakdown as a CSV, HTML or text download."""

    if fmt not in EXPORT_FORMATS:
        supported = ", ".join(sorted(EXPORT_FORMATS))
        return problem_response(
            "not_found",
            status=404,
            message=f"Unsupported export format '{fmt}' (expected one of: {supported})",
        ).to_response()

    payload = parse_calculation_payload(request)
    result = calculate_costs(payload)

    mimetype, extension = EXPORT_FORMATS[fmt]
    tier_id = result["tier"]["id"]
    return build_download_response(
        RENDERERS[fmt](result),
        mimetype=mimetype,
        filename=f"goldenvisa-{tier_id}.{extension}",
    )
