"""Expose translation catalogues to front-end consumers."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from goldenvisa.backend.app.http import problem_response
from goldenvisa.backend.app.localization import is_supported_locale, load_translations
from goldenvisa.backend.services.request_parser import request_locale

blueprint = Blueprint("translations", __name__, url_prefix="/api/v1/translations")


@blueprint.get("/")
def get_default_translations() -> tuple[Any, int]:
    """Return the catalogue implied by ``?locale=``, ``Accept-Language`` or the cookie."""

    payload = load_translations(request_locale(request))
    return jsonify(payload), 200


@blueprint.get("/<locale>")
def get_locale_translations(locale: str) -> tuple[Any, int]:
    """Return translations for a locale code such as ``el`` or ``tr-TR``."""

    language = locale.strip().lower().replace("_", "-").split("-")[0]
    if not is_supported_locale(language):
        return problem_response(
            "not_found", status=404, message=f"No translations published for '{locale}'"
        ).to_response()

    return jsonify(load_translations(language)), 200
