"""Expose configuration metadata consumed by the calculator front-end.

These endpoints bridge the YAML fee profiles and tier reference data so that UI
forms can populate tier pickers and show the rates in force without
duplicating business rules.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from flask import Blueprint, jsonify, request

from goldenvisa.backend.app.http import problem_response
from goldenvisa.backend.app.localization import available_locales, get_translator
from goldenvisa.backend.app.services.calculation_service import localise_tier
from goldenvisa.backend.config.fee_config import (
    default_profile_id,
    load_fee_profile,
    load_tiers,
    manifest_entries,
)
from goldenvisa.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    return {
        "version": get_project_version(),
        "profiles": [entry.id for entry in manifest_entries()],
        "default_profile": default_profile_id(),
        "tiers": list(load_tiers().tier_ids),
        "locales": list(available_locales()),
    }


def _serialise_model(value: Any) -> Any:
    """Convert Pydantic models into JSON-ready structures with float amounts."""

    if value is None:
        return None

    if hasattr(value, "model_dump"):
        return _serialise_model(value.model_dump(mode="python"))

    if isinstance(value, Decimal):
        return float(value)

    if isinstance(value, Mapping):
        return {key: _serialise_model(item) for key, item in value.items()}

    if isinstance(value, Sequence) and not isinstance(value, str | bytes | bytearray):
        return [_serialise_model(item) for item in value]

    return value


def _serialise_profile(profile_id: str, status: str) -> dict[str, Any]:
    payload = _serialise_model(load_fee_profile(profile_id))
    payload["status"] = status
    payload["default"] = profile_id == default_profile_id()
    return payload


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    payload = get_configuration_metadata()
    return jsonify(payload), 200


@blueprint.get("/tiers")
def list_tiers() -> tuple[Any, int]:
    """Return investment tiers with locale-aware labels."""

    translator = get_translator(request.args.get("locale"))
    tiers = [localise_tier(tier, translator) for tier in load_tiers().tiers]
    return jsonify({"locale": translator.locale, "tiers": tiers}), 200


@blueprint.get("/profiles")
def list_profiles() -> tuple[Any, int]:
    """Return every configured fee profile with its rates."""

    profiles = [_serialise_profile(entry.id, entry.status) for entry in manifest_entries()]
    return jsonify({"default_profile": default_profile_id(), "profiles": profiles}), 200


@blueprint.get("/profiles/<string:profile_id>")
def get_profile(profile_id: str) -> tuple[Any, int]:
    """Return a single fee profile."""

    entry = next((item for item in manifest_entries() if item.id == profile_id), None)
    if entry is None:
        return problem_response(
            "not_found", status=404, message=f"Unknown fee profile '{profile_id}'"
        ).to_response()

    return jsonify(_serialise_profile(entry.id, entry.status)), 200
