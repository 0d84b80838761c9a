"""Helpers for normalising incoming calculation requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest

from goldenvisa.backend.app.localization import (
    LOCALE_COOKIE,
    normalise_locale,
    resolve_locale,
)


def _locale_hint(req: Request, payload: Mapping[str, Any]) -> str | None:
    locale = payload.get("locale")
    if isinstance(locale, str) and locale.strip():
        return locale

    locale_param = req.args.get("locale")
    if locale_param:
        return locale_param

    accept_language = req.headers.get("Accept-Language")
    if accept_language:
        primary = accept_language.split(",")[0].split(";")[0].strip()
        if primary:
            return primary

    cookie = req.cookies.get(LOCALE_COOKIE)
    if cookie:
        return resolve_locale(cookie)

    return None


def _resolve_locale(req: Request, payload: dict[str, Any]) -> None:
    """Populate the locale field in ``payload`` based on hints in ``req``.

    The body wins over ``?locale=``, which wins over ``Accept-Language``; the
    locale cookie set by the localised pages is the last resort.
    """

    hint = _locale_hint(req, payload)
    if hint is not None:
        payload["locale"] = normalise_locale(hint)


def request_locale(req: Request) -> str:
    """Return the locale implied by ``req`` alone (query, header, cookie)."""

    return normalise_locale(_locale_hint(req, {}))


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Extract and validate a JSON payload from ``req``."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    payload = dict(data)
    _resolve_locale(req, payload)

    return payload
