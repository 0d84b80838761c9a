"""Translation catalogue helpers backed by shared JSON resources."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from functools import cache
from importlib import resources
from typing import Any, Mapping

_BASE_LOCALE = "en"
_TRANSLATIONS_PACKAGE = "goldenvisa.translations"
_PLACEHOLDER_PATTERN = re.compile(r"\{([a-zA-Z0-9_]+)\}")


class LocalizationError(ValueError):
    """Raised when translation catalogues are missing keys or placeholders."""


@dataclass(frozen=True)
class Translator:
    """Callable helper for retrieving localized strings."""

    locale: str
    _messages: Mapping[str, str]
    _fallback: Mapping[str, str]

    def __call__(self, key: str, **params: Any) -> str:
        message = self._messages.get(key) or self._fallback.get(key, key)
        if params:
            return message.format(**params)
        return message

    def sequence(self, prefix: str) -> list[str]:
        """Return the messages stored under ``prefix.1``, ``prefix.2`` and so on."""

        items: list[str] = []
        index = 1
        while True:
            key = f"{prefix}.{index}"
            message = self(key)
            if message == key:
                return items
            items.append(message)
            index += 1


@dataclass(frozen=True)
class Catalogue:
    """Representation of a locale catalogue backed by the shared resources."""

    locale: str
    backend: Mapping[str, str]
    frontend: Mapping[str, Any]


@cache
def _available_locales() -> tuple[str, ...]:
    """Return the set of locales with published translation payloads."""

    root = resources.files(_TRANSLATIONS_PACKAGE)
    locales = sorted(
        entry.name[: -len(".json")]
        for entry in root.iterdir()
        if entry.name.endswith(".json")
    )
    return tuple(locales) or (_BASE_LOCALE,)


def available_locales() -> tuple[str, ...]:
    """Return the locales with a published catalogue, base locale first."""

    locales = _available_locales()
    return (_BASE_LOCALE,) + tuple(locale for locale in locales if locale != _BASE_LOCALE)


@cache
def _read_catalogue_payload(locale: str) -> dict[str, Any]:
    """Load the raw translation payload for the requested locale."""

    resource = resources.files(_TRANSLATIONS_PACKAGE).joinpath(f"{locale}.json")
    if not resource.is_file():
        return {"backend": {}, "frontend": {}}

    with resource.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    backend = payload.get("backend") or {}
    frontend = payload.get("frontend") or {}
    if not isinstance(backend, dict):
        raise LocalizationError(f"[{locale}] 'backend' section must be a mapping")
    if not isinstance(frontend, dict):
        raise LocalizationError(f"[{locale}] 'frontend' section must be a mapping")

    return {"backend": backend, "frontend": frontend}


@cache
def _load_catalogue(locale: str) -> Catalogue:
    """Return a cached catalogue representation for the locale."""

    payload = _read_catalogue_payload(locale)
    backend = {key: str(value) for key, value in payload["backend"].items()}
    frontend = payload["frontend"]
    return Catalogue(locale=locale, backend=backend, frontend=frontend)


def normalise_locale(locale: str | None) -> str:
    """Normalise requested locale to a supported catalogue key."""

    if not locale:
        return _BASE_LOCALE

    normalized = locale.strip().lower().replace("_", "-").split("-")[0]
    return normalized if normalized in _available_locales() else _BASE_LOCALE


def is_supported_locale(locale: str | None) -> bool:
    """Return ``True`` when ``locale`` names a published catalogue exactly."""

    return bool(locale) and locale in _available_locales()


def get_translator(locale: str | None = None) -> Translator:
    """Return a translator instance for the requested locale."""

    normalized = normalise_locale(locale)
    catalogue = _load_catalogue(normalized)
    fallback = _load_catalogue(_BASE_LOCALE)
    fallback_messages = fallback.backend if normalized != _BASE_LOCALE else catalogue.backend

    return Translator(
        locale=catalogue.locale,
        _messages=catalogue.backend,
        _fallback=fallback_messages,
    )


def load_translations(locale: str | None = None) -> dict[str, Any]:
    """Expose combined backend/frontend translations for API consumers."""

    normalized = normalise_locale(locale)
    catalogue = _load_catalogue(normalized)
    fallback = _load_catalogue(_BASE_LOCALE)

    return {
        "locale": normalized,
        "available_locales": list(available_locales()),
        "backend": dict(catalogue.backend),
        "frontend": catalogue.frontend,
        "fallback": {
            "locale": _BASE_LOCALE,
            "backend": dict(fallback.backend),
            "frontend": fallback.frontend,
        },
    }


def _flatten(payload: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    flattened: dict[str, str] = {}
    for key, value in payload.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flattened.update(_flatten(value, path))
        else:
            flattened[path] = str(value)
    return flattened


def _compare_sections(
    locale: str,
    section: str,
    reference: Mapping[str, str],
    candidate: Mapping[str, str],
) -> list[str]:
    issues: list[str] = []
    for key in sorted(set(reference) - set(candidate)):
        issues.append(f"[{locale}] missing {section} key '{key}'")
    for key in sorted(set(candidate) - set(reference)):
        issues.append(f"[{locale}] unexpected {section} key '{key}'")
    for key in sorted(set(reference) & set(candidate)):
        expected = set(_PLACEHOLDER_PATTERN.findall(reference[key]))
        found = set(_PLACEHOLDER_PATTERN.findall(candidate[key]))
        if expected != found:
            issues.append(
                f"[{locale}] placeholder mismatch in {section} key '{key}': "
                f"expected {sorted(expected)}, found {sorted(found)}"
            )
    return issues


def validate_catalogues() -> list[str]:
    """Compare every catalogue against the base locale and report issues."""

    reference = _load_catalogue(_BASE_LOCALE)
    reference_frontend = _flatten(reference.frontend)

    issues: list[str] = []
    for locale in available_locales():
        if locale == _BASE_LOCALE:
            continue
        catalogue = _load_catalogue(locale)
        issues.extend(
            _compare_sections(locale, "backend", reference.backend, catalogue.backend)
        )
        issues.extend(
            _compare_sections(
                locale, "frontend", reference_frontend, _flatten(catalogue.frontend)
            )
        )
    return issues


def ensure_catalogues_complete() -> None:
    """Raise :class:`LocalizationError` when :func:`validate_catalogues` finds issues."""

    issues = validate_catalogues()
    if issues:
        raise LocalizationError("Translation catalogues are incomplete: " + "; ".join(issues))


__all__ = [
    "Catalogue",
    "LocalizationError",
    "Translator",
    "available_locales",
    "ensure_catalogues_complete",
    "get_translator",
    "is_supported_locale",
    "load_translations",
    "normalise_locale",
    "validate_catalogues",
]
