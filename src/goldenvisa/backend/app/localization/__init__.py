"""Shared translation helpers bridging backend services and static catalogues."""

from .catalog import (
    LocalizationError,
    Translator,
    available_locales,
    ensure_catalogues_complete,
    get_translator,
    is_supported_locale,
    load_translations,
    normalise_locale,
    validate_catalogues,
)
from .routing import (
    LOCALE_COOKIE,
    LOCALE_COOKIE_MAX_AGE,
    canonical_path,
    locale_from_path,
    page_metadata,
    resolve_locale,
)

__all__ = [
    "LOCALE_COOKIE",
    "LOCALE_COOKIE_MAX_AGE",
    "LocalizationError",
    "Translator",
    "available_locales",
    "canonical_path",
    "ensure_catalogues_complete",
    "get_translator",
    "is_supported_locale",
    "load_translations",
    "locale_from_path",
    "normalise_locale",
    "page_metadata",
    "resolve_locale",
    "validate_catalogues",
]
