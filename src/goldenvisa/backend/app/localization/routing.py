"""Locale-aware URL helpers for the localised calculator pages."""

from __future__ import annotations

from typing import Any

from .catalog import available_locales, get_translator, is_supported_locale

DEFAULT_LOCALE = "en"
LOCALE_COOKIE = "GOLDENVISA_LOCALE"
LOCALE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365

_OPEN_GRAPH_LOCALES = {
    "en": "en_US",
    "tr": "tr_TR",
    "el": "el_GR",
}


def locale_from_path(path: str | None) -> str | None:
    """Return the locale prefix of ``path`` (``/el`` or ``/el/...``), if any."""

    if not path:
        return None
    for locale in available_locales():
        if path == f"/{locale}" or path.startswith(f"/{locale}/"):
            return locale
    return None


def resolve_locale(value: str | None) -> str:
    """Return the locale named by a request path or a bare cookie value."""

    from_path = locale_from_path(value)
    if from_path:
        return from_path
    if value and is_supported_locale(value.strip()):
        return value.strip()
    return DEFAULT_LOCALE


def slug_for(locale: str) -> str:
    """Return the localised page slug for ``locale``."""

    return get_translator(locale)("page.slug")


def canonical_path(locale: str) -> str:
    """Return ``/{locale}/{slug}``, using the default locale for unknown values."""

    if not is_supported_locale(locale):
        locale = DEFAULT_LOCALE
    return f"/{locale}/{slug_for(locale)}"


def page_metadata(locale: str, site_url: str) -> dict[str, Any]:
    """Return SEO metadata (canonical URL, alternates, Open Graph) for a page."""

    if not is_supported_locale(locale):
        locale = DEFAULT_LOCALE
    translator = get_translator(locale)
    root = site_url.rstrip("/")
    url = f"{root}{canonical_path(locale)}"

    title = translator("page.title")
    description = translator("page.description")
    return {
        "locale": locale,
        "slug": slug_for(locale),
        "title": title,
        "description": description,
        "canonical": url,
        "alternates": {
            code: f"{root}{canonical_path(code)}" for code in available_locales()
        },
        "open_graph": {
            "title": title,
            "description": description,
            "url": url,
            "locale": _OPEN_GRAPH_LOCALES.get(locale, _OPEN_GRAPH_LOCALES[DEFAULT_LOCALE]),
        },
    }


__all__ = [
    "DEFAULT_LOCALE",
    "LOCALE_COOKIE",
    "LOCALE_COOKIE_MAX_AGE",
    "canonical_path",
    "locale_from_path",
    "page_metadata",
    "resolve_locale",
    "slug_for",
]
