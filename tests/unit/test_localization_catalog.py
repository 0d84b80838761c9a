"""Tests for the localisation catalogue helpers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from goldenvisa.backend.app.localization import (
    LocalizationError,
    available_locales,
    catalog,
    ensure_catalogues_complete,
    get_translator,
    load_translations,
    normalise_locale,
    validate_catalogues,
)

TRANSLATIONS_ROOT = Path(__file__).resolve().parents[2] / "src" / "goldenvisa" / "translations"


def _read_backend_value(locale: str, key: str) -> str:
    payload = json.loads(
        TRANSLATIONS_ROOT.joinpath(f"{locale}.json").read_text(encoding="utf-8")
    )
    return str(payload["backend"][key])


def test_get_translator_loads_shared_catalogue() -> None:
    """The translator should pull labels from the shared JSON catalogue."""

    translator = get_translator("el")

    expected = _read_backend_value("el", "summary.grand_total")
    assert translator("summary.grand_total") == expected


def test_get_translator_falls_back_to_default_locale() -> None:
    """Unknown locales should fall back to the base catalogue."""

    translator = get_translator("fr")

    assert translator.locale == "en"
    expected = _read_backend_value("en", "summary.grand_total")
    assert translator("summary.grand_total") == expected


def test_translator_returns_key_for_unknown_message() -> None:
    assert get_translator("tr")("summary.not_a_label") == "summary.not_a_label"


def test_translator_formats_placeholders() -> None:
    translator = get_translator("en")

    heading = translator("page.example_heading", tier="Prime Zone", members=3)

    assert heading == "Example: Prime Zone with a family of 3"


@pytest.mark.parametrize(
    ("hint", "expected"),
    [("el-GR", "el"), ("tr_TR", "tr"), ("EN", "en"), ("de", "en"), (None, "en")],
)
def test_normalise_locale(hint, expected) -> None:
    assert normalise_locale(hint) == expected


def test_available_locales_lists_base_locale_first() -> None:
    locales = available_locales()

    assert locales[0] == "en"
    assert set(locales) == {"en", "tr", "el"}


def test_load_translations_exposes_catalogue_payload() -> None:
    """The API helper should expose both backend and frontend catalogues."""

    payload = load_translations("tr")

    assert payload["locale"] == "tr"
    assert payload["backend"]["page.slug"] == "yunanistan-altin-vize-hesaplayici"
    assert isinstance(payload["frontend"], dict)
    assert payload["fallback"]["locale"] == "en"
    assert payload["fallback"]["backend"]["summary.grand_total"] == _read_backend_value(
        "en", "summary.grand_total"
    )


def test_published_catalogues_are_complete() -> None:
    assert validate_catalogues() == []
    ensure_catalogues_complete()


def test_validate_catalogues_reports_missing_and_placeholder_issues(monkeypatch) -> None:
    real_loader = catalog._load_catalogue

    def broken_loader(locale: str) -> catalog.Catalogue:
        loaded = real_loader(locale)
        if locale != "el":
            return loaded
        backend = dict(loaded.backend)
        backend.pop("summary.grand_total")
        backend["page.example_heading"] = "Παράδειγμα χωρίς μεταβλητές"
        return catalog.Catalogue(locale=locale, backend=backend, frontend=loaded.frontend)

    monkeypatch.setattr(catalog, "_load_catalogue", broken_loader)

    issues = validate_catalogues()

    assert "[el] missing backend key 'summary.grand_total'" in issues
    assert any("placeholder mismatch" in issue and "page.example_heading" in issue for issue in issues)
    with pytest.raises(LocalizationError):
        ensure_catalogues_complete()


def test_translator_sequence_collects_numbered_messages() -> None:
    translator = get_translator("en")

    benefits = translator.sequence("info.benefits")

    assert len(benefits) == 5
    assert benefits[0] == "Five-year residence permit, renewable while the property is held"
    assert translator.sequence("info.missing") == []
