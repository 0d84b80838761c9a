"""Render calculation results as downloadable text, CSV and HTML documents."""

from __future__ import annotations

import csv
from decimal import ROUND_HALF_UP, Decimal
from html import escape
from io import StringIO
from typing import Any, Iterable, List, Mapping

from goldenvisa.backend.app.localization import Translator, get_translator

EXPORT_FORMATS: Mapping[str, tuple[str, str]] = {
    "csv": ("text/csv; charset=utf-8", "csv"),
    "html": ("text/html; charset=utf-8", "html"),
    "text": ("text/plain; charset=utf-8", "txt"),
}

_SECTION_ORDER = ("property", "permit", "additional")
_SUMMARY_FIELDS = (
    "purchase_price",
    "property_total",
    "property_and_acquisition",
    "permit_total",
    "additional_total",
    "grand_total",
)
_INFO_SECTIONS = ("benefits", "requirements", "timeline")
_BAR_WIDTH = 30
_CENT = Decimal("0.01")


def format_currency(value: Any, translator: Translator) -> str:
    """Format ``value`` as euros using the locale's digit separators."""

    amount = Decimal(str(value or 0)).quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    whole, fraction = f"{abs(amount):.2f}".split(".")

    group_separator = translator("format.group_separator")
    decimal_separator = translator("format.decimal_separator")

    groups: List[str] = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)

    return f"{sign}€{group_separator.join(groups)}{decimal_separator}{fraction}"


def _format_share(value: Any) -> str:
    return f"{float(value or 0) * 100:.1f}%"


def _line_amount(value: Any) -> Any:
    if isinstance(value, Mapping):
        return value.get("total", 0)
    return value


def _section_rows(
    section: Mapping[str, Any], translator: Translator
) -> Iterable[tuple[str, str]]:
    labels = section.get("labels", {})
    for field, value in section.items():
        if field in {"labels", "total"}:
            continue
        amount = _line_amount(value)
        if not amount:
            continue
        yield labels.get(field, field), format_currency(amount, translator)
    yield labels.get("total", "total"), format_currency(section.get("total"), translator)


def _summary_rows(
    summary: Mapping[str, Any], translator: Translator
) -> Iterable[tuple[str, str]]:
    labels = summary.get("labels", {})
    for field in _SUMMARY_FIELDS:
        if field in summary:
            yield labels.get(field, field), format_currency(summary[field], translator)
    if "total_family_members" in summary:
        yield labels.get("total_family_members", "total_family_members"), str(
            summary["total_family_members"]
        )


def _not_included_rows(
    payload: Mapping[str, Any], translator: Translator
) -> Iterable[tuple[str, str]]:
    for entry in payload.get("not_included", []):
        yield str(entry.get("label", entry.get("key", ""))), format_currency(
            entry.get("amount"), translator
        )


def key_information(translator: Translator) -> list[tuple[str, list[str]]]:
    """Return the localised key-information lists as ``(heading, items)`` pairs."""

    return [
        (translator(f"info.{name}.heading"), translator.sequence(f"info.{name}"))
        for name in _INFO_SECTIONS
    ]


def _context(payload: Mapping[str, Any]) -> tuple[Translator, Mapping[str, Any], Mapping[str, Any], list[Any]]:
    meta = payload.get("meta", {})
    translator = get_translator(meta.get("locale"))
    summary = payload.get("summary", {})
    breakdown = payload.get("breakdown", {})
    chart = list(payload.get("chart", []))
    return translator, summary, breakdown, chart


def render_text(payload: Mapping[str, Any]) -> str:
    """Return a plain-text report including a bar chart of cost shares."""

    translator, summary, breakdown, chart = _context(payload)
    tier = payload.get("tier", {})

    lines: List[str] = [translator("export.heading")]
    if tier:
        lines.append(f"{tier.get('label', '')} ({tier.get('subtitle', '')})")
    lines.append("")

    lines.append(translator("export.summary_heading"))
    for label, value in _summary_rows(summary, translator):
        lines.append(f"  {label}: {value}")

    for name in _SECTION_ORDER:
        section = breakdown.get(name)
        if not section:
            continue
        lines.append("")
        lines.append(translator(f"export.{name}_heading"))
        for label, value in _section_rows(section, translator):
            lines.append(f"  {label}: {value}")

    not_included = list(_not_included_rows(payload, translator))
    if not_included:
        lines.append("")
        lines.append(translator("not_included.heading"))
        for label, value in not_included:
            lines.append(f"  {label}: {value}")

    if chart:
        lines.append("")
        lines.append(translator("export.chart_heading"))
        label_width = max(len(str(entry.get("label", ""))) for entry in chart)
        for entry in chart:
            share = float(entry.get("share", 0))
            bar = "#" * max(1, round(share * _BAR_WIDTH)) if share > 0 else ""
            lines.append(
                f"  {str(entry.get('label', '')).ljust(label_width)} "
                f"{bar.ljust(_BAR_WIDTH)} {_format_share(share)}"
            )

    lines.append("")
    lines.append(translator("info.heading"))
    for heading, items in key_information(translator):
        lines.append(f"  {heading}")
        lines.extend(f"    - {item}" for item in items)

    lines.append("")
    lines.append(translator("export.disclaimer"))
    lines.append(translator("footer.law"))
    return "\n".join(lines) + "\n"


def render_csv(payload: Mapping[str, Any]) -> str:
    """Return the breakdown as ``section,item,amount`` rows."""

    translator, summary, breakdown, chart = _context(payload)

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(
        [
            translator("export.columns.section"),
            translator("export.columns.item"),
            translator("export.columns.amount"),
        ]
    )

    summary_heading = translator("export.summary_heading")
    for label, value in _summary_rows(summary, translator):
        writer.writerow([summary_heading, label, value])

    for name in _SECTION_ORDER:
        section = breakdown.get(name)
        if not section:
            continue
        heading = translator(f"export.{name}_heading")
        for label, value in _section_rows(section, translator):
            writer.writerow([heading, label, value])

    not_included_heading = translator("not_included.heading")
    for label, value in _not_included_rows(payload, translator):
        writer.writerow([not_included_heading, label, value])

    chart_heading = translator("export.chart_heading")
    for entry in chart:
        writer.writerow([chart_heading, entry.get("label", ""), _format_share(entry.get("share"))])

    return buffer.getvalue()


def _html_table(rows: Iterable[tuple[str, str]]) -> str:
    return "\n".join(
        f"<tr><th>{escape(label)}</th><td>{escape(value)}</td></tr>" for label, value in rows
    )


def render_html(payload: Mapping[str, Any]) -> str:
    """Return a standalone HTML document with tables and proportional bars."""

    translator, summary, breakdown, chart = _context(payload)
    locale = translator.locale
    tier = payload.get("tier", {})

    section_cards: List[str] = []
    for name in _SECTION_ORDER:
        section = breakdown.get(name)
        if not section:
            continue
        section_cards.append(
            f"<article class=\"section-card\"><h3>{escape(translator(f'export.{name}_heading'))}</h3>"
            f"<table>{_html_table(_section_rows(section, translator))}</table></article>"
        )

    not_included = list(_not_included_rows(payload, translator))
    if not_included:
        section_cards.append(
            f"<article class=\"section-card not-included\"><h3>{escape(translator('not_included.heading'))}</h3>"
            f"<table>{_html_table(not_included)}</table></article>"
        )

    info_blocks = "".join(
        f"<div class=\"info-block\"><h3>{escape(heading)}</h3><ul>"
        + "".join(f"<li>{escape(item)}</li>" for item in items)
        + "</ul></div>"
        for heading, items in key_information(translator)
    )

    chart_rows: List[str] = []
    for entry in chart:
        share = float(entry.get("share", 0))
        chart_rows.append(
            "<div class=\"bar-row\">"
            f"<span class=\"bar-label\">{escape(str(entry.get('label', '')))}</span>"
            f"<span class=\"bar\" style=\"width: {share * 100:.2f}%\"></span>"
            f"<span class=\"bar-value\">{_format_share(share)}</span>"
            "</div>"
        )

    tier_html = ""
    if tier:
        tier_html = (
            f"<p class=\"tier\"><strong>{escape(str(tier.get('label', '')))}</strong> "
            f"{escape(str(tier.get('subtitle', '')))}</p>"
        )

    return f"""<!DOCTYPE html>
<html lang=\"{escape(locale)}\">
  <head>
    <meta charset=\"utf-8\" />
    <title>{escape(translator('export.title'))}</title>
    <style>
      body {{ font-family: 'Segoe UI', sans-serif; margin: 0; padding: 2rem; color: #212529; background: #f8f9fa; }}
      h1, h2, h3 {{ margin-top: 0; }}
      table {{ width: 100%; border-collapse: collapse; margin-bottom: 1rem; }}
      th, td {{ padding: 0.5rem; text-align: left; border-bottom: 1px solid #dee2e6; }}
      .section-card {{ background: #fff; border: 1px solid #dee2e6; border-radius: 0.5rem; padding: 1rem; margin-bottom: 1rem; }}
      .bar-row {{ display: flex; align-items: center; gap: 0.5rem; margin-bottom: 0.25rem; }}
      .bar-label {{ width: 14rem; }}
      .bar {{ display: inline-block; height: 0.75rem; background: #0d6efd; border-radius: 0.25rem; }}
      footer {{ margin-top: 2rem; font-size: 0.9rem; color: #6c757d; }}
    </style>
  </head>
  <body>
    <header>
      <h1>{escape(translator('export.heading'))}</h1>
      {tier_html}
    </header>
    <section>
      <h2>{escape(translator('export.summary_heading'))}</h2>
      <table class=\"summary-table\">
        <tbody>
          {_html_table(_summary_rows(summary, translator))}
        </tbody>
      </table>
    </section>
    <section>
      {''.join(section_cards)}
    </section>
    <section class=\"chart\">
      <h2>{escape(translator('export.chart_heading'))}</h2>
      {''.join(chart_rows)}
    </section>
    <section class=\"key-info\">
      <h2>{escape(translator('info.heading'))}</h2>
      {info_blocks}
    </section>
    <footer>
      <p>{escape(translator('export.disclaimer'))}</p>
      <p>{escape(translator('footer.law'))}</p>
    </footer>
  </body>
</html>"""


RENDERERS = {
    "csv": render_csv,
    "html": render_html,
    "text": render_text,
}


__all__ = [
    "EXPORT_FORMATS",
    "RENDERERS",
    "format_currency",
    "key_information",
    "render_csv",
    "render_html",
    "render_text",
]
