"""Localised calculator pages and their SEO metadata."""

from __future__ import annotations

import os
from html import escape
from typing import Any, Mapping

from flask import Blueprint, Response, jsonify, redirect, request

from goldenvisa.backend.app.http import problem_response
from goldenvisa.backend.app.localization import (
    LOCALE_COOKIE,
    canonical_path,
    get_translator,
    is_supported_locale,
    page_metadata,
    resolve_locale,
)
from goldenvisa.backend.app.services.calculation_service import calculate_costs
from goldenvisa.backend.app.services.export_service import (
    format_currency,
    key_information,
)

SITE_URL_ENV = "GOLDENVISA_SITE_URL"

blueprint = Blueprint("pages", __name__)
api_blueprint = Blueprint("page_metadata", __name__, url_prefix="/api/v1/pages")


def site_url() -> str:
    """Return the public site root, preferring ``GOLDENVISA_SITE_URL``."""

    configured = (os.getenv(SITE_URL_ENV) or "").strip()
    return (configured or request.url_root).rstrip("/")


def _head(metadata: Mapping[str, Any]) -> str:
    alternates = "\n".join(
        f'    <link rel="alternate" hreflang="{escape(code)}" href="{escape(url)}" />'
        for code, url in metadata["alternates"].items()
    )
    open_graph = metadata["open_graph"]
    return f"""    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{escape(metadata['title'])}</title>
    <meta name="description" content="{escape(metadata['description'])}" />
    <link rel="canonical" href="{escape(metadata['canonical'])}" />
{alternates}
    <meta property="og:title" content="{escape(open_graph['title'])}" />
    <meta property="og:description" content="{escape(open_graph['description'])}" />
    <meta property="og:url" content="{escape(open_graph['url'])}" />
    <meta property="og:locale" content="{escape(open_graph['locale'])}" />"""


def render_page(metadata: Mapping[str, Any], result: Mapping[str, Any]) -> str:
    """Render the calculator landing page for a worked example."""

    translator = get_translator(metadata["locale"])
    summary = result["summary"]
    labels = summary["labels"]

    rows = "\n".join(
        f"<tr><th>{escape(labels[key])}</th>"
        f"<td>{escape(format_currency(summary[key], translator))}</td></tr>"
        for key in (
            "purchase_price",
            "property_total",
            "permit_total",
            "additional_total",
            "grand_total",
        )
    )
    bars = "\n".join(
        f'<li><span>{escape(entry["label"])}</span> '
        f'<span class="bar" style="width: {entry["share"] * 100:.2f}%"></span> '
        f'{escape(format_currency(entry["value"], translator))}</li>'
        for entry in result["chart"]
    )
    not_included = "\n".join(
        f"<li>{escape(entry['label'])}: "
        f"{escape(format_currency(entry['amount'], translator))}</li>"
        for entry in result.get("not_included", [])
    )
    key_info = "\n".join(
        f"<section><h3>{escape(heading)}</h3><ul>"
        + "".join(f"<li>{escape(item)}</li>" for item in items)
        + "</ul></section>"
        for heading, items in key_information(translator)
    )
    example_heading = translator(
        "page.example_heading",
        tier=result["tier"]["label"],
        members=summary["total_family_members"],
    )

    return f"""<!DOCTYPE html>
<html lang="{escape(metadata['locale'])}">
  <head>
{_head(metadata)}
    <style>
      body {{ font-family: 'Segoe UI', sans-serif; margin: 0 auto; max-width: 48rem; padding: 2rem; color: #212529; }}
      table {{ width: 100%; border-collapse: collapse; }}
      th, td {{ padding: 0.5rem; text-align: left; border-bottom: 1px solid #dee2e6; }}
      ul.chart {{ list-style: none; padding: 0; }}
      .bar {{ display: inline-block; height: 0.75rem; background: #0d6efd; }}
    </style>
  </head>
  <body>
    <h1>{escape(metadata['title'])}</h1>
    <p>{escape(metadata['description'])}</p>
    <h2>{escape(example_heading)}</h2>
    <table>
      {rows}
    </table>
    <ul class="chart">
      {bars}
    </ul>
    <aside class="not-included">
      <p>{escape(translator('not_included.heading'))}</p>
      <ul>
        {not_included}
      </ul>
    </aside>
    <h2>{escape(translator('info.heading'))}</h2>
    {key_info}
    <p>{escape(translator('page.api_hint'))}</p>
    <footer>
      <p>{escape(translator('footer.law'))}</p>
    </footer>
  </body>
</html>"""


def _not_found(message: str) -> tuple[Any, int]:
    return problem_response("not_found", status=404, message=message).to_response()


@blueprint.get("/")
def index() -> Response:
    """Redirect to the canonical page of the remembered (or default) locale."""

    locale = resolve_locale(request.cookies.get(LOCALE_COOKIE))
    return redirect(canonical_path(locale))


@blueprint.get("/<string:locale>")
def locale_index(locale: str) -> Response:
    """Redirect ``/<locale>`` to its canonical slug; unknown locales go to English."""

    return redirect(canonical_path(locale))


@blueprint.get("/<string:locale>/<string:slug>")
def localised_page(locale: str, slug: str) -> Response | tuple[Any, int]:
    """Render the localised calculator page when ``slug`` matches ``locale``."""

    if not is_supported_locale(locale):
        return _not_found(f"Unknown locale '{locale}'")

    metadata = page_metadata(locale, site_url())
    if slug != metadata["slug"]:
        return _not_found(f"No page '{slug}' for locale '{locale}'")

    result = calculate_costs({"locale": locale})
    return Response(render_page(metadata, result), mimetype="text/html")


@api_blueprint.get("/<string:locale>")
def get_page_metadata(locale: str) -> tuple[Any, int]:
    """Return title, description, canonical and alternate URLs for ``locale``."""

    if not is_supported_locale(locale):
        return _not_found(f"Unknown locale '{locale}'")

    return jsonify(page_metadata(locale, site_url())), 200
