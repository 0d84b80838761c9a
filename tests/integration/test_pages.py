"""Integration tests for the localised calculator pages."""

from __future__ import annotations

from http import HTTPStatus

import pytest
from flask.testing import FlaskClient

EN_PATH = "/en/greece-golden-visa-calculator"
TR_PATH = "/tr/yunanistan-altin-vize-hesaplayici"
EL_PATH = "/el/elliniko-chryso-visa-ypologistis"


def test_root_redirects_to_english_page(client: FlaskClient) -> None:
    response = client.get("/")

    assert response.status_code == HTTPStatus.FOUND
    assert response.headers["Location"].endswith(EN_PATH)


def test_root_redirect_follows_locale_cookie(client: FlaskClient) -> None:
    client.set_cookie("GOLDENVISA_LOCALE", "el")

    response = client.get("/")

    assert response.headers["Location"].endswith(EL_PATH)


@pytest.mark.parametrize(
    ("path", "target"), [("/tr", TR_PATH), ("/el", EL_PATH), ("/xx", EN_PATH)]
)
def test_locale_index_redirects_to_canonical_slug(
    client: FlaskClient, path: str, target: str
) -> None:
    response = client.get(path)

    assert response.status_code == HTTPStatus.FOUND
    assert response.headers["Location"].endswith(target)


def test_localised_page_renders_metadata_and_sets_cookie(
    client: FlaskClient, monkeypatch
) -> None:
    monkeypatch.setenv("GOLDENVISA_SITE_URL", "https://calculator.example/")

    response = client.get(TR_PATH)

    assert response.status_code == HTTPStatus.OK
    assert response.mimetype == "text/html"
    html = response.get_data(as_text=True)
    assert "<title>Yunanistan Altın Vize Maliyet Hesaplayıcı</title>" in html
    assert f'<link rel="canonical" href="https://calculator.example{TR_PATH}" />' in html
    assert 'hreflang="el"' in html
    assert '<meta property="og:locale" content="tr_TR" />' in html
    assert "€250.000,00" in html
    assert "Vize avantajları" in html
    assert "Hukuki inceleme" in html
    assert "5100/2024" in html

    cookie = response.headers["Set-Cookie"]
    assert cookie.startswith("GOLDENVISA_LOCALE=tr")
    assert "Path=/" in cookie
    assert "Max-Age=31536000" in cookie


def test_wrong_slug_returns_not_found(client: FlaskClient) -> None:
    response = client.get("/el/greece-golden-visa-calculator")

    assert response.status_code == HTTPStatus.NOT_FOUND


def test_unknown_locale_page_returns_not_found(client: FlaskClient) -> None:
    response = client.get("/fr/greece-golden-visa-calculator")

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert "Set-Cookie" not in response.headers


def test_page_metadata_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/pages/el")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["locale"] == "el"
    assert payload["canonical"] == f"http://localhost{EL_PATH}"
    assert set(payload["alternates"]) == {"en", "tr", "el"}
    assert payload["open_graph"]["locale"] == "el_GR"


def test_page_metadata_endpoint_rejects_unknown_locale(client: FlaskClient) -> None:
    response = client.get("/api/v1/pages/de")

    assert response.status_code == HTTPStatus.NOT_FOUND
