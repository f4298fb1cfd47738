"""
tests/test_errors.py
"""
from __future__ import annotations

from jotter.blog import app


def test_unknown_url_gets_404_page(client):
    resp = client.get("/no/such/page")
    assert resp.status_code == 404
    assert b"Page not found" in resp.data
    assert b"jotter" in resp.data


def test_non_numeric_post_id_is_404(client):
    assert client.get("/post/abc").status_code == 404


def test_crashing_view_gets_500_page(client, monkeypatch):
    def _crash():
        raise RuntimeError("boom")

    monkeypatch.setitem(app.view_functions, "index", _crash)
    monkeypatch.setitem(app.config, "PROPAGATE_EXCEPTIONS", False)  # let the handler run

    resp = client.get("/")
    assert resp.status_code == 500
    assert b"Internal Server Error" in resp.data
    assert b"boom" not in resp.data


def test_security_headers(client):
    resp = client.get("/")
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert "Referrer-Policy" in resp.headers
