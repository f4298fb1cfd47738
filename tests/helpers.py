"""
tests/helpers.py – shared request helpers
"""
from __future__ import annotations

from urllib.parse import urlparse

from jotter.blog import COOKIE_NAME

PASSWORD = "password123"


def location(rv) -> str:
    """Path part of a redirect, whether Werkzeug made it absolute or not."""
    return urlparse(rv.headers["Location"]).path


def session_cookie_header(rv) -> str | None:
    for header in rv.headers.getlist("Set-Cookie"):
        if header.startswith(f"{COOKIE_NAME}="):
            return header
    return None


def register(client, username: str = "alice", password: str = PASSWORD):
    return client.post(
        "/register", data={"username": username, "password": password}
    )


def login(client, username: str = "alice", password: str = PASSWORD):
    return client.post("/login", data={"username": username, "password": password})


def create_post(client, title: str = "Hello", body: str = "World") -> int:
    """POST /create-post and return the new id from the redirect."""
    rv = client.post("/create-post", data={"title": title, "body": body})
    assert rv.status_code == 302, rv.data.decode()
    path = location(rv)
    assert path.startswith("/post/")
    return int(path.rsplit("/", 1)[1])
