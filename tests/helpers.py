"""Helpers shared by the API tests."""

import re
from urllib.parse import parse_qs, urlsplit

PASSWORD = "Secret1!"


def login(client, email, password=PASSWORD) -> str:
    resp = client.post("/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.json()
    return resp.json()["data"]["token"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _first_url(mail: dict) -> str:
    return re.search(r"https?://\S+", mail["text"]).group(0)


def link_path(mail: dict) -> str:
    """Path + query of the link in a captured email, ready for the test client."""
    parts = urlsplit(_first_url(mail))
    return f"{parts.path}?{parts.query}"


def query_param(mail: dict, name: str) -> str:
    return parse_qs(urlsplit(_first_url(mail)).query)[name][0]
