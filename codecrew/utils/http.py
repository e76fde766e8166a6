"""Request helpers shared by the blueprints."""

from __future__ import annotations

from typing import Any, Dict

from flask import request


def json_body() -> Dict[str, Any]:
    """Return the JSON object sent with the request, or an empty dict."""

    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}
