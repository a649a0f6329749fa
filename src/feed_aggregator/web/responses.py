"""
JSON and CORS response helpers for the HTTP layer.
"""

from typing import Any, Optional

from flask import Response, jsonify


def ok_json(data: Any, status: int = 200, headers: Optional[dict] = None) -> Response:
    """JSON response with an explicit UTF-8 content type.

    Args:
        data: JSON-serializable body
        status: HTTP status code
        headers: Extra response headers

    Returns:
        Flask Response
    """
    response = jsonify(data)
    response.status_code = status
    response.headers["Content-Type"] = "application/json; charset=utf-8"
    for name, value in (headers or {}).items():
        response.headers[name] = value
    return response


def error_json(message: str, status: int = 400) -> Response:
    """Error response of the form ``{"error": message}``."""
    return ok_json({"error": message}, status=status)


def not_found() -> Response:
    return error_json("Not Found", 404)


def method_not_allowed() -> Response:
    return error_json("Method Not Allowed", 405)


def apply_cors(response: Response, allow_origin: str) -> Response:
    """Add the CORS headers every response carries."""
    response.headers["Access-Control-Allow-Origin"] = allow_origin or "*"
    response.headers["Vary"] = "Origin"
    return response


def preflight_response(allow_origin: str) -> Response:
    """Answer a CORS preflight request."""
    response = Response(status=204)
    response.headers["Access-Control-Allow-Origin"] = allow_origin or "*"
    response.headers["Access-Control-Allow-Methods"] = "GET,PUT,POST,OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "authorization,content-type"
    response.headers["Access-Control-Max-Age"] = "86400"
    return response
