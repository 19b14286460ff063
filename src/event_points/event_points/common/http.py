from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional

from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)


class ApiJSONProvider(DefaultJSONProvider):
    """JSON provider emitting ISO-8601 dates instead of HTTP dates."""

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, (date, time)):
            return o.isoformat()
        if isinstance(o, Enum):
            return o.value
        if is_dataclass(o) and not isinstance(o, type):
            return asdict(o)
        return DefaultJSONProvider.default(o)


def send_response(status_code: int, message: str, data: Any = None):
    return (
        jsonify({"statusCode": status_code, "success": True, "message": message, "data": data}),
        status_code,
    )


def error_response(status_code: int, message: str):
    return jsonify({"statusCode": status_code, "success": False, "message": message}), status_code


def json_body() -> dict:
    """Request body as a dict; anything else is a client error."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def optional_field(payload: dict, *names: str) -> Optional[Any]:
    """First present key among camelCase/snake_case aliases."""
    for name in names:
        if name in payload:
            return payload[name]
    return None


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return error_response(e.status_code, str(e))

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return error_response(e.code or 500, e.description or e.name)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return error_response(500, f"Internal server error: {e}")
        return error_response(500, "Internal server error")
