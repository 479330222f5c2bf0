from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request

from ..core.exceptions import ConflictError, DomainError, NotFoundError, StorageError, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (StorageError, 503),
)


def error_response(error: DomainError):
    status = 400
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            status = code
            break

    body: dict[str, Any] = {"success": False, "message": str(error)}
    if isinstance(error, ConflictError) and error.record_id is not None:
        body["record_id"] = error.record_id
    return jsonify(body), status


def json_endpoint(view):
    """Turn domain errors into JSON responses; anything else is a logged 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("[http] unhandled error on %s %s", request.method, request.path)
            return jsonify({"success": False, "message": "Internal server error"}), 500

    return wrapper


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_date(name: str) -> Optional[date]:
    value = request.args.get(name)
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be a date in YYYY-MM-DD format")
