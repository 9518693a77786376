from __future__ import annotations

from flask import jsonify

from ..app_logger import get_logger
from ..core.exceptions import DomainError

logger = get_logger("http")


def error_response(err: DomainError):
    """Translate a domain error into the JSON body + status the UI expects."""
    body = {"message": err.message or str(err), "code": err.code}
    body.update(err.details)
    return jsonify(body), err.status_code


def unexpected_error(message: str, err: Exception):
    logger.exception("%s: %s", message, err)
    return jsonify({"message": message, "error": str(err)}), 500
