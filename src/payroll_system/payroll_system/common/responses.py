from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from functools import wraps
from typing import Any

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, NotFoundError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return value.value
    return value


def json_endpoint(view):
    """Translate domain errors into {"success": false, "message": ...} responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except DomainError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except HTTPException:
            raise
        except (KeyError, ValueError) as e:
            return jsonify({"success": False, "message": f"Invalid request: {e}"}), 400
        except Exception:
            logger.exception("Unhandled error in %s", request.path)
            return jsonify({"success": False, "message": "Internal server error"}), 500

    return wrapper


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def date_arg(payload: dict, key: str) -> date:
    value = payload.get(key)
    if not value:
        raise KeyError(key)
    return parse_iso_date(str(value))
