"""Standardized JSON response helpers."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from flask import Response, jsonify

from .errors import AppError, ensure_app_error
from .logging import get_logger

logger = get_logger("responses")


def ok(data: Any, *, status: int = 200) -> Response:
    """Return a success envelope."""

    response = jsonify({"success": True, "data": data})
    response.status_code = status
    return response


def fail(error: AppError | Mapping[str, Any], *, status: int | None = None) -> Response:
    """Return a standardized failure envelope."""

    if isinstance(error, AppError):
        response = jsonify({"success": False, "error": error.to_dict()})
        response.status_code = status or error.status_code
        return response

    response = jsonify({"success": False, "error": dict(error)})
    response.status_code = status or 400
    return response


def guarded(callable_: Callable[[], Any], *, fallback_code: str) -> Response:
    """Run a view body and wrap its outcome in the response envelopes.

    Views may return plain data, a ``(data, status)`` tuple or a finished
    :class:`Response`. :class:`AppError` becomes a failure envelope; anything
    else is logged and reported as ``fallback_code``.
    """

    try:
        result = callable_()
    except AppError as exc:
        return fail(exc)
    except Exception as exc:
        logger.exception("unhandled error in %s", fallback_code)
        return fail(ensure_app_error(exc, fallback_code=fallback_code))
    if isinstance(result, Response):
        return result
    if isinstance(result, tuple):
        payload, status = result
        return ok(payload, status=status)
    return ok(result)


__all__ = ["ok", "fail", "guarded"]
