"""Validation primitives for plugin APIs."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

import pydantic
from pydantic import BaseModel

from .errors import ValidationAppError


class ValidationError(ValueError):
    """Raised when validation fails."""

    def __init__(self, message: str, *, details: Any | None = None):
        super().__init__(message)
        self.details = details


class SchemaModel(BaseModel):
    """Strict base model for request/response validation."""

    model_config = pydantic.ConfigDict(extra="forbid", str_strip_whitespace=True)


TModel = TypeVar("TModel", bound=SchemaModel)


def parse_model(model: type[TModel], payload: Mapping[str, Any] | None) -> TModel:
    payload = payload or {}
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        details = exc.errors(include_url=False, include_context=False, include_input=False)
        raise ValidationError("Invalid request payload", details=details) from exc


def parse_request(model: type[TModel], payload: Mapping[str, Any] | None, *, code: str) -> TModel:
    """Like :func:`parse_model` but raises a :class:`ValidationAppError` tagged ``code``."""

    try:
        return parse_model(model, payload)
    except ValidationError as exc:
        raise ValidationAppError(message=str(exc), code=code, details=exc.details) from exc


__all__ = [
    "ValidationError",
    "SchemaModel",
    "parse_model",
    "parse_request",
]
