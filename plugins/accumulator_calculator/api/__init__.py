"""API routes for the Accumulator Calculator plugin."""

from __future__ import annotations

import math
from typing import Any, Literal

from flask import Blueprint, Response, current_app, request
from pydantic import Field, FiniteFloat, model_validator

from common.errors import NotFoundAppError, ValidationAppError
from common.responses import guarded
from common.validation import SchemaModel, parse_request

from ..core import (
    Accumulator,
    CalculatorSession,
    CalculatorSettings,
    Evaluation,
    SessionNotFoundError,
    SessionStore,
    default_operations,
    describe_sequence,
    format_number,
    load_settings,
    operation_kind,
    serialize_entry,
)

_STORE_KEY = "accumulator_calculator.sessions"
_SETTINGS_KEY = "accumulator_calculator.settings"
_INVALID_REQUEST = "calculator.invalid_request"


class OperandPayload(SchemaModel):
    value: FiniteFloat | None = None
    variable: str | None = Field(default=None, min_length=1, max_length=64)

    @model_validator(mode="after")
    def _exactly_one(self) -> "OperandPayload":
        if (self.value is None) == (self.variable is None):
            raise ValueError("Provide exactly one of 'value' or 'variable'")
        return self


class OperationPayload(SchemaModel):
    symbol: str = Field(min_length=1, max_length=16)


class VariableValuePayload(SchemaModel):
    value: FiniteFloat


class EntryPayload(SchemaModel):
    kind: Literal["constant", "variable", "operation"]
    value: FiniteFloat | None = None
    name: str | None = Field(default=None, min_length=1, max_length=64)
    symbol: str | None = Field(default=None, min_length=1, max_length=16)

    @model_validator(mode="after")
    def _field_for_kind(self) -> "EntryPayload":
        required = {"constant": "value", "variable": "name", "operation": "symbol"}[self.kind]
        if getattr(self, required) is None:
            raise ValueError(f"'{self.kind}' entries require '{required}'")
        return self


class EvaluatePayload(SchemaModel):
    entries: list[EntryPayload]
    variables: dict[str, FiniteFloat] | None = None


api_bp = Blueprint("accumulator_calculator_api", __name__, url_prefix="/api/accumulator_calculator")


@api_bp.record_once
def _init_store(state) -> None:
    raw = state.app.config.get("PLUGIN_SETTINGS", {}).get("accumulator_calculator", {})
    settings = load_settings(raw)
    state.app.extensions[_SETTINGS_KEY] = settings
    state.app.extensions[_STORE_KEY] = SessionStore(
        ttl=settings.session_ttl,
        max_sessions=settings.max_sessions,
        precision=settings.precision,
    )


def _settings() -> CalculatorSettings:
    return current_app.extensions[_SETTINGS_KEY]


def _store() -> SessionStore:
    return current_app.extensions[_STORE_KEY]


def _session(session_id: str) -> CalculatorSession:
    try:
        return _store().get(session_id)
    except SessionNotFoundError as exc:
        raise NotFoundAppError(
            message="Session expired or not found",
            code="calculator.session_not_found",
        ) from exc


def _log_full(limit: int) -> ValidationAppError:
    return ValidationAppError(
        message=f"Entry log is limited to {limit} entries",
        code="calculator.log_full",
        status_code=422,
    )


def _ensure_room(accumulator: Accumulator) -> None:
    limit = _settings().max_entries
    if len(accumulator) >= limit:
        raise _log_full(limit)


def _json_body() -> dict[str, Any]:
    return request.get_json(silent=True) or {}


def _evaluation_view(evaluation: Evaluation, precision: int) -> dict[str, Any]:
    result = evaluation.result
    return {
        # Non-finite values have no JSON literal; ``formatted`` still carries them.
        "result": result if result is not None and math.isfinite(result) else None,
        "formatted": format_number(result, precision) if result is not None else None,
        "pending": evaluation.is_pending,
        "description": evaluation.description,
        "sequence": describe_sequence(evaluation),
    }


def _state_view(session: CalculatorSession) -> dict[str, Any]:
    accumulator = session.accumulator
    view = _evaluation_view(session.evaluate(), accumulator.precision)
    view["session_id"] = session.session_id
    view["entries"] = [serialize_entry(entry) for entry in accumulator.entries]
    view["variables"] = dict(session.variables)
    return view


@api_bp.get("/operations")
def operations() -> Response:
    def _list() -> dict[str, Any]:
        table = default_operations()
        return {
            "operations": [
                {"symbol": symbol, "kind": operation_kind(operation)}
                for symbol, operation in table.items()
            ]
        }

    return guarded(_list, fallback_code="calculator.internal")


@api_bp.post("/sessions")
def create_session() -> Response:
    def _create() -> tuple[dict[str, Any], int]:
        session = _store().create()
        with session.lock:
            return _state_view(session), 201

    return guarded(_create, fallback_code="calculator.internal")


@api_bp.get("/sessions/<session_id>")
def session_state(session_id: str) -> Response:
    def _state() -> dict[str, Any]:
        session = _session(session_id)
        with session.lock:
            return _state_view(session)

    return guarded(_state, fallback_code="calculator.internal")


@api_bp.delete("/sessions/<session_id>")
def delete_session(session_id: str) -> Response:
    def _delete() -> dict[str, Any]:
        try:
            _store().delete(session_id)
        except SessionNotFoundError as exc:
            raise NotFoundAppError(
                message="Session expired or not found",
                code="calculator.session_not_found",
            ) from exc
        return {"session_id": session_id, "deleted": True}

    return guarded(_delete, fallback_code="calculator.internal")


@api_bp.post("/sessions/<session_id>/operand")
def set_operand(session_id: str) -> Response:
    def _operand() -> dict[str, Any]:
        payload = parse_request(OperandPayload, _json_body(), code=_INVALID_REQUEST)
        session = _session(session_id)
        with session.lock:
            _ensure_room(session.accumulator)
            if payload.variable is not None:
                session.accumulator.set_variable_operand(payload.variable)
            else:
                session.accumulator.set_operand(payload.value)
            return _state_view(session)

    return guarded(_operand, fallback_code="calculator.internal")


@api_bp.post("/sessions/<session_id>/operation")
def perform_operation(session_id: str) -> Response:
    def _operation() -> dict[str, Any]:
        payload = parse_request(OperationPayload, _json_body(), code=_INVALID_REQUEST)
        session = _session(session_id)
        with session.lock:
            accumulator = session.accumulator
            limit = _settings().max_entries
            full = len(accumulator) >= limit
            applied = accumulator.perform_operation(payload.symbol)
            # Ignored symbols are no-ops even on a full log.
            if applied and full:
                accumulator.undo()
                raise _log_full(limit)
            view = _state_view(session)
        view["applied"] = applied
        return view

    return guarded(_operation, fallback_code="calculator.internal")


@api_bp.put("/sessions/<session_id>/variables/<name>")
def set_variable(session_id: str, name: str) -> Response:
    def _bind() -> dict[str, Any]:
        payload = parse_request(VariableValuePayload, _json_body(), code=_INVALID_REQUEST)
        session = _session(session_id)
        with session.lock:
            session.set_variable(name, payload.value)
            return _state_view(session)

    return guarded(_bind, fallback_code="calculator.internal")


@api_bp.delete("/sessions/<session_id>/variables/<name>")
def unset_variable(session_id: str, name: str) -> Response:
    def _unbind() -> dict[str, Any]:
        session = _session(session_id)
        with session.lock:
            session.unset_variable(name)
            return _state_view(session)

    return guarded(_unbind, fallback_code="calculator.internal")


@api_bp.post("/sessions/<session_id>/undo")
def undo(session_id: str) -> Response:
    def _undo() -> dict[str, Any]:
        session = _session(session_id)
        with session.lock:
            session.accumulator.undo()
            return _state_view(session)

    return guarded(_undo, fallback_code="calculator.internal")


@api_bp.post("/sessions/<session_id>/reset")
def reset(session_id: str) -> Response:
    def _reset() -> dict[str, Any]:
        session = _session(session_id)
        with session.lock:
            session.reset()
            return _state_view(session)

    return guarded(_reset, fallback_code="calculator.internal")


@api_bp.post("/evaluate")
def evaluate() -> Response:
    def _evaluate() -> dict[str, Any]:
        payload = parse_request(EvaluatePayload, _json_body(), code=_INVALID_REQUEST)
        settings = _settings()
        if len(payload.entries) > settings.max_entries:
            raise _log_full(settings.max_entries)
        accumulator = Accumulator(precision=settings.precision)
        for entry in payload.entries:
            if entry.kind == "constant":
                accumulator.set_operand(entry.value)
            elif entry.kind == "variable":
                accumulator.set_variable_operand(entry.name)
            else:
                accumulator.perform_operation(entry.symbol)
        view = _evaluation_view(accumulator.evaluate(payload.variables), settings.precision)
        view["entries"] = [serialize_entry(item) for item in accumulator.entries]
        return view

    return guarded(_evaluate, fallback_code="calculator.internal")


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "operations",
    "create_session",
    "session_state",
    "delete_session",
    "set_operand",
    "perform_operation",
    "set_variable",
    "unset_variable",
    "undo",
    "reset",
    "evaluate",
]
