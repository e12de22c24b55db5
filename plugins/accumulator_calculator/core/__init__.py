"""Exports for the accumulator calculator core."""

from .accumulator import (
    Accumulator,
    ConstantOperand,
    Entry,
    Evaluation,
    OperationToken,
    VariableOperand,
    describe_sequence,
    serialize_entry,
)
from .operations import (
    DEFAULT_PRECISION,
    BinaryOperation,
    ConstantOperation,
    EqualsOperation,
    Operation,
    RandomOperation,
    UnaryOperation,
    default_operations,
    format_number,
    operation_kind,
)
from .sessions import CalculatorSession, SessionNotFoundError, SessionStore
from .settings import CalculatorSettings, load_settings

__all__ = [
    "Accumulator",
    "ConstantOperand",
    "Entry",
    "Evaluation",
    "OperationToken",
    "VariableOperand",
    "describe_sequence",
    "serialize_entry",
    "DEFAULT_PRECISION",
    "BinaryOperation",
    "ConstantOperation",
    "EqualsOperation",
    "Operation",
    "RandomOperation",
    "UnaryOperation",
    "default_operations",
    "format_number",
    "operation_kind",
    "CalculatorSession",
    "SessionNotFoundError",
    "SessionStore",
    "CalculatorSettings",
    "load_settings",
]
