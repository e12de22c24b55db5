"""Operator table and number formatting for the accumulator calculator."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping

import numpy as np

DEFAULT_PRECISION = 6


@dataclass(frozen=True, slots=True)
class RandomOperation:
    """Zero-argument operation drawing a fresh value on every evaluation."""

    generator: Callable[[], float]


@dataclass(frozen=True, slots=True)
class ConstantOperation:
    value: float


@dataclass(frozen=True, slots=True)
class UnaryOperation:
    function: Callable[[float], float]
    renderer: Callable[[str], str]


@dataclass(frozen=True, slots=True)
class BinaryOperation:
    function: Callable[[float, float], float]


@dataclass(frozen=True, slots=True)
class EqualsOperation:
    """Resolves the most recent pending binary operation."""


Operation = RandomOperation | ConstantOperation | UnaryOperation | BinaryOperation | EqualsOperation


def _ieee(ufunc: Callable[..., object]) -> Callable[..., float]:
    # numpy follows IEEE-754 (inf/nan) where ``math`` raises.
    def wrapped(*args: float) -> float:
        with np.errstate(all="ignore"):
            return float(ufunc(*(np.float64(arg) for arg in args)))

    return wrapped


def _prefix(symbol: str) -> Callable[[str], str]:
    return lambda representation: f"{symbol}({representation})"


def _percent(value: float) -> float:
    return np.divide(value, 100.0)


def default_operations(rng: random.Random | None = None) -> Mapping[str, Operation]:
    """Build the default, read-only symbol table."""

    rng = rng or random.Random()
    subtract = BinaryOperation(_ieee(np.subtract))
    table: dict[str, Operation] = {
        "RAN": RandomOperation(rng.random),
        "π": ConstantOperation(math.pi),
        "e": ConstantOperation(math.e),
        "√": UnaryOperation(_ieee(np.sqrt), _prefix("√")),
        "cos": UnaryOperation(_ieee(np.cos), _prefix("cos")),
        "eˣ": UnaryOperation(_ieee(np.exp), _prefix("e^")),
        "ln": UnaryOperation(_ieee(np.log), _prefix("ln")),
        "1/x": UnaryOperation(_ieee(np.reciprocal), lambda rep: f"1 / ({rep})"),
        "%": UnaryOperation(_ieee(_percent), lambda rep: f"({rep}) / 100"),
        "±": UnaryOperation(_ieee(np.negative), _prefix("-")),
        "×": BinaryOperation(_ieee(np.multiply)),
        "÷": BinaryOperation(_ieee(np.divide)),
        "+": BinaryOperation(_ieee(np.add)),
        "−": subtract,
        "-": subtract,
        "=": EqualsOperation(),
    }
    return MappingProxyType(table)


def operation_kind(operation: Operation) -> str:
    if isinstance(operation, RandomOperation):
        return "random"
    if isinstance(operation, ConstantOperation):
        return "constant"
    if isinstance(operation, UnaryOperation):
        return "unary"
    if isinstance(operation, BinaryOperation):
        return "binary"
    return "equals"


def format_number(value: float, precision: int = DEFAULT_PRECISION) -> str:
    """Render ``value`` with at most ``precision`` fractional digits.

    Trailing zeros are trimmed and no grouping separators are emitted, so the
    output does not depend on the process locale.
    """

    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = f"{value:.{max(precision, 0)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text


__all__ = [
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
]
