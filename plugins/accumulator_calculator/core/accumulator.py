"""Log-replay accumulator engine.

The engine records what was entered and derives everything else by replaying
that log. Binary operators apply strictly in entry order (calculator style),
so ``3 + 4 × 5 =`` is ``(3 + 4) × 5``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Mapping, NamedTuple

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
)


@dataclass(frozen=True, slots=True)
class ConstantOperand:
    value: float


@dataclass(frozen=True, slots=True)
class VariableOperand:
    name: str


@dataclass(frozen=True, slots=True)
class OperationToken:
    symbol: str


Entry = ConstantOperand | VariableOperand | OperationToken


class Evaluation(NamedTuple):
    result: float | None
    is_pending: bool
    description: str


@dataclass(slots=True)
class _Pending:
    function: Callable[[float, float], float]
    first_operand: float
    representation: str

    def perform(self, second_operand: float) -> float:
        return self.function(self.first_operand, second_operand)


class Accumulator:
    """Append-only entry log evaluated on demand against variable bindings."""

    def __init__(
        self,
        *,
        precision: int = DEFAULT_PRECISION,
        operations: Mapping[str, Operation] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._precision = precision
        self._operations = operations if operations is not None else default_operations(rng)
        self._entries: list[Entry] = []

    @property
    def operations(self) -> Mapping[str, Operation]:
        return self._operations

    @property
    def precision(self) -> int:
        return self._precision

    @property
    def entries(self) -> tuple[Entry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def set_operand(self, value: float) -> None:
        self._entries.append(ConstantOperand(float(value)))

    def set_variable_operand(self, name: str) -> None:
        self._entries.append(VariableOperand(name))

    def perform_operation(self, symbol: str) -> bool:
        """Append ``symbol`` if it is known and applicable; return whether it was."""

        operation = self._operations.get(symbol)
        if operation is None:
            return False
        if isinstance(operation, (UnaryOperation, BinaryOperation)):
            if self.evaluate().result is None:
                return False
        elif isinstance(operation, EqualsOperation):
            result, is_pending, _ = self.evaluate()
            if result is None or not is_pending:
                return False
        self._entries.append(OperationToken(symbol))
        return True

    def undo(self) -> None:
        if self._entries:
            self._entries.pop()

    def reset(self) -> None:
        self._entries.clear()

    def evaluate(self, variables: Mapping[str, float] | None = None) -> Evaluation:
        """Replay the log against ``variables`` without touching it."""

        bindings = variables or {}
        accumulator: tuple[float, str] | None = None
        pending: list[_Pending] = []
        last_index = len(self._entries) - 1

        for index, entry in enumerate(self._entries):
            if isinstance(entry, ConstantOperand):
                accumulator = (entry.value, format_number(entry.value, self._precision))
                continue
            if isinstance(entry, VariableOperand):
                accumulator = (float(bindings.get(entry.name, 0.0)), entry.name)
                continue

            symbol = entry.symbol
            operation = self._operations[symbol]
            if isinstance(operation, RandomOperation):
                accumulator = (operation.generator(), f"{symbol}()")
            elif isinstance(operation, ConstantOperation):
                accumulator = (operation.value, symbol)
            elif isinstance(operation, UnaryOperation):
                value, representation = accumulator
                accumulator = (operation.function(value), operation.renderer(representation))
            elif isinstance(operation, BinaryOperation):
                value, representation = accumulator
                if pending:
                    # Fold left before stacking the new operator.
                    previous = pending.pop()
                    value = previous.perform(value)
                    representation = f"({previous.representation} {representation})"
                pending.append(_Pending(operation.function, value, f"{representation} {symbol}"))
                accumulator = None
            else:
                resolved = pending.pop()
                value, representation = accumulator
                representation = f"{resolved.representation} {representation}"
                if index != last_index or pending:
                    representation = f"({representation})"
                accumulator = (resolved.perform(value), representation)

        parts = [item.representation for item in pending]
        if accumulator is not None:
            parts.append(accumulator[1])
        result = accumulator[0] if accumulator is not None else None
        return Evaluation(result, bool(pending), " ".join(parts))

    @property
    def result(self) -> float | None:
        return self.evaluate().result

    @property
    def result_is_pending(self) -> bool:
        return self.evaluate().is_pending

    @property
    def description(self) -> str:
        return self.evaluate().description


def describe_sequence(evaluation: Evaluation) -> str:
    """Description with a trailing ellipsis while pending, ``=`` once complete."""

    if not evaluation.description:
        return ""
    suffix = "…" if evaluation.is_pending else "="
    return f"{evaluation.description} {suffix}"


def serialize_entry(entry: Entry) -> dict[str, object]:
    if isinstance(entry, ConstantOperand):
        return {"kind": "constant", "value": entry.value}
    if isinstance(entry, VariableOperand):
        return {"kind": "variable", "name": entry.name}
    return {"kind": "operation", "symbol": entry.symbol}


__all__ = [
    "Accumulator",
    "ConstantOperand",
    "Entry",
    "Evaluation",
    "OperationToken",
    "VariableOperand",
    "describe_sequence",
    "serialize_entry",
]
