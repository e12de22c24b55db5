"""Accumulator calculator plugin manifest."""

manifest = {
    "title": "Accumulator Calculator",
    "summary": "Calculator-style entry log with live variable rebinding, undo, and a running trace of the computation.",
    "category": "General Utilities",
    "blueprint": "accumulator_calculator",
}

__all__ = ["manifest"]
