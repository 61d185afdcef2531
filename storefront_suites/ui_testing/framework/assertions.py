"""
================================================================================
UI Assertions
================================================================================

Expected-vs-observed checks used by Page Objects and the pricing engine.

A failed check raises AssertionMismatch, which subclasses AssertionError so
pytest reports it as a test failure, and attaches both values to Allure.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import allure
from loguru import logger


@dataclass
class Mismatch:
    """A single field whose observed value differs from the expected one."""
    field: str
    expected: Any
    observed: Any

    def __str__(self) -> str:
        return f"{self.field}: expected {self.expected!r}, observed {self.observed!r}"


class AssertionMismatch(AssertionError):
    """Observed UI state differs from the expected state."""

    def __init__(self, mismatches: Sequence[Mismatch], context: str = ""):
        self.mismatches: List[Mismatch] = list(mismatches)
        self.context = context
        lines = [str(m) for m in self.mismatches]
        header = f"{context} mismatch" if context else "Mismatch"
        super().__init__(f"{header}: " + "; ".join(lines))

    @property
    def fields(self) -> List[str]:
        return [m.field for m in self.mismatches]

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        return {
            m.field: {"expected": m.expected, "observed": m.observed}
            for m in self.mismatches
        }


def raise_mismatches(mismatches: Sequence[Mismatch], context: str = "") -> None:
    """Raise AssertionMismatch if `mismatches` is non-empty."""
    if not mismatches:
        return
    error = AssertionMismatch(mismatches, context)
    logger.error(str(error))
    allure.attach(
        "\n".join(str(m) for m in mismatches),
        name=f"{context or 'Assertion'} mismatch",
        attachment_type=allure.attachment_type.TEXT,
    )
    raise error


def assert_equal(field: str, expected: Any, observed: Any, context: str = "") -> None:
    """Exact equality check for a single observed value."""
    if expected != observed:
        raise_mismatches([Mismatch(field, expected, observed)], context)
    logger.debug(f"{field} == {observed!r}")


__all__ = [
    "AssertionMismatch",
    "Mismatch",
    "assert_equal",
    "raise_mismatches",
]
