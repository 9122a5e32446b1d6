"""Explicit outcomes returned by repositories, the unit-of-work and patching."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Outcome(str, Enum):
    OK = "ok"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    CONFLICT = "conflict"
    FAILURE = "failure"


@dataclass(frozen=True)
class Result:
    outcome: Outcome
    value: Any = None
    detail: str = ""
    errors: Any = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.OK

    @classmethod
    def success(cls, value: Any = None) -> Result:
        return cls(Outcome.OK, value=value)

    @classmethod
    def invalid(cls, detail: str, errors: Any = None) -> Result:
        return cls(Outcome.INVALID, detail=detail, errors=errors)

    @classmethod
    def not_found(cls, detail: str) -> Result:
        return cls(Outcome.NOT_FOUND, detail=detail)

    @classmethod
    def validation_failed(cls, errors: Any, detail: str = "Validation failed.") -> Result:
        return cls(Outcome.VALIDATION_FAILED, detail=detail, errors=errors)

    @classmethod
    def conflict(cls, detail: str) -> Result:
        return cls(Outcome.CONFLICT, detail=detail)

    @classmethod
    def failure(cls, detail: str) -> Result:
        return cls(Outcome.FAILURE, detail=detail)
