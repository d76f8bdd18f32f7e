from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .base import StepValidationResult


class StaticStepValidator:
    """Validator that returns a canned outcome, for dry runs and tests."""

    def __init__(self, valid: bool = True, errors: dict[str, str] | None = None) -> None:
        self.valid = valid
        self.errors = dict(errors or {})
        self.calls: list[tuple[int, list[str]]] = []

    async def __call__(
        self, step_index: int, field_ids: list[str], answers: Mapping[str, Any]
    ) -> StepValidationResult:
        self.calls.append((step_index, list(field_ids)))
        return StepValidationResult(valid=self.valid, errors=dict(self.errors))
