from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..core.types import Field
from ..core.validation import validate_fields
from .base import StepValidationResult


class RuleStepValidator:
    """Checks required flags and validation rules of a step's visible fields."""

    def __init__(self, fields: list[Field]) -> None:
        self.fields = fields

    async def __call__(
        self, step_index: int, field_ids: list[str], answers: Mapping[str, Any]
    ) -> StepValidationResult:
        errors = validate_fields(self.fields, field_ids, answers)
        return StepValidationResult(valid=not errors, errors=errors)
