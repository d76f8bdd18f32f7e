from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, TypedDict, Union


class StepValidationResult(TypedDict, total=False):
    valid: bool
    errors: dict[str, str]


class StepValidator(Protocol):
    async def __call__(
        self, step_index: int, field_ids: list[str], answers: Mapping[str, Any]
    ) -> Union[bool, StepValidationResult]: ...
