"""Step-by-step navigation through a multi-step form.

The navigator is stateless: the current position lives in a
:class:`NavigatorState` owned by the caller and passed into every call, so a
web handler can round-trip it through the client and tests can drive it
without a UI. One state object belongs to one respondent session and calls
against it must not overlap.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..validators.base import StepValidationResult, StepValidator
from .types import Field, FormStep, MultiStepConfig
from .visibility import visible_field_ids

logger = logging.getLogger(__name__)


class NavigationError(ValueError):
    """Raised when a navigator state does not fit the form's steps."""


@dataclass
class NavigatorState:
    step_index: int = 0
    validation_in_flight: bool = False
    errors: dict[str, str] = field(default_factory=dict)
    submitted: bool = False


@dataclass
class StepView:
    index: int
    total: int
    step_id: str
    title: str
    description: str
    field_ids: list[str]
    is_first: bool
    is_final: bool
    can_go_back: bool
    show_progress_bar: bool
    progress: float


def _read_outcome(outcome: Union[bool, StepValidationResult]) -> tuple[bool, dict[str, str]]:
    if isinstance(outcome, Mapping):
        errors = dict(outcome.get("errors") or {})
        return bool(outcome.get("valid", not errors)), errors
    return bool(outcome), {}


class StepNavigator:
    def __init__(
        self,
        config: MultiStepConfig,
        fields: list[Field],
        validator: Optional[StepValidator] = None,
        on_step_change: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.config = config
        self.fields = fields
        self.validator = validator
        self.on_step_change = on_step_change
        self.steps: list[FormStep] = sorted(config.steps, key=lambda s: s.order)

    @property
    def final_index(self) -> int:
        return len(self.steps) - 1

    def _current_step(self, state: NavigatorState) -> Optional[FormStep]:
        if not self.steps:
            return None
        if not 0 <= state.step_index < len(self.steps):
            raise NavigationError(
                f"Step index {state.step_index} is outside 0..{self.final_index}"
            )
        return self.steps[state.step_index]

    def step_field_ids(self, step: FormStep, answers: Mapping[str, Any]) -> list[str]:
        """Fields of ``step`` that are visible for the given answers, in step order."""
        visible = set(visible_field_ids(self.fields, answers))
        return [field_id for field_id in step.field_ids if field_id in visible]

    async def _validate(self, state: NavigatorState, step: FormStep, answers: Mapping[str, Any]) -> bool:
        if self.validator is None:
            state.errors = {}
            return True

        field_ids = self.step_field_ids(step, answers)
        state.validation_in_flight = True
        try:
            outcome = await self.validator(state.step_index, field_ids, answers)
        finally:
            state.validation_in_flight = False

        valid, errors = _read_outcome(outcome)
        state.errors = {} if valid else errors
        return valid

    def _change_step(self, state: NavigatorState, index: int) -> None:
        state.step_index = index
        if self.on_step_change is not None:
            self.on_step_change(index)

    def _busy(self, state: NavigatorState) -> bool:
        if state.validation_in_flight:
            logger.warning("Step validation already in flight; ignoring navigation request")
            return True
        if state.submitted:
            logger.debug("Form already submitted; ignoring navigation request")
            return True
        return False

    async def next(self, state: NavigatorState, answers: Mapping[str, Any]) -> bool:
        """Validate the current step and advance; returns whether the index moved."""
        if self._busy(state):
            return False
        step = self._current_step(state)
        if step is None:
            return False

        if not await self._validate(state, step, answers):
            logger.debug("Step %s blocked by validation: %s", step.id, sorted(state.errors))
            return False
        if state.step_index >= self.final_index:
            return False

        self._change_step(state, state.step_index + 1)
        return True

    def previous(self, state: NavigatorState) -> bool:
        if self._busy(state):
            return False
        self._current_step(state)
        if not self.config.allow_back_navigation or state.step_index <= 0:
            return False
        self._change_step(state, state.step_index - 1)
        return True

    async def submit(self, state: NavigatorState, answers: Mapping[str, Any]) -> bool:
        """Accept the form from the final step once that step validates."""
        if self._busy(state):
            return False
        step = self._current_step(state)
        if step is None or state.step_index != self.final_index:
            return False
        if not await self._validate(state, step, answers):
            return False
        state.submitted = True
        return True

    def view(self, state: NavigatorState, answers: Mapping[str, Any]) -> Optional[StepView]:
        step = self._current_step(state)
        if step is None:
            return None
        index = state.step_index
        return StepView(
            index=index,
            total=len(self.steps),
            step_id=step.id,
            title=step.title,
            description=step.description,
            field_ids=self.step_field_ids(step, answers),
            is_first=index == 0,
            is_final=index == self.final_index,
            can_go_back=self.config.allow_back_navigation and index > 0,
            show_progress_bar=self.config.show_progress_bar,
            progress=(index + 1) / len(self.steps),
        )
