import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from form_runtime.core.navigator import NavigationError, NavigatorState, StepNavigator
from form_runtime.core.types import ConditionalRule, Field, FormStep, MultiStepConfig
from form_runtime.validators.rule_validator import RuleStepValidator
from form_runtime.validators.static_validator import StaticStepValidator


def _fields():
    return [
        Field(id="name", type="short-answer", required=True, step_id="s1"),
        Field(id="email", type="email", step_id="s2"),
        Field(
            id="company",
            type="short-answer",
            required=True,
            step_id="s2",
            conditional_rules=[
                ConditionalRule(source_field_id="employed", operator="equals", value="yes")
            ],
        ),
        Field(id="employed", type="radio", step_id="s2"),
        Field(id="notes", type="textarea", step_id="s3"),
    ]


def _config(allow_back=True):
    return MultiStepConfig(
        enabled=True,
        steps=[
            FormStep(id="s1", title="You", order=0, field_ids=["name"]),
            FormStep(id="s2", title="Work", description="Where you work", order=1,
                     field_ids=["email", "employed", "company"]),
            FormStep(id="s3", title="Extra", order=2, field_ids=["notes"]),
        ],
        show_progress_bar=True,
        allow_back_navigation=allow_back,
    )


def test_previous_blocked_without_back_navigation():
    navigator = StepNavigator(_config(allow_back=False), _fields())
    state = NavigatorState()
    assert navigator.previous(state) is False
    assert state.step_index == 0

    state.step_index = 2
    assert navigator.previous(state) is False
    assert state.step_index == 2


def test_failed_validation_keeps_index_and_skips_callback():
    changes = []
    validator = StaticStepValidator(valid=False, errors={"name": "This field is required"})
    navigator = StepNavigator(_config(), _fields(), validator=validator, on_step_change=changes.append)
    state = NavigatorState()

    moved = asyncio.run(navigator.next(state, {}))

    assert moved is False
    assert state.step_index == 0
    assert changes == []
    assert state.errors == {"name": "This field is required"}
    assert state.validation_in_flight is False


def test_next_advances_and_notifies():
    changes = []
    navigator = StepNavigator(_config(), _fields(), on_step_change=changes.append)
    state = NavigatorState()

    assert asyncio.run(navigator.next(state, {})) is True
    assert asyncio.run(navigator.next(state, {})) is True
    assert asyncio.run(navigator.next(state, {})) is False
    assert state.step_index == 2
    assert changes == [1, 2]


def test_previous_moves_back_without_validation():
    validator = StaticStepValidator(valid=False)
    changes = []
    navigator = StepNavigator(_config(), _fields(), validator=validator, on_step_change=changes.append)
    state = NavigatorState(step_index=2)

    assert navigator.previous(state) is True
    assert state.step_index == 1
    assert changes == [1]
    assert validator.calls == []


def test_validator_only_sees_visible_fields_of_current_step():
    validator = StaticStepValidator(valid=True)
    navigator = StepNavigator(_config(), _fields(), validator=validator)
    state = NavigatorState(step_index=1)

    asyncio.run(navigator.next(state, {"employed": "no"}))

    assert validator.calls == [(1, ["email", "employed"])]


def test_boolean_validator_result_is_accepted():
    async def reject(step_index, field_ids, answers):
        return False

    navigator = StepNavigator(_config(), _fields(), validator=reject)
    state = NavigatorState()
    assert asyncio.run(navigator.next(state, {})) is False
    assert state.errors == {}


def test_rule_validator_blocks_on_required_field():
    fields = _fields()
    navigator = StepNavigator(_config(), fields, validator=RuleStepValidator(fields))
    state = NavigatorState()

    assert asyncio.run(navigator.next(state, {})) is False
    assert state.errors == {"name": "This field is required"}

    assert asyncio.run(navigator.next(state, {"name": "Ada"})) is True
    assert state.errors == {}


def test_hidden_required_field_does_not_block():
    fields = _fields()
    navigator = StepNavigator(_config(), fields, validator=RuleStepValidator(fields))
    state = NavigatorState(step_index=1)

    assert asyncio.run(navigator.next(state, {"employed": "no"})) is True

    state = NavigatorState(step_index=1)
    assert asyncio.run(navigator.next(state, {"employed": "yes"})) is False
    assert state.errors == {"company": "This field is required"}


def test_validator_exception_propagates_and_clears_flag():
    async def broken(step_index, field_ids, answers):
        raise RuntimeError("validator misconfigured")

    navigator = StepNavigator(_config(), _fields(), validator=broken)
    state = NavigatorState()

    with pytest.raises(RuntimeError):
        asyncio.run(navigator.next(state, {}))
    assert state.validation_in_flight is False
    assert state.step_index == 0


def test_next_refused_while_validation_in_flight():
    validator = StaticStepValidator(valid=True)
    navigator = StepNavigator(_config(), _fields(), validator=validator)
    state = NavigatorState(validation_in_flight=True)

    assert asyncio.run(navigator.next(state, {})) is False
    assert validator.calls == []


def test_submit_only_from_final_step():
    navigator = StepNavigator(_config(), _fields(), validator=StaticStepValidator(valid=True))
    state = NavigatorState(step_index=1)
    assert asyncio.run(navigator.submit(state, {})) is False
    assert state.submitted is False

    state.step_index = 2
    assert asyncio.run(navigator.submit(state, {})) is True
    assert state.submitted is True
    assert navigator.previous(state) is False


def test_submit_blocked_by_failed_validation():
    navigator = StepNavigator(_config(), _fields(), validator=StaticStepValidator(valid=False))
    state = NavigatorState(step_index=2)
    assert asyncio.run(navigator.submit(state, {})) is False
    assert state.submitted is False


def test_view_reports_visible_subset_and_progress():
    navigator = StepNavigator(_config(), _fields())
    view = navigator.view(NavigatorState(step_index=1), {"employed": "yes"})

    assert view.title == "Work"
    assert view.description == "Where you work"
    assert view.field_ids == ["email", "employed", "company"]
    assert view.is_first is False
    assert view.is_final is False
    assert view.can_go_back is True
    assert view.progress == pytest.approx(2 / 3)


def test_steps_are_ordered_by_order():
    config = MultiStepConfig(
        enabled=True,
        steps=[
            FormStep(id="late", title="Late", order=5),
            FormStep(id="early", title="Early", order=1),
        ],
    )
    navigator = StepNavigator(config, [])
    assert navigator.view(NavigatorState(), {}).step_id == "early"


def test_out_of_range_state_raises():
    navigator = StepNavigator(_config(), _fields())
    with pytest.raises(NavigationError):
        navigator.view(NavigatorState(step_index=7), {})


def test_no_steps_configured():
    navigator = StepNavigator(MultiStepConfig(enabled=True), [])
    state = NavigatorState()
    assert navigator.view(state, {}) is None
    assert asyncio.run(navigator.next(state, {})) is False
