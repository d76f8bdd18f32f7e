from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field as PydanticField

from ..core.form_loader import FormDefinitionError, parse_form
from ..core.logging_utils import configure_logging
from ..core.navigator import NavigationError, NavigatorState, StepNavigator
from ..core.scoring import score_submission
from ..core.types import FormDefinition
from ..core.validation import validate_fields
from ..core.visibility import prune_hidden_answers, visible_field_ids
from ..validators.rule_validator import RuleStepValidator

load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI()


class FormRequest(BaseModel):
    form: dict[str, Any]
    answers: dict[str, Any] = PydanticField(default_factory=dict)


class ValidateRequest(FormRequest):
    model_config = ConfigDict(populate_by_name=True)

    field_ids: list[str] | None = PydanticField(default=None, alias="fieldIds")


class StateModel(BaseModel):
    step_index: int = 0
    validation_in_flight: bool = False
    errors: dict[str, str] = PydanticField(default_factory=dict)
    submitted: bool = False


class StepRequest(FormRequest):
    state: StateModel = PydanticField(default_factory=StateModel)


def _parse(req: FormRequest) -> FormDefinition:
    try:
        return parse_form(req.form)
    except FormDefinitionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _navigator(form: FormDefinition) -> StepNavigator:
    if form.multi_step is None or not form.multi_step.enabled:
        raise HTTPException(status_code=400, detail="Form has no enabled multi-step configuration")
    return StepNavigator(form.multi_step, form.fields, validator=RuleStepValidator(form.fields))


def _step_response(navigator: StepNavigator, state: NavigatorState, answers: dict, moved: bool) -> dict:
    try:
        view = navigator.view(state, answers)
    except NavigationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {
        "moved": moved,
        "state": asdict(state),
        "view": asdict(view) if view else None,
    }


@app.get("/api/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/api/visibility")
def visibility(req: FormRequest) -> dict:
    form = _parse(req)
    return {"visibleFieldIds": visible_field_ids(form.fields, req.answers)}


@app.post("/api/answers/prune")
def prune_answers(req: FormRequest) -> dict:
    form = _parse(req)
    return {"answers": prune_hidden_answers(form.fields, req.answers)}


@app.post("/api/validate")
def validate(req: ValidateRequest) -> dict:
    form = _parse(req)
    field_ids = req.field_ids
    if field_ids is None:
        field_ids = visible_field_ids(form.fields, req.answers)
    errors = validate_fields(form.fields, field_ids, req.answers)
    return {"valid": not errors, "errors": errors}


@app.post("/api/steps/next")
async def next_step(req: StepRequest) -> dict:
    form = _parse(req)
    navigator = _navigator(form)
    state = NavigatorState(**req.state.model_dump())
    try:
        moved = await navigator.next(state, req.answers)
    except NavigationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _step_response(navigator, state, req.answers, moved)


@app.post("/api/steps/previous")
def previous_step(req: StepRequest) -> dict:
    form = _parse(req)
    navigator = _navigator(form)
    state = NavigatorState(**req.state.model_dump())
    try:
        moved = navigator.previous(state)
    except NavigationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _step_response(navigator, state, req.answers, moved)


@app.post("/api/steps/submit")
async def submit_steps(req: StepRequest) -> dict:
    form = _parse(req)
    navigator = _navigator(form)
    state = NavigatorState(**req.state.model_dump())
    try:
        moved = await navigator.submit(state, req.answers)
    except NavigationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _step_response(navigator, state, req.answers, moved)


@app.post("/api/score")
def score(req: FormRequest) -> dict:
    """Recompute a submission's score from the stored form definition."""
    form = _parse(req)
    result = score_submission(form, req.answers)
    if result is None:
        return {"score": None}
    logger.info("Scored form %s: %s/%s", form.id, result.earned, result.possible)
    return {"score": result.to_dict()}
