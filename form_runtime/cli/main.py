from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from ..core.form_loader import FormDefinitionError, load_answers, load_form
from ..core.logging_utils import configure_logging
from ..core.navigator import NavigationError, NavigatorState, StepNavigator
from ..core.scoring import format_score, grade_letter, score_quiz, score_submission
from ..core.settings import engine_settings
from ..core.validation import validate_fields
from ..core.visibility import visible_field_ids
from ..validators.rule_validator import RuleStepValidator

app = typer.Typer(help="Evaluate form definitions against answer sets.")


@app.callback()
def main() -> None:
    configure_logging()


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _load(form_path: Path, answers_path: Path):
    try:
        return load_form(form_path), load_answers(answers_path)
    except (FormDefinitionError, OSError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


@app.command("visible")
def visible(form: Path, answers: Path) -> None:
    """List the fields that are visible for the given answers."""
    form_def, answer_set = _load(form, answers)
    _echo_json({"visibleFieldIds": visible_field_ids(form_def.fields, answer_set)})


@app.command("validate")
def validate(form: Path, answers: Path) -> None:
    """Validate every visible field; exits with 1 when any field fails."""
    form_def, answer_set = _load(form, answers)
    ids = visible_field_ids(form_def.fields, answer_set)
    errors = validate_fields(form_def.fields, ids, answer_set)
    _echo_json({"valid": not errors, "errors": errors})
    if errors:
        raise typer.Exit(1)


@app.command("steps")
def steps(form: Path, answers: Path, step: int = 0, advance: bool = False) -> None:
    """Show a step of a multi-step form, optionally trying to advance past it."""
    form_def, answer_set = _load(form, answers)
    if form_def.multi_step is None or not form_def.multi_step.enabled:
        typer.echo("❌ Form has no enabled multi-step configuration", err=True)
        raise typer.Exit(1)

    navigator = StepNavigator(
        form_def.multi_step,
        form_def.fields,
        validator=RuleStepValidator(form_def.fields),
    )
    state = NavigatorState(step_index=step)
    moved = False
    try:
        if advance:
            moved = asyncio.run(navigator.next(state, answer_set))
        view = navigator.view(state, answer_set)
    except NavigationError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    _echo_json(
        {
            "moved": moved,
            "state": asdict(state),
            "view": asdict(view) if view else None,
        }
    )


@app.command("score")
def score(form: Path, answers: Path, passing_score: float = None) -> None:
    """Score a quiz submission and print the result."""
    form_def, answer_set = _load(form, answers)
    quiz_mode = form_def.quiz_mode
    if passing_score is not None:
        result = score_quiz(form_def.fields, answer_set, passing_score)
    elif quiz_mode is not None and quiz_mode.enabled:
        result = score_submission(form_def, answer_set)
    else:
        result = score_quiz(form_def.fields, answer_set, engine_settings.default_passing_score())

    if result is None:
        _echo_json({"score": None})
        return
    payload = result.to_dict()
    payload["summary"] = format_score(result)
    payload["grade"] = grade_letter(result.percentage)
    _echo_json(payload)


if __name__ == "__main__":
    app()
