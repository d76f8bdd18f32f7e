"""Build form definitions from the camelCase documents the builder stores."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

import yaml

from .types import (
    ConditionalRule,
    Field,
    FormDefinition,
    FormStep,
    MultiStepConfig,
    QuizConfig,
    QuizModeConfig,
    ValidationRule,
)


class FormDefinitionError(ValueError):
    """Raised when a form document cannot be turned into a definition."""


def _require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise FormDefinitionError(f"{what} must be a mapping, got {type(data).__name__}")
    return data


def _list_of(data: Any, what: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise FormDefinitionError(f"{what} must be a list")
    return data


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_rule(data: Any) -> ConditionalRule:
    data = _require_mapping(data, "Conditional rule")
    source = data.get("sourceFieldId")
    if not source:
        raise FormDefinitionError("Conditional rule is missing sourceFieldId")
    return ConditionalRule(
        id=data.get("id"),
        source_field_id=str(source),
        operator=str(data.get("operator", "")),
        value=data.get("value"),
        action=data.get("action") or "show",
        logic_operator=data.get("logicOperator") or "AND",
    )


def parse_validation_rule(data: Any) -> ValidationRule:
    data = _require_mapping(data, "Validation rule")
    return ValidationRule(
        type=str(data.get("type", "")),
        value=data.get("value"),
        message=data.get("message") or "",
    )


def parse_quiz_config(data: Any) -> QuizConfig:
    data = _require_mapping(data, "Quiz config")
    return QuizConfig(
        correct_answer=data.get("correctAnswer"),
        points=data.get("points"),
        explanation=data.get("explanation") or "",
        case_sensitive=bool(data.get("caseSensitive", False)),
        match_type=data.get("matchType") or "exact",
        accept_partial_credit=bool(data.get("acceptPartialCredit", False)),
    )


def parse_field(data: Any, position: int = 0) -> Field:
    data = _require_mapping(data, "Field")
    field_id = data.get("id")
    if not field_id:
        raise FormDefinitionError(f"Field #{position + 1} is missing an id")
    rules = data.get("conditionalRules")
    if rules is None:
        rules = data.get("conditionalLogic")
    quiz = data.get("quizConfig")
    return Field(
        id=str(field_id),
        type=str(data.get("type", "text")),
        label=data.get("label") or "",
        required=bool(data.get("required", False)),
        options=[str(o) for o in _list_of(data.get("options"), f"{field_id}.options")],
        conditional_rules=[parse_rule(r) for r in _list_of(rules, f"{field_id}.conditionalRules")],
        validation=[
            parse_validation_rule(r) for r in _list_of(data.get("validation"), f"{field_id}.validation")
        ],
        quiz_config=parse_quiz_config(quiz) if quiz is not None else None,
        order=_as_int(data.get("order"), position),
        step_id=data.get("stepId"),
    )


def parse_step(data: Any, position: int = 0) -> FormStep:
    data = _require_mapping(data, "Step")
    step_id = data.get("id")
    if not step_id:
        raise FormDefinitionError(f"Step #{position + 1} is missing an id")
    return FormStep(
        id=str(step_id),
        title=data.get("title") or "",
        description=data.get("description") or "",
        order=_as_int(data.get("order"), position),
        field_ids=[str(fid) for fid in _list_of(data.get("fieldIds"), f"{step_id}.fieldIds")],
    )


def parse_multi_step(data: Any) -> MultiStepConfig:
    data = _require_mapping(data, "multiStep")
    return MultiStepConfig(
        enabled=bool(data.get("enabled", False)),
        steps=[parse_step(s, i) for i, s in enumerate(_list_of(data.get("steps"), "multiStep.steps"))],
        show_progress_bar=bool(data.get("showProgressBar", True)),
        allow_back_navigation=bool(data.get("allowBackNavigation", True)),
    )


def parse_quiz_mode(data: Any) -> QuizModeConfig:
    data = _require_mapping(data, "quizMode")
    passing = data.get("passingScore")
    if isinstance(passing, bool) or not isinstance(passing, (int, float)):
        passing = None
    return QuizModeConfig(
        enabled=bool(data.get("enabled", False)),
        passing_score=passing,
        show_score_immediately=bool(data.get("showScoreImmediately", True)),
        show_correct_answers=bool(data.get("showCorrectAnswers", True)),
        show_explanations=bool(data.get("showExplanations", True)),
        allow_retakes=bool(data.get("allowRetakes", False)),
    )


def parse_form(data: Any) -> FormDefinition:
    data = _require_mapping(data, "Form")
    fields = [parse_field(f, i) for i, f in enumerate(_list_of(data.get("fields"), "fields"))]
    seen: set[str] = set()
    for f in fields:
        if f.id in seen:
            raise FormDefinitionError(f"Duplicate field id: {f.id}")
        seen.add(f.id)

    multi_step = data.get("multiStep")
    quiz_mode = data.get("quizMode")
    return FormDefinition(
        id=str(data.get("id") or ""),
        title=data.get("title") or "",
        fields=fields,
        multi_step=parse_multi_step(multi_step) if multi_step is not None else None,
        quiz_mode=parse_quiz_mode(quiz_mode) if quiz_mode is not None else None,
    )


def load_document(path: Path) -> Any:
    """Read a YAML or JSON document from disk."""
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise FormDefinitionError(f"Could not parse {path}: {exc}") from exc


def load_form(path: Union[Path, str]) -> FormDefinition:
    return parse_form(load_document(Path(path)))


def load_answers(path: Union[Path, str]) -> dict[str, Any]:
    data = load_document(Path(path))
    if data is None:
        return {}
    return _require_mapping(data, "Answers")
