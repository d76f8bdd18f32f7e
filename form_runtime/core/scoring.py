from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from .answers import as_selection, is_number, normalize_text, to_number
from .types import NUMBER_FIELD_TYPES, Field, FieldScore, FormDefinition, QuizConfig, ScoreResult

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def points_possible(config: QuizConfig) -> float:
    points = config.points
    if isinstance(points, bool) or not isinstance(points, (int, float)) or not math.isfinite(points):
        return 1
    return points


def is_scorable(config: Optional[QuizConfig]) -> bool:
    if config is None:
        return False
    answer = config.correct_answer
    if answer is None:
        return False
    if isinstance(answer, str) and not answer.strip():
        return False
    if isinstance(answer, (list, tuple)) and not answer:
        return False
    return True


def _match_scalar(field: Field, submitted: Any, config: QuizConfig) -> bool:
    if submitted is None or (isinstance(submitted, str) and not submitted.strip()):
        return False
    correct = config.correct_answer
    if field.type in NUMBER_FIELD_TYPES and is_number(submitted) and is_number(correct):
        return to_number(submitted) == to_number(correct)

    given = normalize_text(submitted, config.case_sensitive)
    expected = normalize_text(correct, config.case_sensitive)
    if config.match_type == "contains":
        return expected in given
    return given == expected


def _selection_set(values: Iterable[Any], case_sensitive: bool) -> set[str]:
    return {normalize_text(v, case_sensitive) for v in values}


def _score_selection(submitted: Any, config: QuizConfig, points: float) -> tuple[bool, float]:
    expected = _selection_set(config.correct_answer, config.case_sensitive)
    given = _selection_set(as_selection(submitted), config.case_sensitive)
    if given == expected:
        return True, points
    if not config.accept_partial_credit:
        return False, 0
    matched = len(given & expected)
    return False, min(points, points * matched / len(expected))


def score_field(field: Field, submitted: Any) -> FieldScore:
    config = field.quiz_config
    points = points_possible(config)
    if isinstance(config.correct_answer, (list, tuple)):
        correct, awarded = _score_selection(submitted, config, points)
    else:
        correct = _match_scalar(field, submitted, config)
        awarded = points if correct else 0

    return FieldScore(
        field_id=field.id,
        correct=correct,
        points_awarded=awarded,
        points_possible=points,
        submitted=submitted,
        correct_answer=config.correct_answer,
        explanation=config.explanation,
    )


def _percentage(per_field: list[FieldScore]) -> int:
    # scale by the largest field so huge point values cannot overflow the sums
    scale = max((abs(fs.points_possible) for fs in per_field), default=0)
    if not scale:
        return 0
    earned = sum(fs.points_awarded / scale for fs in per_field)
    possible = sum(fs.points_possible / scale for fs in per_field)
    if not possible:
        return 0
    return round_half_up(earned / possible * 100)


def score_quiz(
    fields: Iterable[Field],
    answers: Mapping[str, Any],
    passing_score: Optional[float] = None,
) -> ScoreResult:
    """Score the answers against every field that carries a correct answer."""
    per_field: list[FieldScore] = []
    for field in fields:
        if field.quiz_config is None:
            continue
        if not is_scorable(field.quiz_config):
            logger.debug("Field %s has no correct answer; excluded from scoring", field.id)
            continue
        per_field.append(score_field(field, answers.get(field.id)))

    earned = sum(fs.points_awarded for fs in per_field)
    possible = sum(fs.points_possible for fs in per_field)
    percentage = _percentage(per_field)
    passed = passing_score is None or percentage >= passing_score
    return ScoreResult(
        earned=earned,
        possible=possible,
        percentage=percentage,
        passed=passed,
        per_field=per_field,
    )


def score_submission(form: FormDefinition, answers: Mapping[str, Any]) -> Optional[ScoreResult]:
    """Score a submission when the form runs in quiz mode, else return None."""
    quiz_mode = form.quiz_mode
    if quiz_mode is None or not quiz_mode.enabled:
        return None
    if not any(is_scorable(f.quiz_config) for f in form.fields):
        return None
    return score_quiz(form.fields, answers, quiz_mode.passing_score)


def format_score(result: ScoreResult) -> str:
    possible = f"{result.possible:g}"
    return f"{result.earned:.1f} / {possible} ({result.percentage}%)"


def grade_letter(percentage: float) -> str:
    if percentage >= 90:
        return "A"
    if percentage >= 80:
        return "B"
    if percentage >= 70:
        return "C"
    if percentage >= 60:
        return "D"
    return "F"
