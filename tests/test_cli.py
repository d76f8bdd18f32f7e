import json
import sys
from pathlib import Path

import pytest
import typer
import yaml

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from form_runtime.cli.main import score, steps, validate, visible

SAMPLES = Path(__file__).resolve().parents[1] / "forms"
SAMPLE_FORM = SAMPLES / "sample_onboarding_quiz.yaml"
SAMPLE_ANSWERS = SAMPLES / "sample_onboarding_answers.yaml"


def _write_answers(tmp_path, answers):
    path = tmp_path / "answers.yaml"
    path.write_text(yaml.safe_dump(answers), encoding="utf-8")
    return path


def test_cli_visible(capsys):
    visible(SAMPLE_FORM, SAMPLE_ANSWERS)
    data = json.loads(capsys.readouterr().out)
    assert "other_role" in data["visibleFieldIds"]


def test_cli_visible_hides_conditional_field(tmp_path, capsys):
    visible(SAMPLE_FORM, _write_answers(tmp_path, {"role": "Engineer"}))
    data = json.loads(capsys.readouterr().out)
    assert "other_role" not in data["visibleFieldIds"]


def test_cli_score_sample(capsys):
    score(SAMPLE_FORM, SAMPLE_ANSWERS)
    data = json.loads(capsys.readouterr().out)
    assert data["earned"] == 5
    assert data["possible"] == 7
    assert data["percentage"] == 71
    assert data["passed"] is True
    assert data["grade"] == "C"


def test_cli_score_with_explicit_threshold(capsys):
    score(SAMPLE_FORM, SAMPLE_ANSWERS, passing_score=90)
    data = json.loads(capsys.readouterr().out)
    assert data["passed"] is False


def test_cli_validate_failure_exits(tmp_path, capsys):
    answers = _write_answers(tmp_path, {"role": "other", "other_role": "ab"})
    with pytest.raises(typer.Exit) as exc:
        validate(SAMPLE_FORM, answers)
    assert exc.value.exit_code == 1
    data = json.loads(capsys.readouterr().out)
    assert data["errors"]["other_role"] == "Please use at least 3 characters"


def test_cli_steps_advance(capsys):
    steps(SAMPLE_FORM, SAMPLE_ANSWERS, step=0, advance=True)
    data = json.loads(capsys.readouterr().out)
    assert data["moved"] is True
    assert data["view"]["step_id"] == "quiz"


def test_cli_missing_form_exits(tmp_path):
    with pytest.raises(typer.Exit):
        visible(tmp_path / "missing.yaml", SAMPLE_ANSWERS)
