from dataclasses import dataclass, field
from typing import Any, Union

ScalarAnswer = Union[str, int, float, bool]
AnswerValue = Union[ScalarAnswer, list[str], None]
CorrectAnswer = Union[str, int, float, bool, list[str], None]

NUMBER_FIELD_TYPES = ("number", "currency")


@dataclass
class ConditionalRule:
    source_field_id: str
    operator: str
    value: Union[str, int, float, None] = None
    action: str = "show"
    logic_operator: str = "AND"
    id: Union[str, None] = None


@dataclass
class ValidationRule:
    type: str
    value: Union[str, int, float, None] = None
    message: str = ""


@dataclass
class QuizConfig:
    correct_answer: CorrectAnswer = None
    points: Any = 1
    explanation: str = ""
    case_sensitive: bool = False
    match_type: str = "exact"
    accept_partial_credit: bool = False


@dataclass
class Field:
    id: str
    type: str
    label: str = ""
    required: bool = False
    options: list[str] = field(default_factory=list)
    conditional_rules: list[ConditionalRule] = field(default_factory=list)
    validation: list[ValidationRule] = field(default_factory=list)
    quiz_config: Union[QuizConfig, None] = None
    order: int = 0
    step_id: Union[str, None] = None


@dataclass
class FormStep:
    id: str
    title: str
    description: str = ""
    order: int = 0
    field_ids: list[str] = field(default_factory=list)


@dataclass
class MultiStepConfig:
    enabled: bool = False
    steps: list[FormStep] = field(default_factory=list)
    show_progress_bar: bool = True
    allow_back_navigation: bool = True


@dataclass
class QuizModeConfig:
    enabled: bool = False
    passing_score: Union[float, None] = None
    show_score_immediately: bool = True
    show_correct_answers: bool = True
    show_explanations: bool = True
    allow_retakes: bool = False


@dataclass
class FormDefinition:
    id: str
    title: str
    fields: list[Field]
    multi_step: Union[MultiStepConfig, None] = None
    quiz_mode: Union[QuizModeConfig, None] = None


@dataclass
class FieldScore:
    field_id: str
    correct: bool
    points_awarded: float
    points_possible: float
    submitted: AnswerValue = None
    correct_answer: CorrectAnswer = None
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "fieldId": self.field_id,
            "correct": self.correct,
            "pointsAwarded": self.points_awarded,
            "pointsPossible": self.points_possible,
            "submitted": self.submitted,
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
        }


@dataclass
class ScoreResult:
    earned: float
    possible: float
    percentage: int
    passed: bool
    per_field: list[FieldScore] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "earned": self.earned,
            "possible": self.possible,
            "percentage": self.percentage,
            "passed": self.passed,
            "perField": [fs.to_dict() for fs in self.per_field],
        }
