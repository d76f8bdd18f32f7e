"""Per-field answer validation used to gate step navigation."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any, Union

from .answers import is_empty, to_number, to_text
from .types import Field, ValidationRule

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "This field is required"
NOT_A_NUMBER_MESSAGE = "Value must be a number"
INVALID_PATTERN_MESSAGE = "Invalid validation pattern"

_REGEX_LITERAL = re.compile(r"^/(.*)/([a-z]*)$", re.DOTALL)


def format_error_message(message: str, values: Mapping[str, Any]) -> str:
    """Fill ``{placeholder}`` slots in a rule message."""
    formatted = message
    for key, value in values.items():
        formatted = formatted.replace("{" + key + "}", to_text(value))
    return formatted


def _compile_pattern(raw: Any) -> re.Pattern:
    source = to_text(raw)
    flags = 0
    literal = _REGEX_LITERAL.match(source)
    if literal:
        source = literal.group(1)
        if "i" in literal.group(2):
            flags |= re.IGNORECASE
        if "m" in literal.group(2):
            flags |= re.MULTILINE
    return re.compile(source, flags)


def _check_rule(value: Any, rule: ValidationRule) -> Union[str, None]:
    text = to_text(value)

    if rule.type in ("minLength", "maxLength"):
        limit = to_number(rule.value)
        if math.isnan(limit):
            return None
        if rule.type == "minLength" and len(text) < limit:
            return format_error_message(rule.message, {"minLength": limit, "actualLength": len(text)})
        if rule.type == "maxLength" and len(text) > limit:
            return format_error_message(rule.message, {"maxLength": limit, "actualLength": len(text)})
        return None

    if rule.type == "pattern":
        try:
            pattern = _compile_pattern(rule.value)
        except re.error as exc:
            logger.warning("Invalid validation pattern %r: %s", rule.value, exc)
            return INVALID_PATTERN_MESSAGE
        if not pattern.search(text):
            return format_error_message(rule.message, {"pattern": rule.value})
        return None

    if rule.type in ("min", "max"):
        number = to_number(value)
        bound = to_number(rule.value)
        if math.isnan(number):
            return NOT_A_NUMBER_MESSAGE
        if rule.type == "min" and number < bound:
            return format_error_message(rule.message, {"min": bound, "actual": number})
        if rule.type == "max" and number > bound:
            return format_error_message(rule.message, {"max": bound, "actual": number})
        return None

    if rule.type == "custom":
        return rule.message if not text.strip() else None

    return None


def validate_value(value: Any, rules: Iterable[ValidationRule]) -> Union[str, None]:
    """Return the first failing rule's message, or None when all rules pass."""
    for rule in rules:
        error = _check_rule(value, rule)
        if error:
            return error
    return None


def _is_blank(value: Any) -> bool:
    return is_empty(value) or (isinstance(value, str) and not value.strip())


def _parse_date(value: Any) -> Union[date, None]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(to_text(value).strip()).date()
    except ValueError:
        return None


def _validate_date_range(field: Field, answers: Mapping[str, Any]) -> Union[str, None]:
    start = answers.get(f"{field.id}_start")
    end = answers.get(f"{field.id}_end")
    if not field.required:
        return None
    if _is_blank(start):
        return "Start date is required"
    if _is_blank(end):
        return "End date is required"
    start_date, end_date = _parse_date(start), _parse_date(end)
    if start_date and end_date and end_date < start_date:
        return "End date must be after start date"
    return None


def validate_field(field: Field, answers: Mapping[str, Any]) -> Union[str, None]:
    if field.type == "date-range":
        return _validate_date_range(field, answers)

    value = answers.get(field.id)
    if _is_blank(value):
        # optional and unanswered: nothing to check
        return REQUIRED_MESSAGE if field.required else None
    if field.validation:
        return validate_value(value, field.validation)
    return None


def validate_fields(
    fields: Iterable[Field], field_ids: Iterable[str], answers: Mapping[str, Any]
) -> dict[str, str]:
    """Validate the named fields and collect their error messages."""
    by_id = {f.id: f for f in fields}
    errors: dict[str, str] = {}
    for field_id in field_ids:
        field = by_id.get(field_id)
        if field is None:
            continue
        error = validate_field(field, answers)
        if error:
            errors[field_id] = error
    return errors
