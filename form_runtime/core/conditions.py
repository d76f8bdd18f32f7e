from __future__ import annotations

import logging
import math
from typing import Any

from .answers import is_empty, to_number, to_text

logger = logging.getLogger(__name__)


def _compare_numbers(field_value: Any, target_value: Any) -> tuple[float, float] | None:
    left = to_number(field_value)
    right = to_number(target_value)
    if math.isnan(left) or math.isnan(right):
        return None
    return left, right


def evaluate_condition(operator: str, field_value: Any, target_value: Any) -> bool:
    """Evaluate one rule condition against the live answer of its source field."""
    if operator == "isEmpty":
        return is_empty(field_value)
    if operator == "isNotEmpty":
        return not is_empty(field_value)

    field_text = to_text(field_value)
    target_text = to_text(target_value)

    if operator == "equals":
        return field_text == target_text
    if operator == "notEquals":
        return field_text != target_text
    if operator == "contains":
        return target_text.casefold() in field_text.casefold()
    if operator in ("greaterThan", "lessThan"):
        pair = _compare_numbers(field_value, target_value)
        if pair is None:
            return False
        left, right = pair
        return left > right if operator == "greaterThan" else left < right

    logger.debug("Unknown condition operator %r evaluates to false", operator)
    return False
