from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .conditions import evaluate_condition
from .types import ConditionalRule, Field


def _rule_holds(rule: ConditionalRule, answers: Mapping[str, Any]) -> bool:
    condition_met = evaluate_condition(rule.operator, answers.get(rule.source_field_id), rule.value)
    return condition_met if rule.action == "show" else not condition_met


def is_visible(rules: Iterable[ConditionalRule], answers: Mapping[str, Any]) -> bool:
    """Decide whether a field with the given rules is shown.

    Rules are split into an AND-group (the default) and an OR-group. Every
    AND rule must hold and, when OR rules exist, at least one of them must
    hold as well; an empty group does not constrain the result.
    """
    and_group: list[ConditionalRule] = []
    or_group: list[ConditionalRule] = []
    for rule in rules:
        if rule.logic_operator == "OR":
            or_group.append(rule)
        else:
            and_group.append(rule)

    and_result = all(_rule_holds(rule, answers) for rule in and_group)
    or_result = not or_group or any(_rule_holds(rule, answers) for rule in or_group)
    return and_result and or_result


def _display_order(fields: Iterable[Field]) -> list[Field]:
    return [f for _, f in sorted(enumerate(fields), key=lambda pair: (pair[1].order, pair[0]))]


def visible_field_ids(fields: Iterable[Field], answers: Mapping[str, Any]) -> list[str]:
    """Return ids of the currently visible fields in display order.

    Each field is judged on the full answer map, so a hidden field's stale
    value can still drive another field's visibility.
    """
    return [f.id for f in _display_order(fields) if is_visible(f.conditional_rules, answers)]


def prune_hidden_answers(fields: Iterable[Field], answers: Mapping[str, Any]) -> dict[str, Any]:
    """Copy the answers without values belonging to hidden fields."""
    field_list = list(fields)
    visible = set(visible_field_ids(field_list, answers))
    pruned = dict(answers)
    for f in field_list:
        if f.id in visible:
            continue
        pruned.pop(f.id, None)
        if f.type == "date-range":
            pruned.pop(f"{f.id}_start", None)
            pruned.pop(f"{f.id}_end", None)
    return pruned
