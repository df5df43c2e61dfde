"""
Rule-Set Aggregator — Builds the final RuleSetsResult from emitted entries.
"""

from __future__ import annotations

from condrules.config import Settings, settings as default_settings
from condrules.models.rule_models import RuleItem, RuleSetEntry, RuleSetsResult, RuleValue


def rule_list(value: RuleValue, separator: str = "|") -> list[RuleItem]:
    """A field's rules as a list: 'required|email' -> ['required', 'email']."""
    if isinstance(value, str):
        return value.split(separator) if separator in value else [value]
    if isinstance(value, list):
        return list(value)
    return [value]


def merge_rules(
    entries: list[RuleSetEntry], separator: str = "|"
) -> dict[str, list[RuleItem]]:
    """Union of every field's rule items across all entries, first-seen order."""
    merged: dict[str, list[RuleItem]] = {}
    for entry in entries:
        for field_name, value in entry.rules.items():
            items = merged.setdefault(field_name, [])
            for item in rule_list(value, separator):
                if item not in items:
                    items.append(item)
    return merged


def aggregate(
    entries: list[RuleSetEntry],
    config: Settings | None = None,
    parse_errors: list[str] | None = None,
) -> RuleSetsResult:
    """
    Combine tracker entries into a RuleSetsResult.

    has_conditions is True when any entry was reached under at least one
    branch test.
    """
    config = config or default_settings
    return RuleSetsResult(
        entries=entries,
        merged_rules=merge_rules(entries, config.rule_separator),
        has_conditions=any(entry.conditions for entry in entries),
        parse_errors=list(parse_errors or []),
    )
