"""
Rule Set Data Models — Rule values, per-branch entries, and the aggregated result.

These models are the output of the branch tracker and aggregator and the input
to whatever turns field rules into schema descriptions.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from condrules.models.condition_models import Condition, describe_path


class EnumRule(BaseModel):
    """An enum-backed rule, e.g. `new Enum(Status::class)`."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["enum"] = "enum"
    type_name: str = Field(..., description="Referenced enum class as written in source")


RuleItem = Union[str, EnumRule]
RuleValue = Union[str, EnumRule, list[RuleItem]]
FieldRuleMap = dict[str, RuleValue]


class RuleSetEntry(BaseModel):
    """One reachable `return` of a field-rule map, tagged with its branch path."""

    model_config = ConfigDict(frozen=True)

    conditions: list[Condition] = Field(default_factory=list)
    rules: FieldRuleMap = Field(default_factory=dict)
    probability: float = Field(
        default=1.0, description="Heuristic weight 2^-depth of the condition path"
    )

    @property
    def label(self) -> str:
        return describe_path(self.conditions)


class RuleSetsResult(BaseModel):
    """All rule sets found in one function body."""

    entries: list[RuleSetEntry] = Field(default_factory=list)
    merged_rules: dict[str, list[RuleItem]] = Field(
        default_factory=dict,
        description="Union of every field's rule tokens across all entries",
    )
    has_conditions: bool = False
    parse_errors: list[str] = Field(
        default_factory=list, description="Non-fatal parse and analysis warnings"
    )

    @classmethod
    def empty(cls) -> RuleSetsResult:
        return cls()

    def is_empty(self) -> bool:
        return not self.entries

    def count(self) -> int:
        return len(self.entries)

    def all_conditions(self) -> list[str]:
        """One branch label per entry, in emission order."""
        return [entry.label for entry in self.entries]

    def rules_for_condition(self, label: str) -> FieldRuleMap:
        """Rules of the first entry whose branch label matches."""
        for entry in self.entries:
            if entry.label == label:
                return entry.rules
        return {}
