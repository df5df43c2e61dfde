"""
Condition Models — The semantic shape of a branch test.

A Condition is a closed union: every classified branch test is exactly one of
the variants below, and anything unrecognised becomes a CustomCondition.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _ConditionBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    expression: str = Field(..., description="Pretty-printed source text of the test")

    def describe(self) -> str:
        """Human-readable branch label."""
        return f"When {self.expression}"


class HttpMethodCheck(_ConditionBase):
    """`$this->isMethod('POST')`, `request()->method() === 'PUT'`, ..."""

    type: Literal["http_method"] = "http_method"
    method: str | None = Field(default=None, description="HTTP verb if given as a literal")


class UserCheck(_ConditionBase):
    """A call on the current user, e.g. `$this->user()->isAdmin()`."""

    type: Literal["user_check"] = "user_check"
    method: str = Field(..., description="Method called on the user accessor")


class RequestFieldCheck(_ConditionBase):
    """`$this->has('email')`, `$this->filled('name')`, `$this->input('x') == 'y'`."""

    type: Literal["request_field"] = "request_field"
    check: str | None = Field(default=None, description="Accessor name (has, filled, input, ...)")
    field: str | None = Field(default=None, description="Inspected request field")


class RuleWhenCondition(_ConditionBase):
    """A `Rule::when(...)` test."""

    type: Literal["rule_when"] = "rule_when"


class ElseBranch(_ConditionBase):
    """Marker for an else block. Not the negation of the sibling tests."""

    type: Literal["else"] = "else"
    expression: str = "Default case"

    def describe(self) -> str:
        return "Otherwise"


class CustomCondition(_ConditionBase):
    """Any test that matches no known pattern."""

    type: Literal["custom"] = "custom"


Condition = Annotated[
    Union[
        HttpMethodCheck,
        UserCheck,
        RequestFieldCheck,
        RuleWhenCondition,
        ElseBranch,
        CustomCondition,
    ],
    Field(discriminator="type"),
]


def describe_path(conditions: list[Condition]) -> str:
    """Label for a whole condition path."""
    if not conditions:
        return "Default"
    return " and ".join(c.describe() for c in conditions)
