"""
Condition Classifier — Semantic shape of an `if` / `elseif` test.

First matching pattern wins:
  1. HTTP method checks     $this->isMethod('POST'), $this->method() === 'PUT'
  2. Current-user checks    $this->user()->isAdmin(), auth()->check()
  3. Request field checks   $this->has('email'), $this->input('type') == 'x'
  4. Rule::when(...)
  5. Anything else          CustomCondition with the source text
"""

from __future__ import annotations

from tree_sitter import Node

from condrules.core.normalizer import is_rule_builder_call
from condrules.core.php_nodes import (
    MEMBER_CALL_TYPES,
    binary_operator,
    call_arguments,
    call_name,
    call_object,
    call_scope,
    field,
    pretty,
    string_value,
    unwrap,
)
from condrules.models.condition_models import (
    Condition,
    CustomCondition,
    HttpMethodCheck,
    RequestFieldCheck,
    RuleWhenCondition,
    UserCheck,
)

HTTP_METHOD_ACCESSORS = {"isMethod", "method"}
REQUEST_FIELD_ACCESSORS = {"has", "hasAny", "filled", "anyFilled", "missing", "isNotFilled"}
USER_ACCESSOR = "user"
COMPARISON_OPERATORS = {"==", "===", "!=", "!==", "<>"}


class ConditionClassifier:
    """Classifies branch tests of one source file. Total: never raises."""

    def __init__(self, source: bytes) -> None:
        self.source = source

    def classify(self, node: Node | None) -> Condition:
        expr = unwrap(node)
        if expr is None:
            return CustomCondition(expression=pretty(node, self.source) if node is not None else "")
        text = pretty(expr, self.source)

        if expr.type in MEMBER_CALL_TYPES:
            method = call_name(expr, self.source)
            if method in HTTP_METHOD_ACCESSORS:
                return HttpMethodCheck(method=self._first_string_argument(expr), expression=text)
            if self._is_user_receiver(call_object(expr)):
                return UserCheck(method=method or "unknown", expression=text)
            if method in REQUEST_FIELD_ACCESSORS:
                return RequestFieldCheck(
                    check=method, field=self._first_string_argument(expr), expression=text
                )

        if expr.type == "binary_expression" and binary_operator(expr) in COMPARISON_OPERATORS:
            condition = self._classify_comparison(expr, text)
            if condition is not None:
                return condition

        if is_rule_builder_call(expr, self.source, "when"):
            return RuleWhenCondition(expression=text)

        return CustomCondition(expression=text)

    def _classify_comparison(self, expr: Node, text: str) -> Condition | None:
        left = unwrap(field(expr, "left", 0))
        right = unwrap(field(expr, "right", -1))
        # 'POST' === $this->method()
        if (left is None or left.type not in MEMBER_CALL_TYPES) and right is not None:
            left, right = right, left
        if left is None or left.type not in MEMBER_CALL_TYPES:
            return None
        accessor = call_name(left, self.source)
        literal = string_value(right, self.source) if right is not None else None
        if accessor == "method":
            return HttpMethodCheck(method=literal, expression=text)
        if accessor == "input":
            return RequestFieldCheck(
                check=accessor, field=self._first_string_argument(left), expression=text
            )
        return None

    def _is_user_receiver(self, receiver: Node | None) -> bool:
        """`$this->user()`, `$request->user()`, `Auth::user()` or `auth()`."""
        receiver = unwrap(receiver)
        if receiver is None:
            return False
        if receiver.type in MEMBER_CALL_TYPES:
            return call_name(receiver, self.source) == USER_ACCESSOR
        if receiver.type == "scoped_call_expression":
            return (
                call_scope(receiver, self.source) == "Auth"
                and call_name(receiver, self.source) == USER_ACCESSOR
            )
        if receiver.type == "function_call_expression":
            return call_name(receiver, self.source) == "auth"
        return False

    def _first_string_argument(self, call: Node) -> str | None:
        args = call_arguments(call)
        if not args:
            return None
        return string_value(unwrap(args[0]) or args[0], self.source)
