"""
Expression Evaluator — Field-rule maps from whole-map expressions.

Resolves the expression returned by a rules method (or assigned to a variable)
into a FieldRuleMap:
- array literals                      ['name' => 'required']
- variables                           $rules (looked up in the variable scope)
- array_merge(...)                    later arguments overwrite earlier ones
- array union                         $a + $b, left side wins
- cached helper calls                 $this->baseRules()
- ternaries                           the "true" branch when present

Unresolvable expressions evaluate to None.
"""

from __future__ import annotations

import logging

from tree_sitter import Node

from condrules.config import Settings, settings as default_settings
from condrules.core.normalizer import RuleValueNormalizer
from condrules.core.php_nodes import (
    array_items,
    binary_operator,
    call_arguments,
    call_name,
    call_object,
    field,
    integer_value,
    is_this,
    pretty,
    split_array_item,
    string_value,
    unwrap,
    variable_name,
)
from condrules.models.rule_models import FieldRuleMap

logger = logging.getLogger("condrules.evaluator")

COMBINE_FUNCTION = "array_merge"


def union_left_wins(left: FieldRuleMap, right: FieldRuleMap) -> FieldRuleMap:
    """PHP `$left + $right`: keys already in left are kept."""
    result = dict(left)
    for key, value in right.items():
        result.setdefault(key, value)
    return result


def merge_later_wins(maps: list[FieldRuleMap]) -> FieldRuleMap:
    """`array_merge(...)` on string keys: later maps overwrite earlier ones."""
    result: FieldRuleMap = {}
    for rules in maps:
        result.update(rules)
    return result


class ExpressionEvaluator:
    """
    Evaluates map-valued expressions of one function body.

    The variable scope and method-return cache are shared with the branch
    tracker and live for one analysis.
    """

    def __init__(
        self,
        source: bytes,
        variable_scope: dict[str, FieldRuleMap] | None = None,
        method_returns: dict[str, FieldRuleMap] | None = None,
        config: Settings | None = None,
    ) -> None:
        self.source = source
        self.variable_scope = variable_scope if variable_scope is not None else {}
        self.method_returns = method_returns if method_returns is not None else {}
        self.config = config or default_settings
        self.normalizer = RuleValueNormalizer(source)

    def evaluate(self, node: Node | None) -> FieldRuleMap | None:
        """Resolve an expression to a field-rule map, or None."""
        node = unwrap(node)
        if node is None:
            return None

        if node.type == "array_creation_expression":
            return self.extract_array_rules(node)

        if node.type == "variable_name":
            name = variable_name(node, self.source)
            rules = self.variable_scope.get(name)
            if rules is None:
                logger.debug(f"Variable ${name} has no known rules")
            return dict(rules) if rules is not None else None

        if node.type == "function_call_expression":
            if call_name(node, self.source) == COMBINE_FUNCTION:
                return self._evaluate_merge(node)
            return self._unresolved(node)

        if node.type == "member_call_expression":
            return self._evaluate_method_call(node)

        if node.type == "conditional_expression":
            return self._evaluate_ternary(node)

        if node.type == "binary_expression" and binary_operator(node) == "+":
            left = self.evaluate(field(node, "left", 0)) or {}
            right = self.evaluate(field(node, "right", -1)) or {}
            return union_left_wins(left, right)

        return self._unresolved(node)

    def extract_array_rules(self, node: Node) -> FieldRuleMap:
        """Field-rule map of an array literal. Keyless and spread items are skipped."""
        rules: FieldRuleMap = {}
        for item in array_items(node):
            key_node, value_node = split_array_item(item)
            if key_node is None or value_node is None:
                continue
            key = self.evaluate_key(key_node)
            if key is not None:
                rules[key] = self.normalizer.normalize(value_node)
        return rules

    def evaluate_key(self, node: Node) -> str | None:
        node = unwrap(node) or node
        literal = string_value(node, self.source)
        if literal is not None:
            return literal
        number = integer_value(node, self.source)
        if number is not None:
            return number
        return pretty(node, self.source) or None

    def _evaluate_merge(self, call: Node) -> FieldRuleMap:
        maps: list[FieldRuleMap] = []
        for arg in call_arguments(call):
            rules = self.evaluate(arg)
            if rules is not None:
                maps.append(rules)
            else:
                logger.debug(f"array_merge argument skipped: {pretty(arg, self.source)}")
        return merge_later_wins(maps)

    def _evaluate_method_call(self, call: Node) -> FieldRuleMap | None:
        """`$this->helper()` resolved through the method-return cache."""
        if not is_this(call_object(call), self.source):
            return self._unresolved(call)
        method = call_name(call, self.source)
        if method in self.method_returns:
            return dict(self.method_returns[method])
        if method in self.config.placeholder_methods:
            return {"_notice": f"Method {method}() - implement in subclass"}
        return self._unresolved(call)

    def _evaluate_ternary(self, node: Node) -> FieldRuleMap | None:
        # The test is not evaluated; the affirmative branch is preferred
        body = node.child_by_field_name("body")
        if body is not None:
            return self.evaluate(body)
        return self.evaluate(node.child_by_field_name("alternative"))

    def _unresolved(self, node: Node) -> None:
        logger.debug(f"Unresolved rules expression: {pretty(node, self.source)}")
        return None
