"""
Rule-Value Normalizer — Canonical rule tokens from rule expressions.

Turns the expression for one field's rules into a RuleValue:
- string literals stay as they are ('required|email')
- array literals become a list of single rules
- Rule:: builder calls become tokens ('in:a,b', 'exists:users,id', ...)
- enum rules become EnumRule references
- anything else becomes its source text

Normalization is total: it never returns None and never raises.
"""

from __future__ import annotations

import logging

from tree_sitter import Node

from condrules.core.php_nodes import (
    MEMBER_CALL_TYPES,
    array_items,
    binary_operator,
    call_arguments,
    call_name,
    call_object,
    call_scope,
    class_reference,
    field,
    named,
    pretty,
    scalar_value,
    short_name,
    split_array_item,
    string_value,
    unwrap,
)
from condrules.models.rule_models import EnumRule, RuleItem, RuleValue

logger = logging.getLogger("condrules.normalizer")

RULE_BUILDER_CLASS = "Rule"
ENUM_RULE_CLASS = "Enum"


def is_rule_builder_call(node: Node, source: bytes, method: str | None = None) -> bool:
    """True for `Rule::<method>(...)` (any method when method is None)."""
    if node.type != "scoped_call_expression":
        return False
    if call_scope(node, source) != RULE_BUILDER_CLASS:
        return False
    return method is None or call_name(node, source) == method


def chain_root(node: Node) -> Node:
    """Innermost receiver of a method chain (`Rule::unique()` in `Rule::unique()->ignore()`)."""
    current = node
    while current.type in MEMBER_CALL_TYPES:
        receiver = call_object(current)
        if receiver is None:
            break
        current = receiver
    return current


class RuleValueNormalizer:
    """Normalizes rule expressions of one source file."""

    def __init__(self, source: bytes) -> None:
        self.source = source

    def normalize(self, node: Node) -> RuleValue:
        """Normalize the whole rule value of one field."""
        node = unwrap(node) or node
        literal = string_value(node, self.source)
        if literal is not None:
            return literal
        if node.type == "array_creation_expression":
            items: list[RuleItem] = []
            for item in array_items(node):
                _, value = split_array_item(item)
                if value is None:
                    continue
                items.append(self.normalize_single(value))
            return items
        return self.normalize_single(node)

    def normalize_single(self, node: Node) -> RuleItem:
        """Normalize one rule (an item of a rule list)."""
        node = unwrap(node) or node
        literal = string_value(node, self.source)
        if literal is not None:
            return literal

        if is_rule_builder_call(node, self.source):
            return self._rule_builder(node)

        if node.type in MEMBER_CALL_TYPES:
            root = chain_root(node)
            if is_rule_builder_call(root, self.source):
                # Trailing qualifiers (->ignore(), ->where()) are discarded
                return self._rule_builder(root)

        if node.type == "object_creation_expression":
            enum_rule = self._enum_instantiation(node)
            if enum_rule is not None:
                return enum_rule

        if node.type == "binary_expression" and binary_operator(node) == ".":
            left = self.normalize_single(field(node, "left", 0))
            right = self.normalize_single(field(node, "right", -1))
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            return pretty(node, self.source)

        logger.debug(f"Rule expression kept as source text: {pretty(node, self.source)}")
        return pretty(node, self.source)

    def _rule_builder(self, call: Node) -> RuleItem:
        method = call_name(call, self.source)
        args = call_arguments(call)

        if method in ("in", "notIn"):
            prefix = "in" if method == "in" else "not_in"
            return f"{prefix}:" + ",".join(self._literal_list(args))
        if method == "exists":
            return "exists:" + ",".join(self._leading_literals(args, 2))
        if method == "unique":
            return "unique:" + ",".join(self._leading_literals(args, 2))
        if method == "requiredIf":
            parts = self._leading_literals(args, 2)
            return "required_if:" + ",".join(parts) if parts else "required_if"
        if method == "enum" and args:
            type_name = class_reference(unwrap(args[0]), self.source)
            if type_name is not None:
                return EnumRule(type_name=type_name)
        if method == "when":
            return "sometimes"
        return pretty(call, self.source)

    def _enum_instantiation(self, node: Node) -> EnumRule | None:
        """`new Enum(Status::class)` -> EnumRule('Status')."""
        class_node = next((c for c in named(node) if c.type in ("name", "qualified_name")), None)
        if class_node is None or short_name(pretty(class_node, self.source)) != ENUM_RULE_CLASS:
            return None
        args = call_arguments(node)
        if not args:
            return None
        type_name = class_reference(unwrap(args[0]), self.source)
        return EnumRule(type_name=type_name) if type_name is not None else None

    def _literal_list(self, args: list[Node]) -> list[str]:
        """Literal values of `Rule::in([...])` or `Rule::in('a', 'b')`."""
        if not args:
            return []
        first = unwrap(args[0])
        if first is not None and first.type == "array_creation_expression":
            values: list[str] = []
            for item in array_items(first):
                _, value = split_array_item(item)
                literal = scalar_value(value, self.source) if value is not None else None
                if literal is not None:
                    values.append(literal)
            return values
        literals = [scalar_value(arg, self.source) for arg in (unwrap(a) for a in args) if arg is not None]
        return [v for v in literals if v is not None]

    def _leading_literals(self, args: list[Node], limit: int) -> list[str]:
        """String literals among the first `limit` arguments, stopping at the first non-literal."""
        values: list[str] = []
        for arg in args[:limit]:
            literal = string_value(unwrap(arg) or arg, self.source)
            if literal is None:
                break
            values.append(literal)
        return values
