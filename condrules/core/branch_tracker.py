"""
Branch-Path Tracker — Enumerates reachable rule maps with their condition paths.

Walks a function body in source order:
- assignments bind variables in a flat, function-wide scope (not block scoped:
  a binding made inside one branch stays visible to later sibling branches)
- helper method declarations populate the method-return cache
- if / elseif / else push a classified condition, process the body, pop
- return statements whose value resolves to a map emit a RuleSetEntry

A return ends processing of the statement list it belongs to, including
enclosing non-branch blocks, up to the nearest branch body.
"""

from __future__ import annotations

import logging

from tree_sitter import Node

from condrules.config import Settings, settings as default_settings
from condrules.core.conditions import ConditionClassifier
from condrules.core.evaluator import ExpressionEvaluator, union_left_wins
from condrules.core.php_nodes import (
    binary_operator,
    field,
    named,
    node_text,
    statements_of,
    unwrap,
    variable_name,
)
from condrules.models.condition_models import Condition, ElseBranch
from condrules.models.rule_models import FieldRuleMap, RuleSetEntry

logger = logging.getLogger("condrules.tracker")

# Bodies the tracker never enters: their returns do not belong to this function
OPAQUE_TYPES = {
    "anonymous_function",
    "anonymous_function_creation_expression",
    "arrow_function",
    "function_definition",
    "class_declaration",
    "interface_declaration",
    "trait_declaration",
    "enum_declaration",
    "anonymous_class",
}


class BranchPathTracker:
    """Collects one RuleSetEntry per reachable `return` of a rules map."""

    def __init__(self, source: bytes, config: Settings | None = None) -> None:
        self.source = source
        self.config = config or default_settings
        self.variable_scope: dict[str, FieldRuleMap] = {}
        self.method_returns: dict[str, FieldRuleMap] = {}
        self.evaluator = ExpressionEvaluator(
            source,
            variable_scope=self.variable_scope,
            method_returns=self.method_returns,
            config=self.config,
        )
        self.classifier = ConditionClassifier(source)
        self.entries: list[RuleSetEntry] = []
        self.current_path: list[Condition] = []

    # ── Pre-pass ──

    def cache_helper_methods(self, methods: list[Node]) -> None:
        """Cache the rules returned by recognised helper method declarations."""
        for method in methods:
            self._cache_method(method)

    def _cache_method(self, node: Node) -> None:
        name_node = field(node, "name")
        if name_node is None:
            return
        name = node_text(name_node, self.source)
        if name not in self.config.helper_methods:
            return
        for stmt in statements_of(node.child_by_field_name("body")):
            if stmt.type != "return_statement":
                continue
            value = unwrap(self._return_value(stmt))
            if value is not None and value.type == "array_creation_expression":
                self.method_returns[name] = self.evaluator.extract_array_rules(value)
                logger.debug(f"Cached rules of helper method {name}()")
                break

    # ── Traversal ──

    def process(self, statements: list[Node]) -> bool:
        """Process a statement list. Returns True if a return ended it."""
        for stmt in statements:
            if self._process_statement(stmt):
                return True
        return False

    def _process_statement(self, stmt: Node) -> bool:
        kind = stmt.type

        if kind == "if_statement":
            self._handle_if(stmt)
            return False

        if kind == "return_statement":
            self._handle_return(stmt)
            return True

        if kind == "expression_statement":
            for expr in named(stmt):
                self._handle_expression(expr)
            return False

        if kind == "method_declaration":
            self._cache_method(stmt)
            return False

        if kind in OPAQUE_TYPES:
            return False

        # Other statements (foreach, try, switch, blocks...) are searched for nested statements
        return self.process(named(stmt))

    def _handle_if(self, node: Node) -> None:
        self._process_branch(
            self.classifier.classify(node.child_by_field_name("condition")),
            self._branch_body(node),
        )
        for clause in node.children_by_field_name("alternative"):
            if clause.type == "else_if_clause":
                condition = self.classifier.classify(clause.child_by_field_name("condition"))
            else:
                condition = ElseBranch(expression=self.config.else_description)
            self._process_branch(condition, self._branch_body(clause))

    def _branch_body(self, node: Node) -> Node | None:
        body = node.child_by_field_name("body")
        if body is not None:
            return body
        # colon-style blocks
        return next((c for c in named(node) if c.type == "colon_block"), None)

    def _process_branch(self, condition: Condition, body: Node | None) -> None:
        self.current_path.append(condition)
        try:
            self.process(statements_of(body))
        finally:
            self.current_path.pop()

    def _handle_return(self, stmt: Node) -> None:
        value = self._return_value(stmt)
        if value is None:
            return
        rules = self.evaluator.evaluate(value)
        if rules is None:
            logger.debug(f"Return at line {stmt.start_point[0] + 1} did not resolve to rules")
            return
        depth = len(self.current_path)
        self.entries.append(
            RuleSetEntry(
                conditions=list(self.current_path),
                rules=rules,
                probability=1.0 / (2 ** depth),
            )
        )

    def _handle_expression(self, expr: Node) -> None:
        if expr.type == "assignment_expression":
            self._handle_assignment(expr)
        elif expr.type == "augmented_assignment_expression":
            self._handle_augmented_assignment(expr)

    def _handle_assignment(self, node: Node) -> None:
        target = field(node, "left", 0)
        value = field(node, "right", -1)
        if target is None or value is None:
            return

        name = variable_name(target, self.source)
        if name is not None:
            rules = self.evaluator.evaluate(value)
            if rules is not None:
                self.variable_scope[name] = rules
            return

        # $rules['field'] = 'required'
        if target.type == "subscript_expression":
            parts = named(target)
            if len(parts) < 2:
                return
            name = variable_name(parts[0], self.source)
            if name is None or name not in self.variable_scope:
                return
            key = self.evaluator.evaluate_key(parts[1])
            if key is None:
                return
            updated = dict(self.variable_scope[name])
            updated[key] = self.evaluator.normalizer.normalize(value)
            self.variable_scope[name] = updated

    def _handle_augmented_assignment(self, node: Node) -> None:
        if binary_operator(node) != "+=":
            return
        name = variable_name(field(node, "left", 0), self.source)
        if name is None or name not in self.variable_scope:
            return
        extra = self.evaluator.evaluate(field(node, "right", -1))
        if extra is not None:
            self.variable_scope[name] = union_left_wins(self.variable_scope[name], extra)

    def _return_value(self, stmt: Node) -> Node | None:
        children = named(stmt)
        return children[0] if children else None
