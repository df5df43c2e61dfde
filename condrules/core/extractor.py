"""
Conditional Rules Extractor — Orchestrates one analysis of a rules method.

Parses PHP source, locates the form-request class and its rules method,
caches helper methods declared beside it, runs the branch tracker over the
method body and aggregates the result.

An analysis never raises: parse problems and unexpected failures are logged
and reported in RuleSetsResult.parse_errors.
"""

from __future__ import annotations

import logging
from typing import Iterable

from tree_sitter import Node

from condrules.config import Settings, settings as default_settings
from condrules.core.aggregator import aggregate
from condrules.core.branch_tracker import BranchPathTracker
from condrules.core.parser import PhpParser, collect_parse_errors
from condrules.core.php_nodes import field, named, node_text, statements_of
from condrules.models.rule_models import RuleSetsResult

logger = logging.getLogger("condrules.extractor")


def find_classes(root: Node) -> list[Node]:
    """All class declarations in a tree, in source order."""
    classes: list[Node] = []

    def _walk(node: Node) -> None:
        if node.type == "class_declaration":
            classes.append(node)
        for child in node.named_children:
            _walk(child)

    _walk(root)
    return classes


def class_methods(class_node: Node) -> list[Node]:
    body = class_node.child_by_field_name("body")
    if body is None:
        return []
    return [m for m in named(body) if m.type == "method_declaration"]


def method_name(method: Node, source: bytes) -> str:
    name = field(method, "name")
    return node_text(name, source) if name is not None else ""


class ConditionalRulesExtractor:
    """Extracts rule sets from the rules method of PHP classes."""

    def __init__(self, parser: PhpParser | None = None, config: Settings | None = None) -> None:
        self.parser = parser or PhpParser()
        self.config = config or default_settings

    def extract(
        self, code: str, class_name: str | None = None, file_path: str = "<unknown>"
    ) -> RuleSetsResult:
        """
        Analyze the rules method of a class in PHP source.

        Args:
            code: PHP source code.
            class_name: Class to analyze. Defaults to the first class that
                declares the rules method.
            file_path: Path of the source file (for log messages).

        Returns:
            RuleSetsResult; empty when no rules method is found.
        """
        try:
            tree, source = self.parser.parse(code, strict=False)
            parse_errors = collect_parse_errors(tree)
            if parse_errors:
                logger.warning(f"{file_path}: {len(parse_errors)} syntax error(s), analyzing partial tree")

            class_node = self._select_class(find_classes(tree.root_node), source, class_name)
            if class_node is None:
                logger.debug(f"{file_path}: no class with a {self.config.rules_method}() method")
                return RuleSetsResult(parse_errors=parse_errors)
            return self.extract_from_class(class_node, source, parse_errors)
        except Exception as e:
            # One failing analysis must not abort the caller
            logger.exception(f"{file_path}: conditional rules analysis failed")
            return RuleSetsResult(parse_errors=[f"Analysis failed: {type(e).__name__}: {e}"])

    def extract_from_class(
        self, class_node: Node, source: bytes, parse_errors: list[str] | None = None
    ) -> RuleSetsResult:
        """Analyze the rules method of an already parsed class declaration."""
        methods = class_methods(class_node)
        rules_method = next(
            (m for m in methods if method_name(m, source) == self.config.rules_method), None
        )
        if rules_method is None:
            return RuleSetsResult(parse_errors=list(parse_errors or []))
        siblings = [m for m in methods if m is not rules_method]
        return self.analyze_body(
            rules_method.child_by_field_name("body"), source, siblings, parse_errors
        )

    def analyze_body(
        self,
        body: Node | None,
        source: bytes,
        sibling_methods: Iterable[Node] = (),
        parse_errors: list[str] | None = None,
    ) -> RuleSetsResult:
        """Analyze one function body, given its sibling method declarations."""
        tracker = BranchPathTracker(source, self.config)
        tracker.cache_helper_methods(list(sibling_methods))
        tracker.process(statements_of(body))
        logger.debug(
            f"Found {len(tracker.entries)} rule set(s), "
            f"{len(tracker.method_returns)} cached helper method(s)"
        )
        return aggregate(tracker.entries, self.config, parse_errors)

    def _select_class(
        self, classes: list[Node], source: bytes, class_name: str | None
    ) -> Node | None:
        for class_node in classes:
            name = field(class_node, "name")
            name_text = node_text(name, source) if name is not None else ""
            if class_name is not None:
                if name_text == class_name.rsplit("\\", 1)[-1]:
                    return class_node
                continue
            if any(
                method_name(m, source) == self.config.rules_method
                for m in class_methods(class_node)
            ):
                return class_node
        return None


_extractor: ConditionalRulesExtractor | None = None


def extract_conditional_rules(
    code: str, class_name: str | None = None, file_path: str = "<unknown>"
) -> RuleSetsResult:
    """Analyze PHP source with a shared default extractor."""
    global _extractor
    if _extractor is None:
        _extractor = ConditionalRulesExtractor()
    return _extractor.extract(code, class_name=class_name, file_path=file_path)
