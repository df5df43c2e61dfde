"""
condrules — PHP source parser using tree-sitter.
"""

from __future__ import annotations

import logging

import tree_sitter_php as tsphp
from tree_sitter import Language, Node, Parser, Tree

logger = logging.getLogger("condrules.parser")

PHP_LANGUAGE = Language(tsphp.language_php())

_OPEN_TAG = "<?php\n"


class PhpParser:
    """Thin wrapper around tree-sitter for PHP source code."""

    def __init__(self) -> None:
        self._parser = Parser(PHP_LANGUAGE)

    def parse(self, code: str, strict: bool = True) -> tuple[Tree, bytes]:
        """Parse PHP source and return (tree, source_bytes).

        Code without an opening tag is treated as PHP, not inline HTML.
        Raises ValueError in strict mode if the code cannot be parsed.
        """
        if not code.lstrip().startswith("<?"):
            code = _OPEN_TAG + code
        source_bytes = code.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        if tree.root_node.has_error:
            if strict:
                raise ValueError("Failed to parse PHP source code")
            logger.debug("PHP source contains syntax errors; continuing on partial tree")
        return tree, source_bytes


def collect_parse_errors(tree: Tree) -> list[str]:
    """List the locations of ERROR and MISSING nodes in a tree."""
    errors: list[str] = []

    def _walk(node: Node) -> None:
        if node.type == "ERROR" or node.is_missing:
            errors.append(f"Syntax error at line {node.start_point[0] + 1}")
            return
        if node.has_error:
            for child in node.children:
                _walk(child)

    _walk(tree.root_node)
    return errors
