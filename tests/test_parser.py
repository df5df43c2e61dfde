"""
Tests for PHP Parser — tree-sitter wrapper and error collection.
"""

import logging

import pytest

from condrules.core.parser import collect_parse_errors


def test_parses_tagged_source(php_parser):
    tree, source = php_parser.parse("<?php\n$rules = ['name' => 'required'];\n")
    assert tree.root_node.type == "program"
    assert not tree.root_node.has_error
    assert source.startswith(b"<?php")


def test_prepends_open_tag(php_parser):
    tree, source = php_parser.parse("return ['name' => 'required'];")
    assert source.startswith(b"<?php")
    types = [n.type for n in tree.root_node.named_children]
    assert "return_statement" in types


def test_strict_mode_rejects_syntax_errors(php_parser):
    with pytest.raises(ValueError):
        php_parser.parse("<?php\nfunction rules( {\n")


def test_tolerant_mode_reports_errors(php_parser):
    tree, _ = php_parser.parse("<?php\nfunction rules( {\n", strict=False)
    errors = collect_parse_errors(tree)
    assert errors
    assert all(e.startswith("Syntax error at line") for e in errors)


def test_clean_tree_has_no_errors(php_parser):
    tree, _ = php_parser.parse("<?php\nreturn [];\n")
    assert collect_parse_errors(tree) == []


def test_tolerant_mode_logs_below_warning(php_parser, caplog):
    with caplog.at_level(logging.DEBUG, logger="condrules.parser"):
        php_parser.parse("<?php\nfunction rules( {\n", strict=False)
    assert caplog.records
    assert all(r.levelno < logging.WARNING for r in caplog.records)
