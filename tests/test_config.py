"""
Tests for Settings — environment overrides with the CONDRULES_ prefix.
"""

from condrules.config import Settings
from condrules.core.extractor import ConditionalRulesExtractor


def test_defaults():
    config = Settings()
    assert config.rules_method == "rules"
    assert "baseRules" in config.helper_methods
    assert config.rule_separator == "|"


def test_rules_method_from_environment(monkeypatch):
    monkeypatch.setenv("CONDRULES_RULES_METHOD", "storeRules")
    config = Settings()
    assert config.rules_method == "storeRules"

    code = '''<?php
class Controller {
    public function storeRules(): array
    {
        return ['title' => 'required'];
    }
}
'''
    result = ConditionalRulesExtractor(config=config).extract(code)
    assert result.merged_rules == {"title": ["required"]}


def test_helper_methods_from_environment(monkeypatch):
    monkeypatch.setenv("CONDRULES_HELPER_METHODS", '["extraRules"]')
    config = Settings()
    assert config.helper_methods == ["extraRules"]

    code = '''<?php
class ProfileRequest {
    public function rules(): array
    {
        return $this->extraRules();
    }

    private function extraRules(): array
    {
        return ['bio' => 'nullable|string'];
    }
}
'''
    result = ConditionalRulesExtractor(config=config).extract(code)
    assert result.count() == 1
    assert result.entries[0].rules == {"bio": "nullable|string"}


def test_environment_prefix_is_case_insensitive(monkeypatch):
    monkeypatch.setenv("condrules_rule_separator", ",")
    assert Settings().rule_separator == ","
