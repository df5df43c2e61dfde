"""
Tests for Rule-Value Normalizer — tokens for literals, Rule:: builders, enums.
"""

from condrules.core.normalizer import RuleValueNormalizer
from condrules.models.rule_models import EnumRule


def normalize(parse_expression, expr):
    node, source = parse_expression(expr)
    return RuleValueNormalizer(source).normalize(node)


def test_string_literal_kept(parse_expression):
    assert normalize(parse_expression, "'required|email'") == "required|email"


def test_double_quoted_literal(parse_expression):
    assert normalize(parse_expression, '"required|max:10"') == "required|max:10"


def test_rule_list(parse_expression):
    value = normalize(parse_expression, "['required', 'string', 'max:255']")
    assert value == ["required", "string", "max:255"]


def test_rule_in_with_array(parse_expression):
    value = normalize(parse_expression, "['required', Rule::in(['a', 'b'])]")
    assert value == ["required", "in:a,b"]


def test_rule_in_without_resolvable_values(parse_expression):
    assert normalize(parse_expression, "Rule::in([])") == "in:"
    assert normalize(parse_expression, "Rule::in($choices)") == "in:"
    assert normalize(parse_expression, "Rule::in()") == "in:"


def test_rule_in_variadic_literals(parse_expression):
    assert normalize(parse_expression, "Rule::in('draft', 'published')") == "in:draft,published"


def test_rule_not_in(parse_expression):
    assert normalize(parse_expression, "Rule::notIn(['root'])") == "not_in:root"


def test_rule_exists(parse_expression):
    assert normalize(parse_expression, "Rule::exists('users')") == "exists:users"
    assert normalize(parse_expression, "Rule::exists('users', 'id')") == "exists:users,id"


def test_rule_unique_with_chained_qualifier(parse_expression):
    value = normalize(parse_expression, "Rule::unique('users')->ignore($this->user()->id)")
    assert value == "unique:users"


def test_rule_unique_with_column(parse_expression):
    assert normalize(parse_expression, "Rule::unique('users', 'email')") == "unique:users,email"


def test_rule_required_if(parse_expression):
    value = normalize(parse_expression, "Rule::requiredIf('type', 'business')")
    assert value == "required_if:type,business"


def test_rule_when_as_value(parse_expression):
    assert normalize(parse_expression, "Rule::when($isAdmin, ['required'])") == "sometimes"


def test_enum_instantiation(parse_expression):
    value = normalize(parse_expression, "['required', new Enum(OrderStatus::class)]")
    assert value == ["required", EnumRule(type_name="OrderStatus")]


def test_rule_enum(parse_expression):
    value = normalize(parse_expression, "Rule::enum(\\App\\Enums\\Role::class)")
    assert value == EnumRule(type_name="App\\Enums\\Role")


def test_enum_type_name_ignores_leading_backslash(parse_expression):
    qualified = normalize(parse_expression, "new Enum(\\App\\Enums\\Role::class)")
    relative = normalize(parse_expression, "Rule::enum(App\\Enums\\Role::class)")
    assert qualified == relative == EnumRule(type_name="App\\Enums\\Role")


def test_rule_in_keeps_float_and_boolean_literals(parse_expression):
    value = normalize(parse_expression, "Rule::in([1, 2.5, true, null, 'x'])")
    assert value == "in:1,2.5,1,x"


def test_double_quoted_hex_and_unicode_escapes(parse_expression):
    assert normalize(parse_expression, '"a\\x41"') == "aA"
    assert normalize(parse_expression, '"\\u{1F600}"') == "\U0001F600"
    assert normalize(parse_expression, '"\\101"') == "A"


def test_concatenation(parse_expression):
    assert normalize(parse_expression, "'max:' . 255") == "max:255"
    assert normalize(parse_expression, "'size:' . $limit") == "size:$limit"


def test_unknown_expression_falls_back_to_source(parse_expression):
    value = normalize(parse_expression, "Password::min(8)->mixedCase()")
    assert value == "Password::min(8)->mixedCase()"


def test_multiline_fallback_is_single_line(parse_expression):
    value = normalize(parse_expression, "new CustomRule(\n    $this->route('id')\n)")
    assert value == "new CustomRule( $this->route('id') )"
