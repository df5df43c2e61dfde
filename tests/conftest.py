"""
Test fixtures shared across all condrules tests.
"""

import pytest

from condrules.core.parser import PhpParser
from condrules.core.php_nodes import named


@pytest.fixture
def php_parser():
    return PhpParser()


@pytest.fixture
def parse_expression(php_parser):
    """Parse one PHP expression; returns (node, source_bytes)."""

    def _parse(expr: str):
        tree, source = php_parser.parse(f"<?php\nreturn {expr};\n")
        ret = next(n for n in tree.root_node.named_children if n.type == "return_statement")
        return named(ret)[0], source

    return _parse


@pytest.fixture
def parse_body(php_parser):
    """Parse statements as the body of a function; returns (body_node, source_bytes)."""

    def _parse(body: str):
        tree, source = php_parser.parse(f"<?php\nfunction rules()\n{{\n{body}\n}}\n")
        func = next(n for n in tree.root_node.named_children if n.type == "function_definition")
        return func.child_by_field_name("body"), source

    return _parse


@pytest.fixture
def conditional_request_code():
    """Form request with HTTP-method branches and a cached helper method."""
    return '''<?php

namespace App\\Http\\Requests;

use Illuminate\\Foundation\\Http\\FormRequest;
use Illuminate\\Validation\\Rule;

class ConditionalUserRequest extends FormRequest
{
    public function authorize(): bool
    {
        return true;
    }

    public function rules(): array
    {
        $rules = $this->baseRules();

        if ($this->isMethod('POST')) {
            return array_merge($rules, [
                'email' => 'required|email|unique:users,email',
                'password' => ['required', 'string', 'min:8'],
            ]);
        } elseif ($this->isMethod('PUT')) {
            return array_merge($rules, [
                'email' => ['sometimes', 'email', Rule::unique('users')->ignore($this->route('user'))],
                'status' => ['required', Rule::in(['active', 'archived'])],
            ]);
        }

        return $rules;
    }

    private function baseRules(): array
    {
        return [
            'name' => 'required|string|max:255',
        ];
    }
}
'''


@pytest.fixture
def plain_request_code():
    """Form request with a single unconditional return."""
    return '''<?php

class StoreTagRequest
{
    public function rules(): array
    {
        return [
            'label' => 'required',
            'color' => 'nullable',
        ];
    }
}
'''
