"""
PHP Node Helpers — Uniform access to tree-sitter-php nodes.

Every analyzer component reads the tree through these helpers, so node-shape
details of the grammar (field names, comments as named children, parentheses
kept in the tree) are handled in one place.
"""

from __future__ import annotations

import re

from tree_sitter import Node

_WHITESPACE = re.compile(r"\s+")
_SINGLE_QUOTE_ESCAPE = re.compile(r"\\([\\'])")
_DOUBLE_QUOTE_ESCAPE = re.compile(
    r"\\(u\{[0-9A-Fa-f]+\}|x[0-9A-Fa-f]{1,2}|[0-7]{1,3}|.)", re.DOTALL
)
_CLASS_REFERENCE = re.compile(r"^(.+?)\s*::\s*class$", re.IGNORECASE | re.DOTALL)
_LEGACY_OCTAL = re.compile(r"^0[0-7]+$")

_DOUBLE_QUOTE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "f": "\f",
    "e": "\x1b",
    "\\": "\\",
    "$": "$",
    '"': '"',
}


def _decode_escape(match: re.Match) -> str:
    seq = match.group(1)
    try:
        if seq.startswith("u{"):
            return chr(int(seq[2:-1], 16))
        if seq[0] == "x" and len(seq) > 1:
            return chr(int(seq[1:], 16))
        if seq[0] in "01234567":
            # PHP keeps only the low byte of "\400" and above
            return chr(int(seq, 8) & 0xFF)
    except ValueError:
        return match.group(0)
    return _DOUBLE_QUOTE_ESCAPES.get(seq, match.group(0))


# Children of a double-quoted string that keep it a plain literal
_PLAIN_STRING_PARTS = {"string_content", "string_value", "escape_sequence"}

CALL_TYPES = (
    "function_call_expression",
    "member_call_expression",
    "nullsafe_member_call_expression",
    "scoped_call_expression",
)
MEMBER_CALL_TYPES = ("member_call_expression", "nullsafe_member_call_expression")
BLOCK_TYPES = ("compound_statement", "colon_block")


def node_text(node: Node, source: bytes) -> str:
    """Extract source text for a node."""
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def pretty(node: Node, source: bytes) -> str:
    """Single-line source text, used for fallbacks and condition labels."""
    return _WHITESPACE.sub(" ", node_text(node, source)).strip()


def named(node: Node) -> list[Node]:
    """Named children, without comments."""
    return [c for c in node.named_children if c.type != "comment"]


def field(node: Node, name: str, index: int | None = None) -> Node | None:
    """Child by field name, falling back to a positional named child."""
    child = node.child_by_field_name(name)
    if child is not None or index is None:
        return child
    children = named(node)
    try:
        return children[index]
    except IndexError:
        return None


def unwrap(node: Node | None) -> Node | None:
    """Strip any number of enclosing parentheses."""
    while node is not None and node.type == "parenthesized_expression":
        children = named(node)
        node = children[0] if children else None
    return node


def statements_of(node: Node | None) -> list[Node]:
    """Statement list of a branch body (braced, colon-style or a bare statement)."""
    if node is None:
        return []
    if node.type in BLOCK_TYPES:
        return named(node)
    return [node]


def string_value(node: Node, source: bytes) -> str | None:
    """Value of a string literal, or None for interpolated/non-string nodes."""
    if node.type == "string":
        text = node_text(node, source)
        if text[:1] in ("b", "B"):
            text = text[1:]
        if len(text) < 2 or text[0] != text[-1] or text[0] not in ("'", '"'):
            return None
        return _SINGLE_QUOTE_ESCAPE.sub(r"\1", text[1:-1])
    if node.type == "encapsed_string":
        if any(c.type not in _PLAIN_STRING_PARTS for c in named(node)):
            return None
        text = node_text(node, source)
        if text[:1] in ("b", "B"):
            text = text[1:]
        if len(text) < 2:
            return None
        return _DOUBLE_QUOTE_ESCAPE.sub(_decode_escape, text[1:-1])
    return None


def integer_value(node: Node, source: bytes) -> str | None:
    """Decimal text of an integer literal."""
    if node.type != "integer":
        return None
    text = node_text(node, source).replace("_", "")
    try:
        if _LEGACY_OCTAL.match(text):
            return str(int(text, 8))
        return str(int(text, 0))
    except ValueError:
        return text


def scalar_value(node: Node, source: bytes) -> str | None:
    """Value of a string, integer, float or boolean literal as PHP would print it.

    Floats keep their source text; true is "1" and false is "".
    """
    value = string_value(node, source)
    if value is None:
        value = integer_value(node, source)
    if value is None and node.type == "float":
        value = node_text(node, source).replace("_", "")
    if value is None and node.type == "boolean":
        value = "1" if node_text(node, source).lower() == "true" else ""
    return value


def variable_name(node: Node | None, source: bytes) -> str | None:
    """`$rules` -> `rules`; None for anything but a plain variable."""
    if node is None or node.type != "variable_name":
        return None
    return node_text(node, source).lstrip("$")


def is_this(node: Node | None, source: bytes) -> bool:
    return variable_name(node, source) == "this"


def class_reference(node: Node | None, source: bytes) -> str | None:
    """`Status::class` -> `Status`; `\\App\\Role::class` -> `App\\Role`."""
    if node is None or node.type != "class_constant_access_expression":
        return None
    match = _CLASS_REFERENCE.match(pretty(node, source))
    return match.group(1).lstrip("\\") if match else None


def short_name(name: str) -> str:
    """Last segment of a possibly qualified class name."""
    return name.rstrip("\\").rsplit("\\", 1)[-1]


def call_name(node: Node, source: bytes) -> str:
    """Callee name of a call node: function name or method name."""
    if node.type == "function_call_expression":
        func = field(node, "function", 0)
        return node_text(func, source).lstrip("\\") if func is not None else ""
    name = node.child_by_field_name("name")
    return node_text(name, source) if name is not None else ""


def call_object(node: Node) -> Node | None:
    """Receiver of a member call (`$x` in `$x->m()`)."""
    if node.type not in MEMBER_CALL_TYPES:
        return None
    return field(node, "object", 0)


def call_scope(node: Node, source: bytes) -> str:
    """Class name of a static call (`Rule` in `Rule::in()`)."""
    if node.type != "scoped_call_expression":
        return ""
    scope = field(node, "scope", 0)
    return short_name(node_text(scope, source)) if scope is not None else ""


def call_arguments(node: Node) -> list[Node]:
    """Argument value nodes of a call or `new` expression, spreads excluded."""
    args = node.child_by_field_name("arguments")
    if args is None:
        args = next((c for c in named(node) if c.type == "arguments"), None)
    if args is None:
        return []
    values: list[Node] = []
    for arg in named(args):
        if arg.type == "argument":
            parts = named(arg)
            if not parts:
                continue
            arg = parts[-1]
        if arg.type in ("variadic_unpacking", "variadic_placeholder"):
            continue
        values.append(arg)
    return values


def binary_operator(node: Node) -> str:
    """Operator token of a binary expression (`+`, `.`, `===`, ...)."""
    op = node.child_by_field_name("operator")
    if op is None:
        op = next((c for c in node.children if not c.is_named), None)
    return op.type if op is not None else ""


def array_items(node: Node) -> list[Node]:
    """Element initializers of an array literal."""
    return [c for c in named(node) if c.type == "array_element_initializer"]


def split_array_item(item: Node) -> tuple[Node | None, Node | None]:
    """(key, value) of an array element; (None, None) for a spread element.

    The key is None for list-style elements without `=>`.
    """
    parts = named(item)
    if not parts or any(p.type == "variadic_unpacking" for p in parts):
        return None, None
    has_arrow = any(not c.is_named and c.type == "=>" for c in item.children)
    value = parts[-1]
    if value.type == "by_ref":
        by_ref = named(value)
        value = by_ref[0] if by_ref else value
    if has_arrow and len(parts) >= 2:
        return parts[0], value
    return None, value
