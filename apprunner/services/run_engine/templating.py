"""
Template resolution for app request fields.

Strings may embed ``{{ expression }}`` markers. Expressions reference run
inputs as ``@Name`` (or ``@"Name With Spaces"``) and the caller as
``@current_user.id``, ``@current_user.email``, ``@current_user.firstName``
or ``@current_user.lastName``. They support literals, arithmetic,
comparison, logical operators and the ternary operator::

    {{ @Debit ? -1 * @Amount : @Amount }}

Problems (unknown variables, syntax errors) never raise: they are collected
on the returned TemplateResult and the offending marker is left untouched.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from apprunner.core.auth import CurrentUser
from apprunner.models.contracts.inputs import (
    BooleanInputType,
    Input,
    IntegerInputType,
)

EXPRESSION_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")
CURRENT_USER_PREFIX = "current_user"

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>\d+(?:\.\d+)?)
  | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
  | (?P<quoted_var>@"(?:[^"\\]|\\.)*")
  | (?P<var>@[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)?)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>&&|\|\||==|!=|<=|>=|[-+*/%<>!?:()])
    """,
    re.VERBOSE,
)

_KEYWORD_OPERATORS = {"and": "&&", "or": "||", "not": "!"}
_KEYWORD_LITERALS = {"true": True, "false": False, "null": None}


class ExpressionError(Exception):
    """Raised internally while evaluating a single expression."""


@dataclass(frozen=True)
class TemplateContext:
    """
    Values visible to templates.

    ``variables`` holds input values already coerced for expression use
    (integers as int, booleans as bool, everything else as str).
    """
    variables: Mapping[str, Any] = field(default_factory=dict)
    current_user: CurrentUser | None = None

    @classmethod
    def from_inputs(
        cls,
        values: Mapping[str, str],
        inputs: list[Input],
        current_user: CurrentUser | None = None,
    ) -> "TemplateContext":
        """Build a context from raw string values and the app's declared inputs."""
        types = {item.title: item.type for item in inputs}
        variables: dict[str, Any] = {}
        for title, raw in values.items():
            variables[title] = _coerce_for_expression(raw, types.get(title))
        return cls(variables=variables, current_user=current_user)


@dataclass(frozen=True)
class TemplateResult:
    """Resolved string plus any errors encountered."""
    value: str
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


def has_expressions(value: str) -> bool:
    return EXPRESSION_PATTERN.search(value) is not None


def resolve_template(template: str, context: TemplateContext) -> TemplateResult:
    """
    Expand every ``{{ expression }}`` marker in ``template``.

    Markers that fail to evaluate are kept verbatim and their errors are
    reported in the result.
    """
    if not has_expressions(template):
        return TemplateResult(template)

    errors: list[str] = []

    def replace(match: re.Match[str]) -> str:
        try:
            return render_value(evaluate_expression(match.group(1), context))
        except ExpressionError as e:
            errors.append(str(e))
            return match.group(0)

    value = EXPRESSION_PATTERN.sub(replace, template)
    return TemplateResult(value, tuple(errors))


def evaluate_expression(expression: str, context: TemplateContext) -> Any:
    """
    Parse and evaluate one expression (the text between the braces).

    Raises:
        ExpressionError: On syntax errors, unknown variables or type errors
    """
    parser = _Parser(_tokenize(expression))
    node = parser.parse()
    return _evaluate(node, context)


def render_value(value: Any) -> str:
    """Render an evaluated value the way it appears in a request."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ==================== TOKENIZER ====================


@dataclass(frozen=True)
class _Token:
    kind: str  # number, string, var, op, literal, end
    value: Any


def _unescape(body: str) -> str:
    return re.sub(r"\\(.)", r"\1", body)


def _tokenize(expression: str) -> list[_Token]:
    tokens: list[_Token] = []
    position = 0
    while position < len(expression):
        match = _TOKEN_PATTERN.match(expression, position)
        if not match:
            raise ExpressionError(
                f"Unexpected character '{expression[position]}' in expression '{expression.strip()}'"
            )
        position = match.end()
        kind = match.lastgroup
        text = match.group()

        if kind == "ws":
            continue
        if kind == "number":
            tokens.append(_Token("number", float(text) if "." in text else int(text)))
        elif kind == "string":
            tokens.append(_Token("string", _unescape(text[1:-1])))
        elif kind == "quoted_var":
            tokens.append(_Token("var", _unescape(text[2:-1])))
        elif kind == "var":
            tokens.append(_Token("var", text[1:]))
        elif kind == "ident":
            lowered = text.lower()
            if lowered in _KEYWORD_OPERATORS:
                tokens.append(_Token("op", _KEYWORD_OPERATORS[lowered]))
            elif lowered in _KEYWORD_LITERALS:
                tokens.append(_Token("literal", _KEYWORD_LITERALS[lowered]))
            else:
                # Bare identifiers read as variables: {{ Name }} == {{ @Name }}
                tokens.append(_Token("var", text))
        else:
            tokens.append(_Token("op", text))

    tokens.append(_Token("end", None))
    return tokens


# ==================== PARSER ====================

# AST nodes are tuples:
#   ("lit", value) | ("var", name) | ("unary", op, operand)
#   ("binary", op, left, right) | ("ternary", condition, then, otherwise)

_BINARY_LEVELS: list[tuple[str, ...]] = [
    ("||",),
    ("&&",),
    ("==", "!="),
    ("<", "<=", ">", ">="),
    ("+", "-"),
    ("*", "/", "%"),
]


class _Parser:
    def __init__(self, tokens: list[_Token]):
        self.tokens = tokens
        self.index = 0

    def parse(self) -> tuple:
        if self._peek().kind == "end":
            raise ExpressionError("Empty expression")
        node = self._ternary()
        if self._peek().kind != "end":
            raise ExpressionError(f"Unexpected token '{self._peek().value}'")
        return node

    def _peek(self) -> _Token:
        return self.tokens[self.index]

    def _advance(self) -> _Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _accept_op(self, *ops: str) -> str | None:
        token = self._peek()
        if token.kind == "op" and token.value in ops:
            self.index += 1
            return token.value
        return None

    def _expect_op(self, op: str) -> None:
        if self._accept_op(op) is None:
            found = self._peek().value if self._peek().kind != "end" else "end of expression"
            raise ExpressionError(f"Expected '{op}' but found '{found}'")

    def _ternary(self) -> tuple:
        condition = self._binary(0)
        if self._accept_op("?"):
            then = self._ternary()
            self._expect_op(":")
            otherwise = self._ternary()
            return ("ternary", condition, then, otherwise)
        return condition

    def _binary(self, level: int) -> tuple:
        if level == len(_BINARY_LEVELS):
            return self._unary()
        left = self._binary(level + 1)
        while True:
            op = self._accept_op(*_BINARY_LEVELS[level])
            if op is None:
                return left
            right = self._binary(level + 1)
            left = ("binary", op, left, right)

    def _unary(self) -> tuple:
        op = self._accept_op("!", "-", "+")
        if op is not None:
            return ("unary", op, self._unary())
        return self._primary()

    def _primary(self) -> tuple:
        token = self._advance()
        if token.kind in ("number", "string", "literal"):
            return ("lit", token.value)
        if token.kind == "var":
            return ("var", token.value)
        if token.kind == "op" and token.value == "(":
            node = self._ternary()
            self._expect_op(")")
            return node
        if token.kind == "end":
            raise ExpressionError("Unexpected end of expression")
        raise ExpressionError(f"Unexpected token '{token.value}'")


# ==================== EVALUATION ====================


def _coerce_for_expression(raw: str, input_type: Any) -> Any:
    if isinstance(input_type, BooleanInputType):
        return raw.strip().lower() == "true"
    if isinstance(input_type, IntegerInputType):
        try:
            return int(raw.strip())
        except ValueError:
            return raw
    return raw


def _lookup(name: str, context: TemplateContext) -> Any:
    if name.startswith(f"{CURRENT_USER_PREFIX}."):
        prop = name[len(CURRENT_USER_PREFIX) + 1:]
        if context.current_user is None:
            raise ExpressionError(f"Variable '{name}' has no value")
        attributes = context.current_user.template_attributes()
        if prop not in attributes:
            raise ExpressionError(f"Unknown current_user property: {prop}")
        return attributes[prop]

    if name not in context.variables:
        raise ExpressionError(f"Variable '{name}' has no value")
    return context.variables[name]


def _require_number(value: Any, op: str) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ExpressionError(f"Operator '{op}' requires numbers, got '{render_value(value)}'")
    return value


def _evaluate(node: tuple, context: TemplateContext) -> Any:
    kind = node[0]

    if kind == "lit":
        return node[1]

    if kind == "var":
        return _lookup(node[1], context)

    if kind == "ternary":
        _, condition, then, otherwise = node
        branch = then if _evaluate(condition, context) else otherwise
        return _evaluate(branch, context)

    if kind == "unary":
        _, op, operand = node
        value = _evaluate(operand, context)
        if op == "!":
            return not value
        number = _require_number(value, op)
        return -number if op == "-" else number

    _, op, left_node, right_node = node

    # Logical operators short-circuit
    if op == "&&":
        left = _evaluate(left_node, context)
        return _evaluate(right_node, context) if left else left
    if op == "||":
        left = _evaluate(left_node, context)
        return left if left else _evaluate(right_node, context)

    left = _evaluate(left_node, context)
    right = _evaluate(right_node, context)

    if op == "==":
        return left == right
    if op == "!=":
        return left != right

    if op == "+" and (isinstance(left, str) or isinstance(right, str)):
        return render_value(left) + render_value(right)

    if op in ("<", "<=", ">", ">="):
        if not (isinstance(left, str) and isinstance(right, str)):
            left = _require_number(left, op)
            right = _require_number(right, op)
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        return left >= right

    left = _require_number(left, op)
    right = _require_number(right, op)
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if right == 0:
        raise ExpressionError("Division by zero")
    if op == "%":
        return left % right
    quotient = left / right
    if isinstance(left, int) and isinstance(right, int) and quotient.is_integer():
        return int(quotient)
    return quotient
