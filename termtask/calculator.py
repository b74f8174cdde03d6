import ast
import math
import operator
import re

from .errors import EmptyExpression, InvalidCharacters, InvalidExpression

SAFE_EXPR_RE = re.compile(r"[0-9+\-*/%().\s]+")

BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}
UNARY_OPS = {ast.UAdd: operator.pos, ast.USub: operator.neg}

MAX_EXPONENT = 1000
# Integer results stay well under the interpreter's int-to-str digit limit.
MAX_BITS = 10000


def calculate(expression: str) -> str:
    """Evaluate plain arithmetic and return the result as text."""
    if not expression or not expression.strip():
        raise EmptyExpression()
    if not SAFE_EXPR_RE.fullmatch(expression):
        raise InvalidCharacters()
    try:
        tree = ast.parse(expression.strip(), mode="eval")
        value = _eval(tree.body)
    except (SyntaxError, ValueError, ZeroDivisionError, OverflowError) as e:
        raise InvalidExpression() from e
    return format_number(value)


def _too_large(value) -> bool:
    return isinstance(value, int) and value.bit_length() > MAX_BITS


def _eval(node):
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        value = node.value
    elif isinstance(node, ast.UnaryOp) and type(node.op) in UNARY_OPS:
        value = UNARY_OPS[type(node.op)](_eval(node.operand))
    elif isinstance(node, ast.BinOp) and type(node.op) in BIN_OPS:
        left, right = _eval(node.left), _eval(node.right)
        if isinstance(node.op, ast.Pow):
            if abs(right) > MAX_EXPONENT:
                raise InvalidExpression("Number too large.")
            if abs(left) > 1 and right * math.log2(abs(left)) > MAX_BITS:
                raise InvalidExpression("Number too large.")
        value = BIN_OPS[type(node.op)](left, right)
        if isinstance(value, complex):
            raise InvalidExpression()
    else:
        raise InvalidExpression()
    if _too_large(value):
        raise InvalidExpression("Number too large.")
    return value


def format_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    try:
        return str(value)
    except ValueError as e:
        raise InvalidExpression("Number too large.") from e
