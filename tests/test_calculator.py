import pytest

from termtask.calculator import calculate
from termtask.errors import EmptyExpression, InvalidCharacters, InvalidExpression


@pytest.mark.parametrize("expr, expected", [
    ("2+2", "4"),
    ("(5 + 3) * 2", "16"),
    ("7/2", "3.5"),
    ("8/4", "2"),
    ("10 % 4", "2"),
    ("2**10", "1024"),
    ("-3 + 1", "-2"),
    (" 1.5 * 2 ", "3"),
])
def test_arithmetic(expr, expected):
    assert calculate(expr) == expected


@pytest.mark.parametrize("expr", ["2+", "1 2", "()", "1/0", "(-8) ** 0.5", "2 ** 99999", "08"])
def test_invalid_expression(expr):
    with pytest.raises(InvalidExpression):
        calculate(expr)


@pytest.mark.parametrize("expr", ["DROP TABLE", "__import__('os')", "2 + x", "1,2"])
def test_invalid_characters(expr):
    with pytest.raises(InvalidCharacters):
        calculate(expr)


@pytest.mark.parametrize("expr", ["", "   ", None])
def test_empty_expression(expr):
    with pytest.raises(EmptyExpression):
        calculate(expr)


@pytest.mark.parametrize("expr", [
    "9**999*9**999*9**999*9**999*9**999",
    "((9**999)**999)**999",
    "(2**1000)**20",
    "1" * 5000,
])
def test_huge_results_are_rejected(expr):
    with pytest.raises(InvalidExpression):
        calculate(expr)


def test_large_but_bounded_result():
    assert calculate("2**1000") == str(2 ** 1000)
