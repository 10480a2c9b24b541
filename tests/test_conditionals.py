import pytest

from shaderprog import (
    GenerateError,
    ConditionalExpressionError,
    UnbalancedConditionalError,
    UnknownMutatorReferenceError,
)
from shaderprog.program import SourceLine
from shaderprog._conditionals import ConditionalResolver


def lines_from(text):
    return [SourceLine(t, "x.glsl", i) for i, t in enumerate(text.splitlines(), 1)]


def resolve(text, **values):
    return [line.text for line in ConditionalResolver(values).resolve(lines_from(text))]


def test_no_conditionals():
    assert resolve("a\nb\n\nc", A=1) == ["a", "b", "", "c"]


def test_if_else():
    code = "#if A\na\n#else\nb\n#endif"
    assert resolve(code, A=1) == ["a"]
    assert resolve(code, A=0) == ["b"]
    assert resolve("#if A\na\n#endif\nc", A=0) == ["c"]


def test_elif_chain():
    code = """#if A == 0
zero
#elif A == 1
one
#elif A == 2
two
#else
other
#endif"""
    assert resolve(code, A=0) == ["zero"]
    assert resolve(code, A=1) == ["one"]
    assert resolve(code, A=2) == ["two"]
    assert resolve(code, A=3) == ["other"]


def test_ifdef():
    assert resolve("#ifdef A\na\n#else\nb\n#endif", A=0) == ["a"]
    assert resolve("#ifndef A\na\n#else\nb\n#endif", A=0) == ["b"]
    assert resolve("#if defined(A)\na\n#endif", A=0) == ["a"]
    assert resolve("#if defined A && A\na\n#endif", A=0) == []


def test_whitespace_and_comments():
    assert resolve("  #  if A // yes\na\n  # endif", A=1) == ["a"]
    assert resolve("#if A /* yes */\na\n#endif /* done */", A=1) == ["a"]


def test_literals():
    assert resolve("#if 0\na\n#endif\nb") == ["b"]
    assert resolve("#if 1\na\n#endif\nb") == ["a", "b"]


def test_foreign_conditionals_are_kept():
    code = "#ifdef FOO\nx\n#else\ny\n#endif"
    assert resolve(code, A=1) == ["#ifdef FOO", "x", "#else", "y", "#endif"]

    # But nested mutator conditionals are still resolved
    code = "#ifdef FOO\n#if A\na\n#else\nb\n#endif\n#endif"
    assert resolve(code, A=0) == ["#ifdef FOO", "b", "#endif"]

    code = "#if A\n#if FOO > 2\na\n#endif\n#endif"
    assert resolve(code, A=1) == ["#if FOO > 2", "a", "#endif"]
    assert resolve(code, A=0) == []


def test_mixed_names_fail():
    with pytest.raises(UnknownMutatorReferenceError) as err:
        resolve("x\n#if A && FOO\na\n#endif", A=1)
    assert (err.value.filename, err.value.lineno) == ("x.glsl", 2)
    assert "FOO" in str(err.value)
    assert isinstance(err.value, GenerateError)

    # Also when it is not the first branch
    with pytest.raises(UnknownMutatorReferenceError):
        resolve("#if A\na\n#elif B == FOO\nb\n#endif", A=1, B=0)


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("(A + 1) * 2 == 4", True),
        ("A - 2 * 3 == -5", True),
        ("-7 / 2 == -3", True),
        ("-7 % 2 == -1", True),
        ("7 / -2 == -3", True),
        ("0x10 == 16", True),
        ("010 == 8", True),
        ("1u == 1", True),
        ("1 << 3 == 8", True),
        ("16 >> 2 == 4", True),
        ("(6 & 3) == 2", True),
        ("(6 | 1) == 7", True),
        ("(6 ^ 2) == 4", True),
        ("~0 == -1", True),
        ("!A", False),
        ("!!A", True),
        ("A ? 0 : 1", False),
        ("A > 0 && A < 2", True),
        ("A >= 2 || A <= 0", False),
        ("A != 1", False),
        ("1 + 2 * 3 == 7", True),
        ("1 == 1 == 1", True),
    ],
)
def test_expressions(expression, expected):
    code = f"#if {expression}\nyes\n#endif"
    assert resolve(code, A=1) == (["yes"] if expected else [])


def test_short_circuit():
    assert resolve("#if A == 0 || 1 / A\na\n#endif", A=0) == ["a"]
    assert resolve("#if A && 1 / A\na\n#endif", A=0) == []
    assert resolve("#if A ? 1 / A : 1\na\n#endif", A=0) == ["a"]


@pytest.mark.parametrize(
    "expression",
    ["", "// nothing", "A +", "(A", "A)", "A $ 1", "09", "1 / A", "1 % A", "1 << -1", "A ? 1", "defined"],
)
def test_bad_expressions(expression):
    with pytest.raises(ConditionalExpressionError) as err:
        resolve(f"x\n#if {expression}\na\n#endif", A=0)
    assert err.value.lineno == 2


def test_bad_ifdef():
    with pytest.raises(ConditionalExpressionError):
        resolve("#ifdef\na\n#endif", A=0)
    with pytest.raises(ConditionalExpressionError):
        resolve("#ifdef A B\na\n#endif", A=0)


@pytest.mark.parametrize(
    "code, lineno",
    [
        ("#endif", 1),
        ("#else", 1),
        ("x\n#elif A", 2),
        ("#if A\nx", 1),
        ("#if A\n#if A\n#endif", 1),
        ("#if A\n#else\n#else\n#endif", 3),
        ("#if A\n#else\n#elif A\n#endif", 3),
    ],
)
def test_unbalanced(code, lineno):
    with pytest.raises(UnbalancedConditionalError) as err:
        resolve(code, A=1)
    assert err.value.lineno == lineno


def test_input_lines_are_not_conditionals():
    lines = [SourceLine("#if A", "x.glsl", 1, 0)]
    assert ConditionalResolver({"A": 0}).resolve(lines) == lines
