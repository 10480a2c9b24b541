"""
Resolve the preprocessor conditionals that are keyed off mutators.

For a given mutator assignment, an ``#if``/``#elif``/``#else``/``#endif``
chain whose conditions only reference declared mutators (or only literals)
is evaluated here: the taken branch is kept and the directive lines are
dropped. Chains that depend on other macros are left alone, since only the
real preprocessor can know about those; their branches are still searched
for nested mutator chains. The generated source always defines the mutators
as macros, so leaving a chain in place never changes its meaning.

A condition that mixes mutators with names that are not declared mutators
cannot be resolved either way, and is an error.
"""

import re

from .errors import (
    ConditionalExpressionError,
    UnbalancedConditionalError,
    UnknownMutatorReferenceError,
)


re_conditional = re.compile(r"\s*#\s*(if|ifdef|ifndef|elif|else|endif)\b(.*)")
re_comment = re.compile(r"//.*|/\*.*?(\*/|$)")
re_names = re.compile(r"\d\w*|([A-Za-z_]\w*)")
re_expr_token = re.compile(
    r"\s*(?:(0[xX][0-9a-fA-F]+|\d+)[uUlL]*|([A-Za-z_]\w*)|(&&|\|\||<<|>>|<=|>=|==|!=|[-+*/%<>&|^!~()?:]))"
)

binary_precedence = {
    "||": 1,
    "&&": 2,
    "|": 3,
    "^": 4,
    "&": 5,
    "==": 6,
    "!=": 6,
    "<": 7,
    ">": 7,
    "<=": 7,
    ">=": 7,
    "<<": 8,
    ">>": 8,
    "+": 9,
    "-": 9,
    "*": 10,
    "/": 10,
    "%": 10,
}


class _Branch:
    __slots__ = ["kind", "expression", "line", "children"]

    def __init__(self, kind, expression, line):
        self.kind = kind
        self.expression = expression
        self.line = line
        self.children = []

    @property
    def location(self):
        return self.line.filename, self.line.lineno


class _Chain:
    __slots__ = ["branches", "end_line"]

    def __init__(self):
        self.branches = []
        self.end_line = None


def build_tree(lines):
    """Group a list of SourceLine objects into a tree of plain lines and
    conditional chains.
    """
    root = []
    stack = []
    current = root

    for line in lines:
        match = None if line.input_index is not None else re_conditional.match(line.text)
        if match is None:
            current.append(line)
            continue

        kind = match.group(1)
        expression = re_comment.sub(" ", match.group(2)).strip()
        location = line.filename, line.lineno

        if kind in ("if", "ifdef", "ifndef"):
            chain = _Chain()
            chain.branches.append(_Branch(kind, expression, line))
            current.append(chain)
            stack.append(chain)
            current = chain.branches[-1].children
        elif kind in ("elif", "else"):
            if not stack:
                raise UnbalancedConditionalError.at(location, f"#{kind} without #if")
            chain = stack[-1]
            if chain.branches[-1].kind == "else":
                raise UnbalancedConditionalError.at(location, f"#{kind} after #else")
            chain.branches.append(_Branch(kind, expression, line))
            current = chain.branches[-1].children
        else:
            if not stack:
                raise UnbalancedConditionalError.at(location, "#endif without #if")
            chain = stack.pop()
            chain.end_line = line
            current = stack[-1].branches[-1].children if stack else root

    if stack:
        location = stack[-1].branches[0].location
        raise UnbalancedConditionalError.at(location, "#if without #endif")
    return root


class ConditionalResolver:
    """Resolves mutator conditionals for one mutator assignment.

    Parameters
    ----------
    values : Mapping[str, int]
        The value of every declared mutator.
    """

    def __init__(self, values):
        self._values = values

    def resolve(self, lines):
        """Resolve the given SourceLine objects, returning a new list."""
        result = []
        self._emit(build_tree(lines), result)
        return result

    def _emit(self, nodes, result):
        for node in nodes:
            if isinstance(node, _Chain):
                self._emit_chain(node, result)
            else:
                result.append(node)

    def _emit_chain(self, chain, result):
        # Check all branches first, so that mixed conditions always raise
        resolvable = [self._is_resolvable(branch) for branch in chain.branches]
        if all(resolvable):
            for branch in chain.branches:
                if self._evaluate(branch):
                    self._emit(branch.children, result)
                    break
        else:
            for branch in chain.branches:
                result.append(branch.line)
                self._emit(branch.children, result)
            result.append(chain.end_line)

    def _is_resolvable(self, branch):
        if branch.kind == "else":
            return True
        names = set(m.group(1) for m in re_names.finditer(branch.expression))
        names.discard(None)
        names.discard("defined")
        if branch.kind in ("ifdef", "ifndef") and len(names) != 1:
            raise ConditionalExpressionError.at(
                branch.location, f"#{branch.kind} expects one macro name"
            )
        unknown = names.difference(self._values)
        if unknown and len(unknown) < len(names):
            unknown_str = ", ".join(sorted(unknown))
            raise UnknownMutatorReferenceError.at(
                branch.location,
                f"Condition '{branch.expression}' mixes mutators with undeclared names: {unknown_str}",
            )
        return not unknown

    def _evaluate(self, branch):
        if branch.kind == "else":
            return True
        elif branch.kind == "ifdef":
            return branch.expression.split()[0] in self._values
        elif branch.kind == "ifndef":
            return branch.expression.split()[0] not in self._values
        node = _ExpressionParser(branch.expression, branch.location).parse()
        return bool(self._evaluate_node(node, branch.location))

    def _evaluate_node(self, node, location):
        kind = node[0]
        if kind == "number":
            return node[1]
        elif kind == "name":
            return self._values[node[1]]
        elif kind == "defined":
            return int(node[1] in self._values)
        elif kind == "unary":
            value = self._evaluate_node(node[2], location)
            return {"-": -value, "+": value, "~": ~value, "!": int(not value)}[node[1]]
        elif kind == "ternary":
            if self._evaluate_node(node[1], location):
                return self._evaluate_node(node[2], location)
            return self._evaluate_node(node[3], location)

        # Binary, with short-circuit evaluation for the logical operators
        op = node[1]
        left = self._evaluate_node(node[2], location)
        if op == "&&":
            return int(bool(left) and bool(self._evaluate_node(node[3], location)))
        elif op == "||":
            return int(bool(left) or bool(self._evaluate_node(node[3], location)))
        right = self._evaluate_node(node[3], location)
        return _apply_binary(op, left, right, location)


def _apply_binary(op, left, right, location):
    if op in ("/", "%"):
        if right == 0:
            raise ConditionalExpressionError.at(location, "Division by zero")
        # C semantics: the quotient is truncated towards zero
        quotient = abs(left) // abs(right)
        if (left < 0) != (right < 0):
            quotient = -quotient
        return quotient if op == "/" else left - right * quotient
    elif op in ("<<", ">>"):
        if right < 0:
            raise ConditionalExpressionError.at(location, "Negative shift count")
        return left << right if op == "<<" else left >> right
    return {
        "|": lambda: left | right,
        "^": lambda: left ^ right,
        "&": lambda: left & right,
        "==": lambda: int(left == right),
        "!=": lambda: int(left != right),
        "<": lambda: int(left < right),
        ">": lambda: int(left > right),
        "<=": lambda: int(left <= right),
        ">=": lambda: int(left >= right),
        "+": lambda: left + right,
        "-": lambda: left - right,
        "*": lambda: left * right,
    }[op]()


class _ExpressionParser:
    """Parse a preprocessor expression into a tree of tuples."""

    def __init__(self, text, location):
        self._location = location
        self._text = text
        self._tokens = self._tokenize(text)
        self._pos = 0

    def _error(self, message):
        return ConditionalExpressionError.at(
            self._location, f"{message} in condition '{self._text}'"
        )

    def _tokenize(self, text):
        tokens = []
        pos = 0
        text = text.rstrip()
        while pos < len(text):
            match = re_expr_token.match(text, pos)
            if match is None:
                raise self._error(f"Unexpected character {text[pos:].lstrip()[:1]!r}")
            number, name, op = match.groups()
            if number is not None:
                try:
                    tokens.append(("number", _parse_number(number)))
                except ValueError:
                    raise self._error(f"Invalid number {number}") from None
            elif name is not None:
                tokens.append(("name", name))
            else:
                tokens.append(("op", op))
            pos = match.end()
        return tokens

    def _peek(self):
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return (None, None)

    def _next(self):
        token = self._peek()
        if token[0] is None:
            raise self._error("Unexpected end")
        self._pos += 1
        return token

    def _expect(self, op):
        if self._next() != ("op", op):
            raise self._error(f"Expected '{op}'")

    def parse(self):
        if not self._tokens:
            raise self._error("Empty expression")
        node = self._ternary()
        if self._pos != len(self._tokens):
            raise self._error(f"Unexpected {self._peek()[1]!r}")
        return node

    def _ternary(self):
        condition = self._binary(1)
        if self._peek() == ("op", "?"):
            self._next()
            if_true = self._ternary()
            self._expect(":")
            if_false = self._ternary()
            return ("ternary", condition, if_true, if_false)
        return condition

    def _binary(self, min_precedence):
        left = self._unary()
        while True:
            kind, op = self._peek()
            precedence = binary_precedence.get(op) if kind == "op" else None
            if precedence is None or precedence < min_precedence:
                return left
            self._next()
            right = self._binary(precedence + 1)
            left = ("binary", op, left, right)

    def _unary(self):
        kind, value = self._next()
        if kind == "number":
            return ("number", value)
        elif kind == "name":
            if value != "defined":
                return ("name", value)
            parens = self._peek() == ("op", "(")
            if parens:
                self._next()
            kind, name = self._next()
            if kind != "name":
                raise self._error("Expected a macro name after 'defined'")
            if parens:
                self._expect(")")
            return ("defined", name)
        elif value == "(":
            node = self._ternary()
            self._expect(")")
            return node
        elif value in ("!", "-", "+", "~"):
            return ("unary", value, self._unary())
        raise self._error(f"Unexpected {value!r}")


def _parse_number(text):
    if text[:2] in ("0x", "0X"):
        return int(text, 16)
    elif len(text) > 1 and text.startswith("0"):
        return int(text, 8)
    return int(text)
