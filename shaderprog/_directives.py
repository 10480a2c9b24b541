"""
Recognize and parse the directive lines of a shader program file. This is
pure syntax; whether a directive is allowed in the current parse state is up
to the parser that consumes the result.

The supported directives are::

    #include {<path> | "path"}
    #pragma once
    #pragma anki mutator [instanced] NAME VALUE0 [VALUE1 ...]
    #pragma anki input [const | instanced] TYPE NAME
    #pragma anki start {vert | tessc | tesse | geom | frag | comp}
    #pragma anki end
    #pragma anki descriptor_set NUMBER
"""

import re
from collections import namedtuple

from .errors import (
    DirectiveError,
    MalformedValueError,
    UnknownInputTypeError,
    TooManyMutatorValuesError,
)
from .program import MAX_MUTATOR_VALUES
from .utils import ReadOnlyDict
from .utils.enums import ShaderStage, DataType


IncludeDirective = namedtuple("IncludeDirective", ["path"])
PragmaOnceDirective = namedtuple("PragmaOnceDirective", [])
MutatorDirective = namedtuple("MutatorDirective", ["name", "values", "instanced"])
InputDirective = namedtuple("InputDirective", ["qualifier", "data_type", "name"])
StartDirective = namedtuple("StartDirective", ["stage"])
EndDirective = namedtuple("EndDirective", [])
DescriptorSetDirective = namedtuple("DescriptorSetDirective", ["index"])

input_types = ReadOnlyDict({t.value: t for t in DataType})
stage_tokens = ReadOnlyDict({s.value: s for s in ShaderStage})

re_identifier = re.compile(r"[A-Za-z_]\w*\Z", re.ASCII)
re_int = re.compile(r"[+-]?\d+\Z", re.ASCII)
re_uint = re.compile(r"\d+\Z", re.ASCII)


def parse_directive(tokens, location=None):
    """Parse a tokenized line. Returns a directive object, or None if the
    line is not a directive (plain code, or a pragma that is not ours).
    Raises a ``ShaderSyntaxError`` for malformed directives.
    """
    if not tokens or tokens[0].quoted:
        return None
    first = tokens[0].text

    if first == "#include":
        return _parse_include(tokens[1:], location)
    elif first.startswith("#include<"):
        # No space between the directive and the path
        path_token = tokens[0]._replace(text=first[len("#include") :])
        return _parse_include([path_token, *tokens[1:]], location)
    elif first != "#pragma" or len(tokens) < 2 or tokens[1].quoted:
        return None

    second = tokens[1].text
    if second == "once":
        if len(tokens) != 2:
            raise DirectiveError.at(location, "Unexpected tokens after #pragma once")
        return PragmaOnceDirective()
    elif second != "anki":
        return None

    if len(tokens) < 3:
        raise DirectiveError.at(location, "Expected a keyword after #pragma anki")
    keyword = tokens[2].text
    try:
        parse_func = pragma_parsers[keyword]
    except KeyError:
        raise DirectiveError.at(
            location, f"Unknown directive '#pragma anki {keyword}'"
        ) from None
    return parse_func(tokens[3:], location)


def _parse_include(args, location):
    if len(args) != 1:
        raise DirectiveError.at(location, "Expected exactly one path after #include")
    token = args[0]
    if token.quoted:
        path = token.text
    else:
        text = token.text
        if not (len(text) >= 2 and text.startswith("<") and text.endswith(">")):
            raise DirectiveError.at(location, f"Malformed include path: {text}")
        path = text[1:-1]
    if not path.strip():
        raise DirectiveError.at(location, "Empty include path")
    return IncludeDirective(path)


def _parse_mutator(args, location):
    instanced = False
    if args and args[0].text == "instanced":
        instanced = True
        args = args[1:]
    if len(args) < 2:
        raise DirectiveError.at(
            location, "Expected a mutator name and at least one value"
        )

    name = _parse_name(args[0], location)
    values = []
    for token in args[1:]:
        if not re_int.match(token.text):
            raise MalformedValueError.at(
                location, f"Mutator {name} has a malformed value: {token.text}"
            )
        value = int(token.text)
        if value in values:
            raise MalformedValueError.at(
                location, f"Mutator {name} has duplicate value {value}"
            )
        values.append(value)

    if len(values) > MAX_MUTATOR_VALUES:
        raise TooManyMutatorValuesError.at(
            location,
            f"Mutator {name} has {len(values)} values, the max is {MAX_MUTATOR_VALUES}",
        )
    return MutatorDirective(name, tuple(values), instanced)


def _parse_input(args, location):
    qualifier = None
    if args and args[0].text in ("const", "instanced"):
        qualifier = args[0].text
        args = args[1:]
    if len(args) != 2:
        raise DirectiveError.at(location, "Expected an input type and name")

    try:
        data_type = input_types[args[0].text]
    except KeyError:
        raise UnknownInputTypeError.at(
            location, f"Unknown input type: {args[0].text}"
        ) from None
    name = _parse_name(args[1], location)

    if qualifier and not data_type.is_numeric:
        raise DirectiveError.at(
            location, f"Input {name} of type {data_type.value} cannot be {qualifier}"
        )
    return InputDirective(qualifier, data_type, name)


def _parse_start(args, location):
    if len(args) != 1:
        raise DirectiveError.at(location, "Expected a shader stage after start")
    try:
        stage = stage_tokens[args[0].text]
    except KeyError:
        raise DirectiveError.at(
            location, f"Unknown shader stage: {args[0].text}"
        ) from None
    return StartDirective(stage)


def _parse_end(args, location):
    if args:
        raise DirectiveError.at(location, "Unexpected tokens after end")
    return EndDirective()


def _parse_descriptor_set(args, location):
    if len(args) != 1:
        raise DirectiveError.at(location, "Expected one number after descriptor_set")
    text = args[0].text
    if not re_uint.match(text):
        raise MalformedValueError.at(location, f"Malformed descriptor set: {text}")
    return DescriptorSetDirective(int(text))


def _parse_name(token, location):
    if token.quoted or not re_identifier.match(token.text):
        raise DirectiveError.at(location, f"Invalid name: {token.text}")
    return token.text


pragma_parsers = ReadOnlyDict(
    mutator=_parse_mutator,
    input=_parse_input,
    start=_parse_start,
    end=_parse_end,
    descriptor_set=_parse_descriptor_set,
)
