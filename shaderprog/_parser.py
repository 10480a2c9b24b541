"""
Parse a shader program file, and all the files it includes, into a
``ShaderProgram``.

Files are read line by line. Lines that are not one of our directives are
kept as-is: inside a ``start``/``end`` section they go to that stage, all
others go to the globals block that is shared by all stages. Includes are
expanded in place, depth first. Directive lines themselves are dropped, except
for input declarations, which are replaced by a placeholder line that the
variant generator renders into the actual declaration.
"""

import posixpath

from .errors import (
    NotFoundError,
    StateError,
    DuplicateMutatorError,
    MalformedValueError,
    DuplicateInstancedMutatorError,
    DuplicateInputError,
    TooManyInputsError,
    InstancedInputWithoutMutatorError,
    InstancedMutatorWithoutInputError,
    DescriptorSetRedefinedError,
    UnterminatedStageError,
    IncludeDepthExceededError,
)
from .program import (
    MAX_INPUTS,
    MAX_INCLUDE_DEPTH,
    SourceLine,
    Mutator,
    ShaderInput,
    StageBlock,
    ShaderProgram,
)
from .sources import ChainFileSource, as_file_source, library_source
from .utils import assert_type, logger
from ._tokenizer import tokenize_line
from ._directives import (
    parse_directive,
    IncludeDirective,
    PragmaOnceDirective,
    MutatorDirective,
    InputDirective,
    StartDirective,
    EndDirective,
    DescriptorSetDirective,
)


def parse(filename, file_source, push_constants_size=0):
    """Parse a shader program.

    Parameters
    ----------
    filename : str
        The path of the root file, relative to the root of the file source.
    file_source : FileSource | jinja2.BaseLoader | dict | callable | str
        Where to read the files from, see ``as_file_source()``. Files that it
        does not have are looked up in the built-in snippet library.
    push_constants_size : int
        If non-zero, the uniform block is declared as push constants.

    Returns
    -------
    program : ShaderProgram
    """
    assert_type("filename", filename, str)
    file_source = as_file_source(file_source)
    return ShaderProgramParser(filename, file_source, push_constants_size).parse()


def normalize_path(path):
    """Normalize an include path: forward slashes, no ``.`` or ``..`` parts
    where they can be resolved.
    """
    return posixpath.normpath(path.replace("\\", "/"))


class ShaderProgramParser:
    """Object to parse one shader program. Use it once."""

    def __init__(self, filename, file_source, push_constants_size=0):
        push_constants_size = int(push_constants_size)
        if push_constants_size < 0:
            raise ValueError("push_constants_size must not be negative")

        self._filename = normalize_path(filename)
        self._source = ChainFileSource(file_source, library_source)
        self._push_constants_size = push_constants_size

        self._mutators = []
        self._inputs = []
        self._declared = {}  # name -> "mutator" or "input"
        self._instanced_mutator_location = None
        self._spec_constant_count = 0
        self._descriptor_set = None

        self._globals = []
        self._stage_lines = {}
        self._stage = None
        self._stage_location = None

        self._pragma_once_paths = set()

    def parse(self):
        self._parse_file(self._filename, 0)

        if self._instanced_mutator_location and not any(
            i.instanced for i in self._inputs
        ):
            raise InstancedMutatorWithoutInputError.at(
                self._instanced_mutator_location,
                "An instanced mutator is declared, but there are no instanced inputs",
            )

        if not self._stage_lines:
            logger.warning(f"Shader program {self._filename} has no stages")

        return ShaderProgram(
            self._filename,
            mutators=self._mutators,
            inputs=self._inputs,
            globals=self._globals,
            stages={
                stage: StageBlock(stage, lines)
                for stage, lines in self._stage_lines.items()
            },
            descriptor_set=self._descriptor_set or 0,
            push_constants_size=self._push_constants_size,
        )

    def _parse_file(self, path, depth):
        logger.debug(f"Parsing shader file {path}")
        text = self._source.read_all_text(path)

        for lineno, line in enumerate(text.splitlines(), 1):
            self._parse_line(line, path, lineno, depth)

        if self._stage is not None:
            raise UnterminatedStageError.at(
                self._stage_location,
                f"Stage {self._stage.value} is not terminated with '#pragma anki end'",
            )

    def _parse_line(self, line, path, lineno, depth):
        location = path, lineno
        directive = parse_directive(tokenize_line(line), location)

        if directive is None:
            self._add_line(SourceLine(line, path, lineno))
        elif isinstance(directive, IncludeDirective):
            self._include(directive, location, depth)
        elif isinstance(directive, PragmaOnceDirective):
            self._pragma_once_paths.add(path)
        elif isinstance(directive, MutatorDirective):
            self._declare_mutator(directive, location)
        elif isinstance(directive, InputDirective):
            self._declare_input(directive, line, location)
        elif isinstance(directive, StartDirective):
            if self._stage is not None:
                raise StateError.at(
                    location,
                    f"Cannot start stage {directive.stage.value} inside stage {self._stage.value}",
                )
            self._stage = directive.stage
            self._stage_location = location
            self._stage_lines.setdefault(directive.stage, [])
        elif isinstance(directive, EndDirective):
            if self._stage is None:
                raise StateError.at(location, "'#pragma anki end' outside of a stage")
            self._stage = None
            self._stage_location = None
        elif isinstance(directive, DescriptorSetDirective):
            if self._descriptor_set not in (None, directive.index):
                raise DescriptorSetRedefinedError.at(
                    location,
                    f"Descriptor set {directive.index} conflicts with "
                    f"earlier descriptor set {self._descriptor_set}",
                )
            self._descriptor_set = directive.index
        else:  # pragma: no cover
            raise RuntimeError(f"Unexpected directive {directive!r}")

    def _add_line(self, line):
        if self._stage is None:
            self._globals.append(line)
        else:
            self._stage_lines[self._stage].append(line)

    def _include(self, directive, location, depth):
        if self._stage is not None:
            raise StateError.at(location, "Cannot #include inside a stage")
        path = normalize_path(directive.path)
        if path in self._pragma_once_paths:
            logger.debug(f"Skipping {path}, it has '#pragma once'")
            return
        if depth + 1 > MAX_INCLUDE_DEPTH:
            raise IncludeDepthExceededError.at(
                location,
                f"Cannot include {path}, includes are nested more than {MAX_INCLUDE_DEPTH} deep",
            )
        try:
            self._parse_file(path, depth + 1)
        except NotFoundError as err:
            if err.filename != path or err.lineno is not None:
                raise
            raise NotFoundError.at(location, f"Cannot find included file {path}") from None

    def _check_name(self, name, error_class, location):
        kind = self._declared.get(name)
        if kind:
            raise error_class.at(location, f"Name {name} is already declared as {kind}")

    def _declare_mutator(self, directive, location):
        self._check_name(directive.name, DuplicateMutatorError, location)
        if directive.instanced:
            if self._instanced_mutator_location is not None:
                raise DuplicateInstancedMutatorError.at(
                    location, "There can be only one instanced mutator"
                )
            if any(value < 0 for value in directive.values):
                raise MalformedValueError.at(
                    location,
                    f"Instanced mutator {directive.name} has a negative instance count",
                )
            self._instanced_mutator_location = location
        self._declared[directive.name] = "mutator"
        self._mutators.append(
            Mutator(directive.name, directive.values, directive.instanced)
        )

    def _declare_input(self, directive, line, location):
        if self._stage is None:
            raise StateError.at(location, "'#pragma anki input' outside of a stage")
        name = directive.name
        self._check_name(name, DuplicateInputError, location)
        if len(self._inputs) >= MAX_INPUTS:
            raise TooManyInputsError.at(
                location, f"Too many inputs, the max is {MAX_INPUTS}"
            )

        instanced = directive.qualifier == "instanced"
        if instanced and self._instanced_mutator_location is None:
            raise InstancedInputWithoutMutatorError.at(
                location,
                f"Input {name} is instanced, but no instanced mutator is declared before it",
            )
        spec_constant_id = None
        if directive.qualifier == "const":
            spec_constant_id = self._spec_constant_count
            self._spec_constant_count += 1

        index = len(self._inputs)
        self._declared[name] = "input"
        self._inputs.append(
            ShaderInput(name, index, directive.data_type, instanced, spec_constant_id)
        )
        self._add_line(SourceLine(line, location[0], location[1], index))
