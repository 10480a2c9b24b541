"""
Generate the source of a variant: one concrete shader program for a given
mutator assignment.

The source of each stage is assembled from blocks, in this order:

* The header: the stage macro, one ``#define`` per mutator, and the
  instancing boilerplate for vertex and compute stages.
* The globals: the lines outside of any stage.
* The uniform block, declaring the active inputs that live in it.
* The lines of the stage itself.

Conditionals that are keyed off mutators are resolved first (see
``_conditionals.py``). Which inputs are active is then decided textually: an
input is active if its declaration survives in the globals or in at least
one stage. Whether the input is actually used by the code is not checked, so
an input declared outside of any conditional is always active. Mentions of an
input whose declaration was removed do not make it active.
"""

import numpy as np

from .errors import InvalidMutatorValueError
from .program import ShaderProgram, ShaderInput, MutatorAssignment
from .utils import ReadOnlyDict, assert_type, logger
from .utils.enums import ShaderStage
from ._bitset import ActiveInputMask
from ._conditionals import ConditionalResolver


UNIFORM_BLOCK_NAME = "b_ankiUniforms"
UNIFORM_INSTANCE_NAME = "u_ankiUniforms"
INSTANCE_ID_MACRO = "ANKI_INSTANCE_ID"

instance_id_sources = ReadOnlyDict(
    {
        ShaderStage.vert: "gl_InstanceIndex",
        ShaderStage.comp: "gl_GlobalInvocationID.x",
    }
)

# Layout of a block member. The -1 values are placeholders, to be filled in by
# whoever reflects the compiled shader.
block_info_dtype = np.dtype(
    [
        ("offset", "<i2"),
        ("array_size", "<i2"),
        ("array_stride", "<i2"),
        ("matrix_stride", "<i2"),
    ]
)


class ShaderVariant:
    """The result of ``generate()``: the source per stage, plus information
    about the inputs. Each variant is an independent object; it shares no
    mutable state with the program or with other variants.
    """

    def __init__(self, sources, active_inputs, block_infos, uses_push_constants, inputs=()):
        self._sources = ReadOnlyDict(sources)
        self._input_indices = ReadOnlyDict((i.name, i.index) for i in inputs)
        self._active_inputs = active_inputs
        self._block_infos = block_infos
        self._uses_push_constants = bool(uses_push_constants)

    def __repr__(self):
        stages = ", ".join(stage.value for stage in self._sources)
        return f"<ShaderVariant [{stages}] with {len(self._active_inputs)} active inputs>"

    @property
    def sources(self):
        """A read-only dict mapping ``ShaderStage`` to source text. Only the
        stages that the program has are present.
        """
        return self._sources

    @property
    def active_inputs(self):
        """The ``ActiveInputMask`` of this variant."""
        return self._active_inputs

    @property
    def block_infos(self):
        """A numpy structured array with one row per declared input, with
        fields offset, array_size, array_stride and matrix_stride. Only the
        array_size of active uniform block members is set here; all other
        values are -1.
        """
        return self._block_infos

    @property
    def uses_push_constants(self):
        """Whether the uniform block is declared as push constants."""
        return self._uses_push_constants

    def get_source(self, stage):
        """Get the source for the given stage (a ``ShaderStage`` or its name).
        Raises KeyError if the program does not have that stage.
        """
        return self._sources[ShaderStage(stage)]

    def is_input_active(self, input):
        """Get whether an input (a ``ShaderInput``, name or index) is active.
        Raises KeyError for an unknown name.
        """
        if isinstance(input, ShaderInput):
            index = input.index
        elif isinstance(input, str):
            index = self._input_indices[input]
        else:
            index = int(input)
        return index in self._active_inputs


def generate(program, assignment=None):
    """Generate the variant of a program for the given mutator assignment.

    Parameters
    ----------
    program : ShaderProgram
        The program, as returned by ``parse()``.
    assignment : Mapping[str, int] | None
        The value for every mutator of the program. Can be omitted for
        programs without mutators.

    Returns
    -------
    variant : ShaderVariant
    """
    assert_type("program", program, ShaderProgram)
    values = check_assignment(program, assignment if assignment is not None else {})
    variant = _VariantGenerator(program, values).generate()
    logger.debug(f"Generated variant of {program.filename} for {dict(values)}")
    return variant


def check_assignment(program, assignment):
    """Check that the assignment gives a declared value for every mutator
    of the program, and nothing else. Returns a ``MutatorAssignment``.
    """
    if not isinstance(assignment, MutatorAssignment):
        assignment = MutatorAssignment(assignment)

    for mutator in program.mutators:
        name = mutator.name
        if name not in assignment:
            raise InvalidMutatorValueError(
                f"No value given for mutator {name}", program.filename, mutator=name
            )
        if assignment[name] not in mutator.values:
            raise InvalidMutatorValueError(
                f"Value {assignment[name]} is not a value of mutator {name}, "
                f"expected one of {list(mutator.values)}",
                program.filename,
                mutator=name,
            )

    for name in assignment:
        try:
            program.get_mutator(name)
        except KeyError:
            raise InvalidMutatorValueError(
                f"Unknown mutator {name}", program.filename, mutator=name
            ) from None

    return assignment


def indent_from_line(line):
    return line[: len(line) - len(line.lstrip())]


class _VariantGenerator:
    def __init__(self, program, values):
        self._program = program
        self._values = values
        self._resolver = ConditionalResolver(values)
        instanced_mutator = program.instanced_mutator
        self._instance_count = 0
        if instanced_mutator is not None:
            self._instance_count = values[instanced_mutator.name]

    def generate(self):
        program = self._program

        globals_lines = self._resolver.resolve(program.globals)
        stage_lines = {
            stage: self._resolver.resolve(block.lines)
            for stage, block in program.stages.items()
        }

        active_inputs = self._find_active_inputs(globals_lines, stage_lines)
        block_inputs = [i for i in program.uniform_block if i.index in active_inputs]
        uniform_block_code = self._render_uniform_block(block_inputs)

        sources = {}
        for stage, lines in stage_lines.items():
            parts = [
                *self._render_header(stage),
                *(line.text for line in globals_lines),
                *uniform_block_code,
                *(self._render_line(stage, line) for line in lines),
            ]
            sources[stage] = "\n".join(parts) + "\n"

        block_infos = np.full((len(program.inputs),), -1, block_info_dtype)
        for input in block_inputs:
            block_infos["array_size"][input.index] = self._array_size(input)

        return ShaderVariant(
            sources,
            active_inputs,
            block_infos,
            program.push_constants_size > 0,
            program.inputs,
        )

    def _array_size(self, input):
        if input.instanced and self._instance_count:
            return self._instance_count
        return 1

    def _render_header(self, stage):
        lines = [f"#define {stage.define_name} 1"]
        for mutator in self._program.mutators:
            lines.append(f"#define {mutator.name} {self._values[mutator.name]}")
        if self._instance_count and stage in instance_id_sources:
            lines.append(f"#define {INSTANCE_ID_MACRO} {instance_id_sources[stage]}")
        return lines

    def _render_line(self, stage, line):
        if line.input_index is None:
            return line.text

        # The line that stands in for an input declaration
        input = self._program.inputs[line.input_index]
        indent = indent_from_line(line.text)
        type, name = input.data_type.value, input.name
        if input.is_constant:
            code = f"layout(constant_id = {input.spec_constant_id}) const {type} {name} = {type}(0);"
        elif not input.in_block:
            code = f"layout(set = {self._program.descriptor_set}) uniform {type} {name};"
        else:
            accessor = f"{UNIFORM_INSTANCE_NAME}.{name}"
            if input.instanced and self._instance_count:
                index = INSTANCE_ID_MACRO if stage in instance_id_sources else "0"
                accessor += f"[{index}]"
            code = f"#define {name} {accessor}"
        return indent + code

    def _render_uniform_block(self, block_inputs):
        if not block_inputs:
            return []
        if self._program.push_constants_size:
            layout = "layout(push_constant, std140, row_major)"
        else:
            layout = f"layout(set = {self._program.descriptor_set}, std140, row_major)"
        lines = [f"{layout} uniform {UNIFORM_BLOCK_NAME}", "{"]
        for input in block_inputs:
            array = ""
            if input.instanced and self._instance_count:
                array = f"[{self._instance_count}]"
            lines.append(f"\t{input.data_type.value} {input.name}{array};")
        lines.append(f"}} {UNIFORM_INSTANCE_NAME};")
        return lines

    def _find_active_inputs(self, globals_lines, stage_lines):
        # A declaration that is left after resolving makes its input active
        if not stage_lines:
            return ActiveInputMask()
        found = set()
        for lines in [globals_lines, *stage_lines.values()]:
            for line in lines:
                if line.input_index is not None:
                    found.add(line.input_index)
        return ActiveInputMask(found)
