"""
The intermediate representation of a parsed shader program.

A ``ShaderProgram`` is produced once by ``parse()`` and is never modified
afterwards. It owns copies of all the source lines, so it does not depend on
the file source it was read from. Variants are generated from it with
``generate()``, any number of times and from any thread.
"""

from collections import namedtuple

from .utils import ReadOnlyDict
from .utils.enums import ShaderStage, ShaderStageBit


MAX_INPUTS = 128
MAX_INCLUDE_DEPTH = 8
MAX_MUTATOR_VALUES = 64


SourceLine = namedtuple(
    "SourceLine", ["text", "filename", "lineno", "input_index"], defaults=(None,)
)
SourceLine.__doc__ = """A line of shader code and where it came from. For the
line that stands in for an input declaration, ``input_index`` is the index
of that input.
"""


class Mutator:
    """A named, finite-valued compile-time parameter.

    Each variant of a program binds every mutator to one of its values.
    """

    __slots__ = ["_name", "_values", "_instanced"]

    def __init__(self, name, values, instanced=False):
        values = tuple(int(v) for v in values)
        if not values:
            raise ValueError(f"Mutator {name} needs at least one value")
        if len(set(values)) != len(values):
            raise ValueError(f"Mutator {name} has duplicate values")
        self._name = str(name)
        self._values = values
        self._instanced = bool(instanced)

    def __repr__(self):
        instanced = " instanced" if self._instanced else ""
        return f"<Mutator{instanced} {self._name} {self._values}>"

    @property
    def name(self):
        """The name of the mutator, as used in the shader code."""
        return self._name

    @property
    def values(self):
        """A tuple with the declared (distinct) integer values."""
        return self._values

    @property
    def instanced(self):
        """Whether this mutator sets the instance count."""
        return self._instanced


class ShaderInput:
    """A named shader-visible value declared with ``#pragma anki input``.

    An input is either a texture or sampler, a specialization constant, or a
    member of the program's uniform block.
    """

    __slots__ = ["_name", "_index", "_data_type", "_instanced", "_spec_constant_id"]

    def __init__(self, name, index, data_type, instanced=False, spec_constant_id=None):
        self._name = str(name)
        self._index = int(index)
        self._data_type = data_type
        self._instanced = bool(instanced)
        self._spec_constant_id = spec_constant_id
        if not data_type.is_numeric and (instanced or spec_constant_id is not None):
            raise ValueError(f"Input {name} cannot be instanced or constant")

    def __repr__(self):
        return f"<ShaderInput {self._index} {self._data_type.value} {self._name}>"

    @property
    def name(self):
        return self._name

    @property
    def index(self):
        """The position of the input among the declared inputs."""
        return self._index

    @property
    def data_type(self):
        return self._data_type

    @property
    def instanced(self):
        return self._instanced

    @property
    def spec_constant_id(self):
        """The specialization constant id, or None."""
        return self._spec_constant_id

    @property
    def is_constant(self):
        return self._spec_constant_id is not None

    @property
    def is_texture(self):
        return self._data_type.is_texture

    @property
    def is_sampler(self):
        return self._data_type.is_sampler

    @property
    def in_block(self):
        """Whether this input lives in the uniform block."""
        return self._data_type.is_numeric and self._spec_constant_id is None


class StageBlock:
    """The code of one shader stage: the lines of all the ``start``/``end``
    sections for that stage, in file order.
    """

    __slots__ = ["_stage", "_lines"]

    def __init__(self, stage, lines):
        self._stage = ShaderStage(stage)
        self._lines = tuple(lines)

    def __repr__(self):
        return f"<StageBlock {self._stage.value} with {len(self._lines)} lines>"

    @property
    def stage(self):
        return self._stage

    @property
    def lines(self):
        """A tuple of ``SourceLine`` objects."""
        return self._lines


class ShaderProgram:
    """The parsed form of a shader program file and all its includes.

    Use ``shaderprog.parse()`` to create one.
    """

    def __init__(
        self,
        filename,
        *,
        mutators=(),
        inputs=(),
        globals=(),
        stages=None,
        descriptor_set=0,
        push_constants_size=0,
    ):
        self._filename = filename
        self._mutators = tuple(mutators)
        self._inputs = tuple(inputs)
        self._globals = tuple(globals)
        self._stages = ReadOnlyDict(
            (stage, block)
            for stage, block in sorted(
                (stages or {}).items(), key=lambda item: list(ShaderStage).index(item[0])
            )
        )
        self._descriptor_set = int(descriptor_set)
        self._push_constants_size = int(push_constants_size)

        self._mutators_by_name = ReadOnlyDict((m.name, m) for m in self._mutators)
        self._inputs_by_name = ReadOnlyDict((i.name, i) for i in self._inputs)

        instanced = [m for m in self._mutators if m.instanced]
        self._instanced_mutator = instanced[0] if instanced else None

    def __repr__(self):
        stages = ", ".join(stage.value for stage in self._stages)
        return (
            f"<ShaderProgram {self._filename} [{stages}] with "
            f"{len(self._mutators)} mutators and {len(self._inputs)} inputs>"
        )

    @property
    def filename(self):
        """The name of the root file."""
        return self._filename

    @property
    def mutators(self):
        """A tuple with the declared mutators, in declaration order."""
        return self._mutators

    @property
    def inputs(self):
        """A tuple with the declared inputs, in declaration (index) order."""
        return self._inputs

    @property
    def globals(self):
        """The lines outside of any stage, as a tuple of ``SourceLine``."""
        return self._globals

    @property
    def stages(self):
        """A read-only dict mapping ``ShaderStage`` to ``StageBlock``, in pipeline order."""
        return self._stages

    @property
    def stage_mask(self):
        """The stages present, as a ``ShaderStageBit``."""
        mask = ShaderStageBit.none
        for stage in self._stages:
            mask |= stage.bit
        return mask

    @property
    def uniform_block(self):
        """The inputs that live in the uniform block, in declaration order."""
        return tuple(i for i in self._inputs if i.in_block)

    @property
    def descriptor_set(self):
        return self._descriptor_set

    @property
    def push_constants_size(self):
        """The push constant size given to ``parse()``. If non-zero, the
        uniform block is declared as push constants.
        """
        return self._push_constants_size

    @property
    def instanced_mutator(self):
        """The mutator marked ``instanced``, or None."""
        return self._instanced_mutator

    @property
    def has_instanced_inputs(self):
        return any(i.instanced for i in self._inputs)

    def get_mutator(self, name):
        """Get a mutator by name. Raises KeyError if there is no such mutator."""
        return self._mutators_by_name[name]

    def get_input(self, name):
        """Get an input by name. Raises KeyError if there is no such input."""
        return self._inputs_by_name[name]


class MutatorAssignment(ReadOnlyDict):
    """A read-only mapping from mutator name to value, selecting one variant.

    Being hashable, it can be used to cache variants.
    """

    __slots__ = []

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name, value in self.items():
            if not isinstance(name, str):
                raise TypeError(f"Mutator names must be str, not {name!r}")
            if not isinstance(value, int):
                raise TypeError(f"Mutator {name} must be an int, not {value!r}")
