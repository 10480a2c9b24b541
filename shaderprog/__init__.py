"""Shaderprog: a shader program permutation compiler.

Parse an annotated GLSL file (and its includes) once with ``parse()``, then
generate the source for any combination of mutator values with
``generate()``.
"""

# ruff: noqa: F401, F403

from ._version import __version__, version_info
from . import utils

from .errors import *
from .program import (
    MAX_INPUTS,
    MAX_INCLUDE_DEPTH,
    MAX_MUTATOR_VALUES,
    SourceLine,
    Mutator,
    ShaderInput,
    StageBlock,
    ShaderProgram,
    MutatorAssignment,
)
from .sources import (
    FileSource,
    LoaderFileSource,
    DictFileSource,
    DirectoryFileSource,
    ChainFileSource,
    as_file_source,
    register_shader_loader,
    library_source,
)
from .variant import ShaderVariant, generate
from ._parser import parse
from ._bitset import ActiveInputMask
from .utils import enums, logger
from .utils.enums import *
