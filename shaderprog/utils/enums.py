"""
The enums used in shaderprog.

.. currentmodule:: shaderprog.utils.enums

.. autosummary::
    :toctree: utils/enums

    ShaderStage
    ShaderStageBit
    DataType

"""

from enum import Enum, Flag


__all__ = ["ShaderStage", "ShaderStageBit", "DataType"]


class ShaderStage(Enum):
    """The shader stages, in pipeline order. The values are the tokens used
    by ``#pragma anki start``.
    """

    vert = "vert"  #: vertex shader
    tessc = "tessc"  #: tessellation control shader
    tesse = "tesse"  #: tessellation evaluation shader
    geom = "geom"  #: geometry shader
    frag = "frag"  #: fragment shader
    comp = "comp"  #: compute shader

    @property
    def bit(self):
        """The ShaderStageBit for this stage."""
        return ShaderStageBit[self.name]

    @property
    def define_name(self):
        """The name of the macro that tells the code which stage it is in."""
        return _stage_define_names[self]


_stage_define_names = {
    ShaderStage.vert: "ANKI_VERTEX_SHADER",
    ShaderStage.tessc: "ANKI_TESSELATION_CONTROL_SHADER",
    ShaderStage.tesse: "ANKI_TESSELATION_EVALUATION_SHADER",
    ShaderStage.geom: "ANKI_GEOMETRY_SHADER",
    ShaderStage.frag: "ANKI_FRAGMENT_SHADER",
    ShaderStage.comp: "ANKI_COMPUTE_SHADER",
}


class ShaderStageBit(Flag):
    """A set of shader stages."""

    none = 0
    vert = 1 << 0
    tessc = 1 << 1
    tesse = 1 << 2
    geom = 1 << 3
    frag = 1 << 4
    comp = 1 << 5


class DataType(Enum):
    """The type of a declared input. The values are the GLSL type tokens
    accepted by ``#pragma anki input``.
    """

    int = "int"
    ivec2 = "ivec2"
    ivec3 = "ivec3"
    ivec4 = "ivec4"
    uint = "uint"
    uvec2 = "uvec2"
    uvec3 = "uvec3"
    uvec4 = "uvec4"
    float = "float"
    vec2 = "vec2"
    vec3 = "vec3"
    vec4 = "vec4"
    mat3 = "mat3"
    mat4 = "mat4"
    texture1D = "texture1D"
    texture1DArray = "texture1DArray"
    texture2D = "texture2D"
    texture2DArray = "texture2DArray"
    texture3D = "texture3D"
    textureCube = "textureCube"
    textureCubeArray = "textureCubeArray"
    sampler = "sampler"

    @property
    def is_texture(self):
        return self.value.startswith("texture")

    @property
    def is_sampler(self):
        return self is DataType.sampler

    @property
    def is_numeric(self):
        return not (self.is_texture or self.is_sampler)

    @property
    def is_matrix(self):
        return self.value.startswith("mat")
