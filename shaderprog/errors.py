"""
The exceptions raised by ``parse()`` and ``generate()``.

There are two ways to look at an error: by the entry point that raises it
(``ParseError``, ``GenerateError``) and by its kind (``IoError``,
``ShaderSyntaxError``, ``SemanticError``, ``StateError``). Each concrete
class derives from one of each, so callers can catch along either axis.
All errors carry the file name and line number they originate from, when
known.
"""

__all__ = [
    "ShaderProgramError",
    "ParseError",
    "GenerateError",
    "IoError",
    "NotFoundError",
    "ShaderSyntaxError",
    "DirectiveError",
    "MalformedValueError",
    "UnknownInputTypeError",
    "ConditionalExpressionError",
    "UnbalancedConditionalError",
    "SemanticError",
    "DuplicateMutatorError",
    "DuplicateInstancedMutatorError",
    "DuplicateInputError",
    "TooManyInputsError",
    "TooManyMutatorValuesError",
    "InstancedInputWithoutMutatorError",
    "InstancedMutatorWithoutInputError",
    "DescriptorSetRedefinedError",
    "UnterminatedStageError",
    "IncludeDepthExceededError",
    "InvalidMutatorValueError",
    "UnknownMutatorReferenceError",
    "StateError",
]


class ShaderProgramError(Exception):
    """Base class for all shaderprog errors.

    Parameters
    ----------
    message : str
        What went wrong.
    filename : str | None
        The file the error originates from.
    lineno : int | None
        The (1-based) line number in that file.
    """

    def __init__(self, message, filename=None, lineno=None):
        super().__init__(message, filename, lineno)
        self.message = message
        self.filename = filename
        self.lineno = lineno

    @classmethod
    def at(cls, location, message):
        """Create an error for a ``(filename, lineno)`` location."""
        filename, lineno = location if location else (None, None)
        return cls(message, filename, lineno)

    def __str__(self):
        if self.filename is None:
            return self.message
        elif self.lineno is None:
            return f"{self.filename}: {self.message}"
        else:
            return f"{self.filename}:{self.lineno}: {self.message}"


# Entry points


class ParseError(ShaderProgramError):
    """Raised by ``parse()``."""


class GenerateError(ShaderProgramError):
    """Raised by ``generate()``."""


# Kinds


class IoError(ParseError):
    """A file could not be read."""


class NotFoundError(IoError):
    """A file does not exist."""


class ShaderSyntaxError(ShaderProgramError):
    """Malformed directive, bad token count, bad literal."""


class SemanticError(ShaderProgramError):
    """Well-formed input that does not make sense."""


class StateError(ParseError):
    """A directive was used outside of the parse state it requires."""


# Syntax errors


class DirectiveError(ShaderSyntaxError, ParseError):
    pass


class MalformedValueError(ShaderSyntaxError, ParseError):
    pass


class UnknownInputTypeError(ShaderSyntaxError, ParseError):
    pass


class ConditionalExpressionError(ShaderSyntaxError, GenerateError):
    pass


class UnbalancedConditionalError(ShaderSyntaxError, GenerateError):
    pass


# Semantic errors found while parsing


class DuplicateMutatorError(SemanticError, ParseError):
    pass


class DuplicateInstancedMutatorError(SemanticError, ParseError):
    pass


class DuplicateInputError(SemanticError, ParseError):
    pass


class TooManyInputsError(SemanticError, ParseError):
    pass


class TooManyMutatorValuesError(SemanticError, ParseError):
    pass


class InstancedInputWithoutMutatorError(SemanticError, ParseError):
    pass


class InstancedMutatorWithoutInputError(SemanticError, ParseError):
    pass


class DescriptorSetRedefinedError(SemanticError, ParseError):
    pass


class UnterminatedStageError(SemanticError, ParseError):
    pass


class IncludeDepthExceededError(SemanticError, ParseError):
    pass


# Semantic errors found while generating


class InvalidMutatorValueError(SemanticError, GenerateError):
    """The mutator assignment is missing a mutator, has an unknown one,
    or uses a value the mutator does not declare.
    """

    def __init__(self, message, filename=None, lineno=None, mutator=None):
        super().__init__(message, filename, lineno)
        self.mutator = mutator


class UnknownMutatorReferenceError(SemanticError, GenerateError):
    """A conditional that is keyed off mutators references a name that is
    not a declared mutator.
    """
