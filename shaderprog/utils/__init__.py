"""
Utility functions for shaderprog.

.. currentmodule:: shaderprog.utils

.. autosummary::
    :toctree: utils/

    ReadOnlyDict
    enums

"""

import os
import types
import logging
import inspect

from . import enums  # noqa: F401


logger = logging.getLogger("shaderprog")


def _set_log_level():
    # Set default level
    logger.setLevel(logging.WARN)
    # Set user-specified level
    level = os.getenv("SHADERPROG_LOG_LEVEL", "")
    if level:
        try:
            if level.isnumeric():
                logger.setLevel(int(level))
            else:
                logger.setLevel(level.upper())
        except (TypeError, ValueError):
            logger.warning(f"Invalid shaderprog log level: {level}")


_set_log_level()


def assert_type(name, value, *classes):
    allow_none = False
    if classes[0] is None:
        if value is None:
            return
        allow_none = True
        classes = classes[1:]

    if not isinstance(value, classes):
        # Get traceback object to point of the frame of interest
        f = inspect.currentframe()
        f = f.f_back
        if name:
            # Step back to calling code
            f = f.f_back
        tb = types.TracebackType(None, f, f.f_lasti, f.f_lineno)

        msg = "Expected"
        if name:
            msg += f" '{name}' to be"
        class_strings = [cls.__name__ for cls in classes]
        msg += f" an instance of {' | '.join(class_strings)}"
        if allow_none:
            msg += " or None"
        msg += f", but got {value.__class__.__name__} object."

        raise TypeError(msg).with_traceback(tb) from None


class ReadOnlyDict(dict):
    """A read-only dict, for storing structured data that can be hashed."""

    __slots__ = ["_hash"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Calculate hash in a way that requires any value to also be hashable
        parts = []
        for k in sorted(self.keys(), key=str):
            v = self[k]
            parts.append(str(hash(k)))
            parts.append(str(hash(v)))
        self._hash = hash(" ".join(parts))

    def __setitem__(self, *args, **kwargs):
        raise TypeError(f"Cannot modify {self.__class__.__name__}")

    def __delitem__(self, *args, **kwargs):
        raise TypeError(f"Cannot modify {self.__class__.__name__}")

    def clear(self, *args, **kwargs):
        raise TypeError(f"Cannot modify {self.__class__.__name__}")

    def pop(self, *args, **kwargs):
        raise TypeError(f"Cannot modify {self.__class__.__name__}")

    def popitem(self, *args, **kwargs):
        raise TypeError(f"Cannot modify {self.__class__.__name__}")

    def setdefault(self, *args, **kwargs):
        raise TypeError(f"Cannot modify {self.__class__.__name__}")

    def update(self, *args, **kwargs):
        raise TypeError(f"Cannot modify {self.__class__.__name__}")

    def __ior__(self, other):
        raise TypeError(f"Cannot modify {self.__class__.__name__}")

    def __hash__(self):
        return self._hash

    def __repr__(self):
        return f"{self.__class__.__name__}({dict.__repr__(self)})"
