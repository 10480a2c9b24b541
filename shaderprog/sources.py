"""
File sources: where ``parse()`` reads the root file and its includes from.

The parser never touches the file system itself; it asks a ``FileSource``
for the text of a (root-relative, ``/``-separated) path. Most sources here
are thin wrappers around Jinja2 loaders, so any Jinja2 loader can serve
shader files as well.

The snippets that ship with shaderprog are available under the
``shaderprog/`` prefix, e.g. ``#include <shaderprog/Common.glsl>``.
Downstream packages can add their own prefix with
``register_shader_loader()``.
"""

import os

import jinja2

from .errors import IoError, NotFoundError


_environment = jinja2.Environment()

root_loader = jinja2.PrefixLoader({}, delimiter="/")


class FileSource:
    """Base class for file sources."""

    def read_all_text(self, path):
        """Get the text of the file at the given path. Raises
        ``NotFoundError`` if there is no such file and ``IoError`` if it
        cannot be read.
        """
        raise NotImplementedError()


class LoaderFileSource(FileSource):
    """A file source that reads via a ``jinja2.BaseLoader``."""

    def __init__(self, loader):
        if not isinstance(loader, jinja2.BaseLoader):
            raise TypeError(f"Expected a jinja2.BaseLoader, not {loader!r}")
        self._loader = loader

    def __repr__(self):
        return f"<{self.__class__.__name__} {self._loader!r}>"

    @property
    def loader(self):
        return self._loader

    def read_all_text(self, path):
        try:
            source, _, _ = self._loader.get_source(_environment, path)
        except jinja2.TemplateNotFound:
            raise NotFoundError("File not found", path) from None
        except (OSError, UnicodeDecodeError) as err:
            raise IoError(f"Cannot read file: {err}", path) from None
        return source


class DictFileSource(LoaderFileSource):
    """A file source for in-memory files, given as a dict path -> text."""

    def __init__(self, mapping):
        super().__init__(jinja2.DictLoader(dict(mapping)))


class DirectoryFileSource(LoaderFileSource):
    """A file source for the (UTF-8) files below a directory."""

    def __init__(self, root):
        self._root = os.fspath(root)
        super().__init__(jinja2.FileSystemLoader(self._root, encoding="utf-8"))

    @property
    def root(self):
        return self._root


class ChainFileSource(FileSource):
    """A file source that tries each of the given sources in turn."""

    def __init__(self, *sources):
        self._sources = tuple(as_file_source(source) for source in sources)

    def __repr__(self):
        return f"<ChainFileSource {list(self._sources)!r}>"

    def read_all_text(self, path):
        for source in self._sources:
            try:
                return source.read_all_text(path)
            except NotFoundError:
                continue
        raise NotFoundError("File not found", path)


def as_file_source(obj):
    """Turn the given object into a ``FileSource``.

    Parameters
    ----------
    obj : FileSource | jinja2.BaseLoader | dict | callable | str | os.PathLike
        A dict maps paths to file contents. A function must accept one
        positional argument (the path) and return the text, or None if there
        is no such file. A string or path-like object is a directory.
    """
    if isinstance(obj, FileSource):
        return obj
    elif isinstance(obj, jinja2.BaseLoader):
        return LoaderFileSource(obj)
    elif isinstance(obj, dict):
        return DictFileSource(obj)
    elif isinstance(obj, (str, os.PathLike)):
        return DirectoryFileSource(obj)
    elif callable(obj):
        return LoaderFileSource(jinja2.FunctionLoader(obj))
    else:
        raise TypeError(
            "A file source must be a FileSource, jinja2.BaseLoader, dict, "
            f"function or directory. Not {obj!r}"
        )


def register_shader_loader(context, loader):
    """Register a source for shader snippets.

    When code is encountered that looks like::

       #include <some_context/name.glsl>

    and the file source given to ``parse()`` does not have that file, the
    loader for "some_context" is looked up and used to load it. This function
    allows registering a loader for your downstream package or application.

    Parameters
    ----------
    context : str
        The context of the loader.
    loader: jinja2.BaseLoader | callable | dict
        The loader to use for this context. If a function is given, it must accept one
        positional argument (the name to include).
    """
    if not (isinstance(context, str) and context and "/" not in context):
        raise TypeError("Shader load context must be a non-empty string without slashes.")
    if context in root_loader.mapping:
        raise RuntimeError(f"A loader is already registered for '{context}'.")
    if isinstance(loader, jinja2.BaseLoader):
        root_loader.mapping[context] = loader
    elif isinstance(loader, dict):
        root_loader.mapping[context] = jinja2.DictLoader(loader)
    elif callable(loader):
        root_loader.mapping[context] = jinja2.FunctionLoader(loader)
    else:
        raise TypeError(
            f"The given shader loader must be a jinja2.BaseLoader, function, or dict. Not {loader!r}"
        )


register_shader_loader("shaderprog", jinja2.PackageLoader("shaderprog.glsl", "."))

library_source = LoaderFileSource(root_loader)
