import uuid

import jinja2
import pytest

from shaderprog import (
    parse,
    FileSource,
    LoaderFileSource,
    DictFileSource,
    DirectoryFileSource,
    ChainFileSource,
    as_file_source,
    register_shader_loader,
    library_source,
    IoError,
    NotFoundError,
)


def unique_context():
    return "ctx" + uuid.uuid4().hex


def test_dict_source():
    source = DictFileSource({"a.glsl": "int a;", "sub/b.glsl": "int b;"})
    assert source.read_all_text("a.glsl") == "int a;"
    assert source.read_all_text("sub/b.glsl") == "int b;"
    with pytest.raises(NotFoundError) as err:
        source.read_all_text("c.glsl")
    assert err.value.filename == "c.glsl"
    assert isinstance(err.value, IoError)


def test_directory_source(tmp_path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "a.glsl").write_text("int a;\n", encoding="utf-8")
    (tmp_path / "bad.glsl").write_bytes(b"\xff\xfe\xfa")

    source = DirectoryFileSource(tmp_path)
    assert source.root == str(tmp_path)
    assert source.read_all_text("sub/a.glsl") == "int a;\n"

    with pytest.raises(NotFoundError):
        source.read_all_text("sub/nope.glsl")
    # Cannot escape the root
    with pytest.raises(NotFoundError):
        source.read_all_text("../a.glsl")

    with pytest.raises(IoError) as err:
        source.read_all_text("bad.glsl")
    assert not isinstance(err.value, NotFoundError)


def test_loader_source():
    loader = jinja2.DictLoader({"a.glsl": "int a;"})
    source = LoaderFileSource(loader)
    assert source.loader is loader
    assert source.read_all_text("a.glsl") == "int a;"
    with pytest.raises(NotFoundError):
        source.read_all_text("b.glsl")

    with pytest.raises(TypeError):
        LoaderFileSource({"a.glsl": "int a;"})


def test_chain_source():
    source = ChainFileSource(
        {"a.glsl": "first a", "b.glsl": "first b"},
        DictFileSource({"a.glsl": "second a", "c.glsl": "second c"}),
    )
    assert source.read_all_text("a.glsl") == "first a"
    assert source.read_all_text("b.glsl") == "first b"
    assert source.read_all_text("c.glsl") == "second c"
    with pytest.raises(NotFoundError):
        source.read_all_text("d.glsl")


def test_as_file_source(tmp_path):
    source = DictFileSource({})
    assert as_file_source(source) is source

    assert isinstance(as_file_source({"a.glsl": ""}), DictFileSource)
    assert isinstance(as_file_source(str(tmp_path)), DirectoryFileSource)
    assert isinstance(as_file_source(tmp_path), DirectoryFileSource)
    assert isinstance(as_file_source(jinja2.DictLoader({})), LoaderFileSource)

    source = as_file_source(lambda path: "int x;" if path == "x.glsl" else None)
    assert isinstance(source, FileSource)
    assert source.read_all_text("x.glsl") == "int x;"
    with pytest.raises(NotFoundError):
        source.read_all_text("y.glsl")

    with pytest.raises(TypeError):
        as_file_source(42)
    with pytest.raises(NotImplementedError):
        FileSource().read_all_text("a.glsl")


def test_library_source():
    text = library_source.read_all_text("shaderprog/Common.glsl")
    assert text.startswith("#pragma once")
    assert "float saturate(float x)" in text

    with pytest.raises(NotFoundError):
        library_source.read_all_text("shaderprog/Nope.glsl")
    with pytest.raises(NotFoundError):
        library_source.read_all_text("nocontext/Common.glsl")
    with pytest.raises(NotFoundError):
        library_source.read_all_text("Common.glsl")


def test_register_shader_loader():
    context = unique_context()
    register_shader_loader(context, {"Util.glsl": "int util;"})
    assert library_source.read_all_text(f"{context}/Util.glsl") == "int util;"

    # Registered snippets can be included from any program
    files = {"root.glsl": f"#include <{context}/Util.glsl>"}
    program = parse("root.glsl", files)
    assert [line.text for line in program.globals] == ["int util;"]

    # Functions and jinja loaders work too
    context2 = unique_context()
    register_shader_loader(context2, lambda name: "int f;" if name == "F.glsl" else None)
    assert library_source.read_all_text(f"{context2}/F.glsl") == "int f;"

    context3 = unique_context()
    register_shader_loader(context3, jinja2.DictLoader({"L.glsl": "int l;"}))
    assert library_source.read_all_text(f"{context3}/L.glsl") == "int l;"


def test_register_shader_loader_fail():
    context = unique_context()
    register_shader_loader(context, {})
    with pytest.raises(RuntimeError):
        register_shader_loader(context, {})
    with pytest.raises(RuntimeError):
        register_shader_loader("shaderprog", {})

    with pytest.raises(TypeError):
        register_shader_loader("foo/bar", {})
    with pytest.raises(TypeError):
        register_shader_loader("", {})
    with pytest.raises(TypeError):
        register_shader_loader(3, {})
    with pytest.raises(TypeError):
        register_shader_loader(unique_context(), 42)
