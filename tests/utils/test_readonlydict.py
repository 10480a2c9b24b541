from shaderprog.utils import ReadOnlyDict
from shaderprog import MutatorAssignment
import pytest


def test_readonlydict_immutable():
    d = ReadOnlyDict(foo=3, bar=4, spam=5)

    with pytest.raises(TypeError):
        d["foo"] = 1
    with pytest.raises(TypeError):
        d["xxxxxxx"] = 1
    with pytest.raises(TypeError):
        del d["foo"]
    with pytest.raises(TypeError):
        d.update({})
    with pytest.raises(TypeError):
        d.clear()
    with pytest.raises(TypeError):
        d.pop("foo", None)
    with pytest.raises(TypeError):
        d.popitem()
    with pytest.raises(TypeError):
        d.setdefault("foo", 42)
    with pytest.raises(TypeError):
        d |= {"foo": 1}

    # Also immutable (using __slots__)
    with pytest.raises(AttributeError):
        d.foo = 3


def test_readonlydict_hash():
    d1 = ReadOnlyDict(foo=3, bar=4, spam=5)
    d2 = ReadOnlyDict(foo=3, bar=4, spam=5)
    d3 = ReadOnlyDict(d1)
    d4 = ReadOnlyDict(bar=4, spam=5, foo=3)

    for d in [d2, d3, d4]:
        assert d1 == d
        assert hash(d1) == hash(d)

    d11 = ReadOnlyDict(foo=2, bar=4, spam=5)
    d12 = ReadOnlyDict(foo=3, bar=4)
    d13 = ReadOnlyDict(foo=3, bar=4, spam=5, x=1)

    for d in [d11, d12, d13]:
        assert d1 != d
        assert hash(d1) != hash(d)


def test_readonlydict_values():
    # Unhashable types
    with pytest.raises(TypeError):
        ReadOnlyDict(foo=[])
    with pytest.raises(TypeError):
        ReadOnlyDict(foo=dict(foo=3))

    # This works
    ReadOnlyDict(foo=ReadOnlyDict(foo=3))


def test_mutator_assignment():
    a1 = MutatorAssignment(COLOR=1, LIGHTING=2)
    a2 = MutatorAssignment({"LIGHTING": 2, "COLOR": 1})
    assert a1 == a2
    assert hash(a1) == hash(a2)
    assert a1 != MutatorAssignment(COLOR=0, LIGHTING=2)
    assert "MutatorAssignment" in repr(a1)

    with pytest.raises(TypeError):
        a1["COLOR"] = 0
    with pytest.raises(TypeError):
        MutatorAssignment(COLOR=1.0)
    with pytest.raises(TypeError):
        MutatorAssignment({1: 1})


if __name__ == "__main__":
    test_readonlydict_immutable()
    test_readonlydict_hash()
    test_readonlydict_values()
    test_mutator_assignment()
