import numpy as np

from .program import MAX_INPUTS


class ActiveInputMask:
    """A fixed-capacity set of input indices, one bit per possible input.

    This is a value type: it cannot be modified, and operations that would
    change it return a new mask instead.
    """

    __slots__ = ["_bits", "_hash"]

    capacity = MAX_INPUTS

    def __init__(self, indices=()):
        bits = np.zeros((self.capacity,), bool)
        for index in indices:
            index = int(index)
            if not 0 <= index < self.capacity:
                raise IndexError(f"Input index {index} out of range")
            bits[index] = True
        bits.flags.writeable = False
        self._bits = bits
        self._hash = hash(np.packbits(bits).tobytes())

    @classmethod
    def from_int(cls, value):
        """Create a mask from an integer, bit i representing input i."""
        if value < 0 or value >> cls.capacity:
            raise ValueError(f"Value does not fit in {cls.capacity} bits")
        return cls(i for i in range(cls.capacity) if (value >> i) & 1)

    def __repr__(self):
        return f"<ActiveInputMask {list(self)}>"

    def __contains__(self, index):
        return 0 <= index < self.capacity and bool(self._bits[index])

    def __iter__(self):
        return iter(int(i) for i in np.flatnonzero(self._bits))

    def __len__(self):
        return int(np.count_nonzero(self._bits))

    def __bool__(self):
        return bool(self._bits.any())

    def __eq__(self, other):
        if not isinstance(other, ActiveInputMask):
            return NotImplemented
        return bool(np.array_equal(self._bits, other._bits))

    def __hash__(self):
        return self._hash

    def __or__(self, other):
        return ActiveInputMask(np.flatnonzero(self._bits | other._bits))

    def __and__(self, other):
        return ActiveInputMask(np.flatnonzero(self._bits & other._bits))

    def get(self, index):
        """Get whether the bit at the given index is set."""
        if not 0 <= index < self.capacity:
            raise IndexError(f"Input index {index} out of range")
        return bool(self._bits[index])

    def with_bit(self, index):
        """Return a new mask with the given bit set."""
        return ActiveInputMask([*self, index])

    def to_int(self):
        """Get the mask as an integer, bit i representing input i."""
        return sum(1 << i for i in self)

    def to_array(self):
        """Get a (read-only) numpy bool array with ``capacity`` elements."""
        return self._bits
