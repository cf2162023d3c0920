"""
Typed write targets for parsed option values.

A Cell[_T] is the destination of an option that takes exactly one value: the
registry writes the default into it at registration time and overwrites it when
the option appears on the command line. Options with any other arity bind to a
plain mutable sequence (usually a list) and append each value in order.

Example
    >>> seed = Cell(0)
    >>> registry.register(Kind.INT, seed, "--seed", "random seed", default="7")
    >>> seed.value
    7
"""
from collections.abc import MutableSequence


class Cell[_T]:
    """
    a small settable box holding one value.

    the cell is shared between the caller (who reads it after parsing) and the
    registry (which writes it during registration and parsing).
    """
    __slots__ = ("_value",)

    def __init__(self, initial=None, /):
        self._value = initial

    @property
    def value(self):
        return self._value

    @value.setter
    def value(self, value):
        self._value = value

    def get(self):
        return self._value

    def set(self, value, /):
        self._value = value

    def __eq__(self, other):
        if isinstance(other, Cell):
            return self._value == other._value
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return f"cell({self._value!r})"

    def __rich_repr__(self):
        yield self._value


def _check_destination(destination, nargs, /):
    """
    Internal: validate the shape of a destination against the declared arity.

    - nargs == 1 requires a Cell.
    - any other arity (fixed N or Ellipsis) requires a MutableSequence.
    """
    if nargs == 1:
        if not isinstance(destination, Cell):
            raise TypeError("single-value options must bind to a cell")
    elif not isinstance(destination, MutableSequence):
        raise TypeError("multi-value options must bind to a mutable sequence")


__all__ = (
    "Cell",
)
