"""
Packed index bookkeeping for triangular (x, y) coefficient layouts.

A pair of degrees (x, y) with total order n = x + y is mapped to the packed
position i = n(n+1)/2 + x. Within one order, x ascends from 0 to n while y
descends from n to 0, so the enumeration reads

    (0,0), (0,1), (1,0), (0,2), (1,1), (2,0), ...

Typical usage, bounded by the caller:

    i = PackedIndex()
    while i.order <= order:
        ...
        i.increment()
"""

import numpy as np


def compute_offset(order):
    """Number of packed entries in all orders strictly below `order`."""
    return order * (order + 1) // 2


def compute_index(x, y):
    """Packed position of the degree pair (x, y)."""
    return compute_offset(x + y) + x


def compute_size(order):
    """Number of packed entries up to and including `order`."""
    return compute_offset(order + 1)


def compute_order(size):
    """
    Inverse of compute_size.

    Raises
    ------
    ValueError
        If `size` is not the packed size of any order.
    """
    size = int(size)
    order = int((np.sqrt(8.0 * size + 1.0) - 3.0) // 2)
    # guard against rounding in the square root
    while compute_size(order + 1) <= size:
        order += 1
    while order >= 0 and compute_size(order) > size:
        order -= 1
    if order < 0 or compute_size(order) != size:
        raise ValueError(f"Length {size} is not a packed size (n+1)(n+2)/2 for any order n")
    return order


class PackedIndex:
    """
    Iterator-like position in the packed enumeration of degree pairs.

    There is no end-of-iteration sentinel; callers bound the loop on `order`.
    Negative degrees are not checked.
    """

    __slots__ = ('_n', '_i', '_x', '_y')

    def __init__(self, x=0, y=0):
        self._n = x + y
        self._i = compute_offset(self._n) + x
        self._x = x
        self._y = y

    @property
    def order(self):
        return self._n

    @property
    def index(self):
        return self._i

    @property
    def x(self):
        return self._x

    @property
    def y(self):
        return self._y

    def increment(self):
        """Advance to the next pair in place and return self."""
        self._i += 1
        self._y -= 1
        if self._y < 0:
            self._n += 1
            self._x = 0
            self._y = self._n
        else:
            self._x += 1
        return self

    def copy(self):
        return PackedIndex(self._x, self._y)

    def __eq__(self, other):
        if not isinstance(other, PackedIndex):
            return NotImplemented
        return (self._x, self._y) == (other._x, other._y)

    def __hash__(self):
        return hash((self._x, self._y))

    def __repr__(self):
        return f"PackedIndex(order={self._n}, index={self._i}, x={self._x}, y={self._y})"


def iter_packed(order):
    """Yield (index, x, y) for every packed entry up to `order`."""
    i = PackedIndex()
    while i.order <= order:
        yield i.index, i.x, i.y
        i.increment()


def packed_degrees(order):
    """
    Degree arrays for vectorized weaving.

    Returns
    -------
    xs, ys : np.ndarray
        Integer arrays of length compute_size(order) holding the x and y
        degree of each packed entry.
    """
    n = compute_size(order)
    xs = np.empty(n, dtype=np.intp)
    ys = np.empty(n, dtype=np.intp)
    for i, x, y in iter_packed(order):
        xs[i] = x
        ys[i] = y
    return xs, ys
