"""
Exact trade quantities.
"""

from decimal import Decimal
from functools import total_ordering
from typing import Union

SizeLike = Union["Size", int, str, Decimal, float]


def _to_decimal(value: SizeLike) -> Decimal:
    if isinstance(value, Size):
        return value.value
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("A boolean is not a valid size")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # Go through the shortest repr so 0.1 becomes Decimal('0.1') and not its binary expansion
        return Decimal(repr(value))
    if isinstance(value, str):
        return Decimal(value)
    raise TypeError(f"Unsupported size type: {type(value).__name__}")


@total_ordering
class Size:
    """
    Signed quantity of an asset, for example the number of shares in an order or a position.

    The value is stored as a Decimal, so adding and subtracting sizes never loses precision
    the way floats do (0.1 + 0.2 is exactly 0.3). Multiplying with a float, typically a price,
    returns a float.

    Examples:
        Size(10) + Size("0.5")   # Size(10.5)
        -Size(3)                 # Size(-3)
        Size("2.5") * 100.0      # 250.0
    """

    __slots__ = ("_value",)

    def __init__(self, value: SizeLike = 0):
        self._value = _to_decimal(value)

    @property
    def value(self) -> Decimal:
        return self._value

    @property
    def sign(self) -> int:
        """-1, 0 or 1"""
        if self._value > 0:
            return 1
        if self._value < 0:
            return -1
        return 0

    @property
    def is_zero(self) -> bool:
        return self._value == 0

    @property
    def is_positive(self) -> bool:
        return self._value > 0

    @property
    def is_negative(self) -> bool:
        return self._value < 0

    @property
    def is_fractional(self) -> bool:
        return self._value != self._value.to_integral_value()

    def __abs__(self) -> "Size":
        return Size(abs(self._value))

    def __neg__(self) -> "Size":
        return Size(-self._value)

    def __pos__(self) -> "Size":
        return self

    def __add__(self, other):
        if isinstance(other, float):
            return NotImplemented
        try:
            return Size(self._value + _to_decimal(other))
        except TypeError:
            return NotImplemented

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, float):
            return NotImplemented
        try:
            return Size(self._value - _to_decimal(other))
        except TypeError:
            return NotImplemented

    def __rsub__(self, other):
        if isinstance(other, float):
            return NotImplemented
        try:
            return Size(_to_decimal(other) - self._value)
        except TypeError:
            return NotImplemented

    def __mul__(self, other):
        if isinstance(other, float):
            return float(self._value) * other
        try:
            return Size(self._value * _to_decimal(other))
        except TypeError:
            return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, float):
            return float(self._value) / other
        try:
            return Size(self._value / _to_decimal(other))
        except TypeError:
            return NotImplemented

    def __float__(self) -> float:
        return float(self._value)

    def __int__(self) -> int:
        return int(self._value)

    def __bool__(self) -> bool:
        return not self.is_zero

    def __eq__(self, other) -> bool:
        if isinstance(other, (Size, int, Decimal)) and not isinstance(other, bool):
            return self._value == _to_decimal(other)
        if isinstance(other, float):
            return float(self._value) == other
        return NotImplemented

    def __lt__(self, other) -> bool:
        if isinstance(other, float):
            return float(self._value) < other
        try:
            return self._value < _to_decimal(other)
        except TypeError:
            return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value.normalize())

    def __repr__(self) -> str:
        return f"Size({self})"

    def __str__(self) -> str:
        text = format(self._value.normalize(), "f")
        return "0" if text in ("-0", "0") else text


Size.ZERO = Size(0)
