"""Runtime values and helpers for Luxbin.

This module defines the runtime value model used by the Luxbin
interpreter and the helpers shared by the interpreter and the builtins:
display conversion, type names, truthiness and equality.

Values map onto Python objects as follows:

* numbers are Python ``float`` (integral values display without a
  fractional part, like ``8``)
* strings are ``str`` and booleans are ``bool``
* nil is the `NIL` singleton
* arrays are `ArrayVal` objects, shared by reference
* user functions are `FunctionValue` closures and builtins are
  `luxbin.builtin_function.BuiltinFunction` records
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Optional, Set, TYPE_CHECKING

from .builtin_function import BuiltinFunction
from .errors import LuxbinError

if TYPE_CHECKING:
    from .ast import FunctionDeclaration
    from .environment import Environment


class NilVal:
    """Marker object for the Luxbin `nil` value."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'nil'

    def __bool__(self) -> bool:
        return False


NIL = NilVal()


@dataclass(eq=False)
class ArrayVal:
    """A Luxbin array.

    Arrays are mutable and shared: assigning an array to another variable
    or passing it to a function hands over the same object. Equality is
    identity.
    """
    items: List[Any] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Array({self.items!r})"


@dataclass(eq=False)
class FunctionValue:
    """A user-defined function closed over the frame it was declared in."""
    declaration: 'FunctionDeclaration'
    closure: 'Environment'

    @property
    def name(self) -> str:
        return self.declaration.name

    def __repr__(self) -> str:
        return f"<function {self.name}>"


def is_number(value: Any) -> bool:
    # bool is a subclass of int; booleans are never numbers here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_number(value: float) -> str:
    """Format a number the way the playground displays it.

    Integral values print without a fractional part, tiny and huge
    magnitudes switch to exponent form (``1e-7``, ``1e+21``) and the
    IEEE specials print as ``NaN``, ``Infinity`` and ``-Infinity``.
    """
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))
    text = repr(float(value))
    if 'e' not in text:
        return text
    mantissa, exponent = text.split('e')
    exp = int(exponent)
    if -7 < exp < 21:
        return format(Decimal(text), 'f')
    if mantissa.endswith('.0'):
        mantissa = mantissa[:-2]
    sign = '+' if exp >= 0 else '-'
    return f"{mantissa}e{sign}{abs(exp)}"


def is_odd_integer(value: float) -> bool:
    return math.isfinite(value) and value == int(value) and int(value) % 2 == 1


def power(base: float, exponent: float) -> float:
    """IEEE ``pow``: overflow, poles and domain errors yield Infinity or NaN."""
    if math.isnan(exponent):
        return math.nan
    if math.isinf(exponent) and abs(base) == 1:
        return math.nan
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0:
            # 0 raised to a negative power
            if is_odd_integer(exponent):
                return math.copysign(math.inf, base)
            return math.inf
        return math.nan


def remainder(dividend: float, divisor: float) -> float:
    """Truncated remainder; the result takes the sign of the dividend."""
    try:
        return math.fmod(dividend, divisor)
    except ValueError:
        return math.nan


def to_display(value: Any, _open: Optional[Set[int]] = None) -> str:
    """Convert a Luxbin value to its display string.

    This is the text `photon_print` writes, the text `+` uses when it
    concatenates, and the result of `photon_to_string`.
    """
    if value is NIL or value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if is_number(value):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, ArrayVal):
        # arrays still being displayed further up; a repeat means the array contains itself
        open_arrays = set() if _open is None else _open
        if id(value) in open_arrays:
            raise LuxbinError('RecursionLimit', 'Maximum call depth exceeded')
        open_arrays.add(id(value))
        try:
            return '[' + ', '.join(to_display(item, open_arrays) for item in value.items) + ']'
        finally:
            open_arrays.discard(id(value))
    if isinstance(value, (FunctionValue, BuiltinFunction)):
        return repr(value)
    return str(value)


def utf16_units(text: str) -> List[str]:
    """Split `text` into UTF-16 code units, astral characters becoming surrogate pairs."""
    units = []
    for ch in text:
        code = ord(ch)
        if code > 0xFFFF:
            code -= 0x10000
            units.append(chr(0xD800 + (code >> 10)))
            units.append(chr(0xDC00 + (code & 0x3FF)))
        else:
            units.append(ch)
    return units


def utf16_length(text: str) -> int:
    return sum(2 if ord(ch) > 0xFFFF else 1 for ch in text)


def join_utf16_units(units: List[str]) -> str:
    # complete surrogate pairs fold back into their astral character
    return ''.join(units).encode('utf-16-le', 'surrogatepass').decode('utf-16-le', 'surrogatepass')


def type_name(value: Any) -> str:
    """Return the type name of a value as used in error messages."""
    if value is NIL or value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if is_number(value):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, ArrayVal):
        return 'array'
    if isinstance(value, FunctionValue):
        return 'function'
    if isinstance(value, BuiltinFunction):
        return 'builtin'
    return type(value).__name__


def is_truthy(value: Any) -> bool:
    """nil, false, 0 and the empty string are falsy; everything else is truthy."""
    if value is NIL or value is None or value is False:
        return False
    if is_number(value) and value == 0:
        return False
    if isinstance(value, str) and value == '':
        return False
    return True


def values_equal(a: Any, b: Any) -> bool:
    """Strict equality: values of different types are never equal.

    Numbers, strings and booleans compare by value (NaN is unequal to
    itself); arrays and functions compare by identity.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return a is b
