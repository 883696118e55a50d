import math
import random
import sys
from functools import cmp_to_key
from typing import Any, Callable, List

from luxbin.builtin_function import BuiltinFunction
from luxbin.environment import Environment
from luxbin.errors import LuxbinError
from luxbin.types import (
    NIL, ArrayVal, FunctionValue, is_number, is_truthy, join_utf16_units, power, to_display,
    utf16_length, utf16_units,
)

from .conversions import (
    char_to_wavelength, parse_leading_float, parse_leading_int, round_half_up,
    wavelength_to_char,
)

MAX_RANGE_LENGTH = 100_000


def _arg(args: List[Any], i: int) -> Any:
    """Missing arguments read as nil."""
    return args[i] if i < len(args) else NIL


def _slice_bound(value: Any, default: int) -> int:
    if not is_number(value):
        return default
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return sys.maxsize if value > 0 else -sys.maxsize
    return int(value)


def _collation_key(text: str):
    # Case-insensitive first, lowercase before uppercase on ties
    return (text.casefold(), text.swapcase())


def _compare_for_sort(a: Any, b: Any) -> int:
    if is_number(a) and is_number(b):
        if a < b:
            return -1
        if a > b:
            return 1
        return 0
    ka = _collation_key(to_display(a))
    kb = _collation_key(to_display(b))
    return (ka > kb) - (ka < kb)


def unary_math(name: str, fn: Callable[[float], float]) -> Callable[[List[Any]], Any]:
    def builtin(args: List[Any]) -> Any:
        x = _arg(args, 0)
        if not is_number(x):
            raise LuxbinError('TypeError', f'{name}: expected number')
        try:
            return float(fn(x))
        except ValueError:
            return math.nan
        except OverflowError:
            return x
    return builtin


def populate_photon_environment(emit: Callable[[str], None], rng: random.Random) -> Environment:
        photon_env = Environment()

        def photon_print(args: List[Any]) -> Any:
            emit(' '.join(to_display(a) for a in args))
            return NIL

        def photon_pow(args: List[Any]) -> Any:
            base, exponent = _arg(args, 0), _arg(args, 1)
            if not is_number(base) or not is_number(exponent):
                raise LuxbinError('TypeError', 'photon_pow: expected two numbers')
            return power(base, exponent)

        def numeric_args(name: str, args: List[Any]) -> List[float]:
            nums = [a for a in args if is_number(a)]
            if not nums:
                raise LuxbinError('TypeError', f'{name}: expected at least one number')
            return nums

        def photon_min(args: List[Any]) -> Any:
            nums = numeric_args('photon_min', args)
            if any(math.isnan(n) for n in nums):
                return math.nan
            return float(min(nums))

        def photon_max(args: List[Any]) -> Any:
            nums = numeric_args('photon_max', args)
            if any(math.isnan(n) for n in nums):
                return math.nan
            return float(max(nums))

        def photon_random(args: List[Any]) -> Any:
            return rng.random()

        # String

        def photon_len(args: List[Any]) -> Any:
            value = _arg(args, 0)
            if isinstance(value, str):
                return float(utf16_length(value))
            if isinstance(value, ArrayVal):
                return float(len(value.items))
            raise LuxbinError('TypeError', 'photon_len: expected string or array')

        def photon_concat(args: List[Any]) -> Any:
            return ''.join(to_display(a) for a in args)

        def photon_slice(args: List[Any]) -> Any:
            value = _arg(args, 0)
            start = _slice_bound(_arg(args, 1), 0)
            end = _slice_bound(_arg(args, 2), sys.maxsize)
            if isinstance(value, str):
                return join_utf16_units(utf16_units(value)[start:end])
            if isinstance(value, ArrayVal):
                return ArrayVal(value.items[start:end])
            raise LuxbinError('TypeError', 'photon_slice: expected string or array')

        def photon_upper(args: List[Any]) -> Any:
            value = _arg(args, 0)
            if not isinstance(value, str):
                raise LuxbinError('TypeError', 'photon_upper: expected string')
            return value.upper()

        def photon_lower(args: List[Any]) -> Any:
            value = _arg(args, 0)
            if not isinstance(value, str):
                raise LuxbinError('TypeError', 'photon_lower: expected string')
            return value.lower()

        # Type conversions

        def photon_to_int(args: List[Any]) -> Any:
            value = _arg(args, 0)
            if isinstance(value, bool):
                return 1.0 if value else 0.0
            if is_number(value):
                if not math.isfinite(value):
                    return value
                return float(math.floor(value))
            if isinstance(value, str):
                n = parse_leading_int(value)
                if n is None:
                    raise LuxbinError('TypeError', f"photon_to_int: cannot convert '{value}'")
                return n
            raise LuxbinError('TypeError', 'photon_to_int: unsupported type')

        def photon_to_float(args: List[Any]) -> Any:
            value = _arg(args, 0)
            if isinstance(value, bool):
                return 1.0 if value else 0.0
            if is_number(value):
                return float(value)
            if isinstance(value, str):
                n = parse_leading_float(value)
                if n is None:
                    raise LuxbinError('TypeError', f"photon_to_float: cannot convert '{value}'")
                return n
            raise LuxbinError('TypeError', 'photon_to_float: unsupported type')

        def photon_to_string(args: List[Any]) -> Any:
            return to_display(_arg(args, 0))

        def photon_to_bool(args: List[Any]) -> Any:
            return is_truthy(_arg(args, 0))

        def photon_type(args: List[Any]) -> Any:
            value = _arg(args, 0)
            if value is NIL:
                return 'nil'
            if isinstance(value, bool):
                return 'bool'
            if is_number(value):
                return 'int' if math.isfinite(value) and value == int(value) else 'float'
            if isinstance(value, str):
                return 'string'
            if isinstance(value, ArrayVal):
                return 'array'
            if isinstance(value, (FunctionValue, BuiltinFunction)):
                return 'function'
            return 'unknown'

        # Arrays

        def photon_push(args: List[Any]) -> Any:
            target = _arg(args, 0)
            if not isinstance(target, ArrayVal):
                raise LuxbinError('TypeError', 'photon_push: first argument must be an array')
            target.items.append(_arg(args, 1))
            return target

        def photon_pop(args: List[Any]) -> Any:
            target = _arg(args, 0)
            if not isinstance(target, ArrayVal):
                raise LuxbinError('TypeError', 'photon_pop: expected array')
            if not target.items:
                raise LuxbinError('RangeError', 'photon_pop: array is empty')
            return target.items.pop()

        def photon_sort(args: List[Any]) -> Any:
            target = _arg(args, 0)
            if not isinstance(target, ArrayVal):
                raise LuxbinError('TypeError', 'photon_sort: expected array')
            return ArrayVal(sorted(target.items, key=cmp_to_key(_compare_for_sort)))

        def photon_reverse(args: List[Any]) -> Any:
            target = _arg(args, 0)
            if not isinstance(target, ArrayVal):
                raise LuxbinError('TypeError', 'photon_reverse: expected array')
            return ArrayVal(list(reversed(target.items)))

        def photon_range(args: List[Any]) -> Any:
            first, second, third = _arg(args, 0), _arg(args, 1), _arg(args, 2)
            start = first if is_number(first) else 0.0
            if is_number(second):
                end = second
            else:
                end = start
            step = third if is_number(third) else 1.0
            if step == 0:
                raise LuxbinError('RangeError', 'photon_range: step cannot be zero')
            if len(args) == 1:
                # photon_range(n) counts from 0 up to n
                start, end, step = 0.0, start, 1.0
            items: List[Any] = []
            i = float(start)
            while (i < end) if step > 0 else (i > end):
                if len(items) >= MAX_RANGE_LENGTH:
                    raise LuxbinError(
                        'RangeError',
                        f'photon_range: too many elements (limit {MAX_RANGE_LENGTH:,})',
                    )
                items.append(i)
                i += step
            return ArrayVal(items)

        # Wavelength encoding

        def photon_wavelength(args: List[Any]) -> Any:
            value = _arg(args, 0)
            if not isinstance(value, str) or not value:
                raise LuxbinError('TypeError', 'photon_wavelength: expected a non-empty string')
            return char_to_wavelength(value[0])

        def photon_char(args: List[Any]) -> Any:
            value = _arg(args, 0)
            if not is_number(value):
                raise LuxbinError('TypeError', 'photon_char: expected a number (wavelength in nm)')
            return wavelength_to_char(value)

        builtins = {
            'photon_print': photon_print,
            'photon_abs': unary_math('photon_abs', abs),
            'photon_sqrt': unary_math('photon_sqrt', math.sqrt),
            'photon_pow': photon_pow,
            'photon_sin': unary_math('photon_sin', math.sin),
            'photon_cos': unary_math('photon_cos', math.cos),
            'photon_tan': unary_math('photon_tan', math.tan),
            'photon_floor': unary_math('photon_floor', math.floor),
            'photon_ceil': unary_math('photon_ceil', math.ceil),
            'photon_round': unary_math('photon_round', round_half_up),
            'photon_min': photon_min,
            'photon_max': photon_max,
            'photon_random': photon_random,
            'photon_len': photon_len,
            'photon_concat': photon_concat,
            'photon_slice': photon_slice,
            'photon_upper': photon_upper,
            'photon_lower': photon_lower,
            'photon_to_int': photon_to_int,
            'photon_to_float': photon_to_float,
            'photon_to_string': photon_to_string,
            'photon_to_bool': photon_to_bool,
            'photon_type': photon_type,
            'photon_push': photon_push,
            'photon_pop': photon_pop,
            'photon_sort': photon_sort,
            'photon_reverse': photon_reverse,
            'photon_range': photon_range,
            'photon_wavelength': photon_wavelength,
            'photon_char': photon_char,
        }
        for name, fn in builtins.items():
            photon_env.define(name, BuiltinFunction(name, fn), is_const=True)

        return photon_env
