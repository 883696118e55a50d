import math
import random

import pytest

from luxbin import run
from luxbin.errors import LuxbinError
from luxbin.std import MAX_RANGE_LENGTH, populate_photon_environment
from luxbin.std.photon.conversions import (
    char_to_wavelength, parse_leading_float, parse_leading_int, wavelength_to_char,
)
from luxbin.types import NIL, ArrayVal, format_number


def output_of(source):
    result = run(source)
    assert result.error is None, result.error
    return result.output


def error_of(source):
    result = run(source)
    assert result.error is not None
    return result.error


@pytest.fixture
def photon():
    lines = []
    env = populate_photon_environment(lines.append, random.Random(7))

    def call(name, *args):
        return env.get(name).fn(list(args))
    call.lines = lines
    return call


def test_print_joins_with_spaces(photon):
    assert photon('photon_print', 1.0, 'a', NIL, True, ArrayVal([2.0])) is NIL
    assert photon('photon_print') is NIL
    assert photon.lines == ['1 a nil true [2]', '']


def test_math_builtins():
    assert output_of('photon_print(photon_abs(-3), photon_sqrt(16), photon_pow(2, 8))') == ['3 4 256']
    assert output_of('photon_print(photon_floor(2.7), photon_ceil(2.1), photon_round(2.5), photon_round(-2.5))') == [
        '2 3 3 -2']
    assert output_of('photon_print(photon_sin(0), photon_cos(0), photon_tan(0))') == ['0 1 0']
    assert output_of('photon_print(photon_min(3, "x", 1, 2), photon_max(3, 9, 2))') == ['1 9']


def test_math_domain_errors_give_nan(photon):
    assert math.isnan(photon('photon_sqrt', -1.0))
    assert photon('photon_floor', math.inf) == math.inf
    assert math.isnan(photon('photon_min', 1.0, math.nan))


def test_math_type_errors():
    assert error_of('photon_sqrt("4")') == 'photon_sqrt: expected number'
    assert error_of('photon_abs()') == 'photon_abs: expected number'
    assert error_of('photon_pow(2)') == 'photon_pow: expected two numbers'
    assert error_of('photon_min("a")') == 'photon_min: expected at least one number'


def test_random_is_in_unit_interval(photon):
    for _ in range(100):
        value = photon('photon_random')
        assert 0.0 <= value < 1.0


def test_string_builtins():
    assert output_of('photon_print(photon_len("hello"), photon_len([1, 2]))') == ['5 2']
    assert output_of('photon_print(photon_concat("a", 1, nil, [2]))') == ['a1nil[2]']
    assert output_of('photon_print(photon_upper("MiXed"), photon_lower("MiXed"))') == ['MIXED mixed']
    assert error_of('photon_len(5)') == 'photon_len: expected string or array'
    assert error_of('photon_upper(1)') == 'photon_upper: expected string'


def test_astral_characters_count_as_two(photon):
    assert photon('photon_len', '\U0001F600') == 2.0
    assert photon('photon_slice', 'a\U0001F600b', 1.0, 3.0) == '\U0001F600'
    assert photon('photon_slice', 'a\U0001F600b', -1.0) == 'b'
    assert photon('photon_wavelength', '\U0001F600') == char_to_wavelength('\ud83d')


def test_slice():
    assert output_of('photon_print(photon_slice("photon", 1, 3), photon_slice("photon", -2))') == ['ho on']
    assert output_of('photon_print(photon_slice([1, 2, 3, 4], 1), photon_slice([1, 2, 3], 0, -1))') == [
        '[2, 3, 4] [1, 2]']
    assert output_of('let a = [1, 2]\nlet b = photon_slice(a)\nphoton_push(b, 3)\nphoton_print(a, b)') == [
        '[1, 2] [1, 2, 3]']
    assert error_of('photon_slice(1)') == 'photon_slice: expected string or array'


def test_conversions():
    assert output_of('photon_print(photon_to_int(3.9), photon_to_int(-3.5), photon_to_int("42abc"), photon_to_int(true))') == [
        '3 -4 42 1']
    assert output_of('photon_print(photon_to_float("2.5e1x"), photon_to_float(false), photon_to_float(7))') == [
        '25 0 7']
    assert output_of('photon_print(photon_to_string([1, "a"]) + "!", photon_to_bool(0), photon_to_bool([]))') == [
        '[1, a]! false true']
    assert error_of('photon_to_int("abc")') == "photon_to_int: cannot convert 'abc'"
    assert error_of('photon_to_float("x")') == "photon_to_float: cannot convert 'x'"
    assert error_of('photon_to_int(nil)') == 'photon_to_int: unsupported type'


def test_type_names():
    source = 'func f() end\nphoton_print(photon_type(nil), photon_type(1), photon_type(1.5), photon_type("s"), ' \
             'photon_type(true), photon_type([]), photon_type(f), photon_type(photon_len))'
    assert output_of(source) == ['nil int float string bool array function function']


def test_push_and_pop():
    assert output_of('let a = [1]\nlet b = photon_push(a, 2)\nphoton_print(b == a, a)') == ['true [1, 2]']
    assert output_of('let a = [1, 2]\nlet last = photon_pop(a)\nphoton_print(last, a)') == ['2 [1]']
    assert error_of('photon_pop([])') == 'photon_pop: array is empty'
    assert error_of('photon_push("a", 1)') == 'photon_push: first argument must be an array'


def test_sort_and_reverse_allocate_new_arrays():
    source = 'let a = [10, 9, 1, 100]\nlet s = photon_sort(a)\nlet r = photon_reverse(a)\nphoton_print(a, s, r, s == a)'
    assert output_of(source) == ['[10, 9, 1, 100] [1, 9, 10, 100] [100, 1, 9, 10] false']
    assert output_of('photon_print(photon_sort(["pear", "Apple", "fig"]))') == ['[Apple, fig, pear]']


def test_range():
    assert output_of('photon_print(photon_range(4), photon_range(2, 5), photon_range(5, 0, -2), photon_range(0))') == [
        '[0, 1, 2, 3] [2, 3, 4] [5, 3, 1] []']
    assert output_of('photon_print(photon_range(0, 1, 0.25))') == ['[0, 0.25, 0.5, 0.75]']
    assert error_of('photon_range(0, 10, 0)') == 'photon_range: step cannot be zero'


def test_range_is_capped(photon):
    assert len(photon('photon_range', float(MAX_RANGE_LENGTH)).items) == MAX_RANGE_LENGTH
    with pytest.raises(LuxbinError) as info:
        photon('photon_range', float(MAX_RANGE_LENGTH + 1))
    assert info.value.kind == 'RangeError'
    with pytest.raises(LuxbinError):
        photon('photon_range', 0.0, math.inf)


def test_wavelength_round_trip():
    assert char_to_wavelength('A') == 583.13
    assert char_to_wavelength('L') == 617.5
    for ch in 'Hello, Light!':
        assert wavelength_to_char(char_to_wavelength(ch)) == ch
    assert output_of('photon_print(photon_wavelength("Lux"), photon_char(617.5))') == ['617.5 L']
    assert error_of('photon_wavelength("")') == 'photon_wavelength: expected a non-empty string'
    assert error_of('photon_char("a")') == 'photon_char: expected a number (wavelength in nm)'


def test_leading_number_parsing():
    assert parse_leading_int('  -12px') == -12.0
    assert parse_leading_int('px') is None
    assert parse_leading_float('.5') == 0.5
    assert parse_leading_float('Infinity and beyond') == math.inf
    assert parse_leading_float('e5') is None


@pytest.mark.parametrize('value, text', [
    (0.0, '0'),
    (-0.0, '0'),
    (42.0, '42'),
    (-1.5, '-1.5'),
    (1e21, '1e+21'),
    (1.5e-7, '1.5e-7'),
    (123456789.125, '123456789.125'),
    (2.5e-5, '0.000025'),
    (math.nan, 'NaN'),
    (-math.inf, '-Infinity'),
])
def test_format_number(value, text):
    assert format_number(value) == text
