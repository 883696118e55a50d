"""Number parsing and wavelength encoding used by the photon builtins."""

import math
import re
from typing import Optional

from luxbin.types import utf16_units

INT_PREFIX = re.compile(r'\s*([+-]?\d+)')
FLOAT_PREFIX = re.compile(
    r'\s*([+-]?(?:Infinity|\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?))'
)

# Visible spectrum used by the photonic character encoding, in nm
VISIBLE_START = 380
VISIBLE_WIDTH = 400
CODE_SPACE = 128


def round_half_up(x: float) -> float:
    """Round to the nearest integer, halves towards positive infinity."""
    if not math.isfinite(x):
        return x
    return float(math.floor(x + 0.5))


def parse_leading_int(text: str) -> Optional[float]:
    """Parse the integer at the start of `text`, ignoring anything after it.

    Returns None when the text does not start with an integer.
    """
    m = INT_PREFIX.match(text)
    if not m:
        return None
    return float(int(m.group(1)))


def parse_leading_float(text: str) -> Optional[float]:
    m = FLOAT_PREFIX.match(text)
    if not m:
        return None
    return float(m.group(1))


def utf16_code_unit(ch: str) -> int:
    # Astral characters are measured by their high surrogate
    return ord(utf16_units(ch)[0])


def char_to_wavelength(ch: str) -> float:
    code = utf16_code_unit(ch)
    wavelength = VISIBLE_START + (code % CODE_SPACE) * (VISIBLE_WIDTH / CODE_SPACE)
    return round_half_up(wavelength * 100) / 100


def wavelength_to_char(nm: float) -> str:
    code = round_half_up(((nm - VISIBLE_START) * CODE_SPACE) / VISIBLE_WIDTH)
    if not math.isfinite(code):
        return '\0'
    return chr(int(abs(math.fmod(code, CODE_SPACE))))
