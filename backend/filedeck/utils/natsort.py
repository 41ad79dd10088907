"""Natural order string comparison ("img2" < "img10").

Compatible with PHP's strnatcmp: leading zeros of the whole string are
ignored, whitespace is skipped, digit runs compare by magnitude unless one
of them starts with "0", in which case they compare left-aligned (as a
fractional part).
"""

from __future__ import annotations

import re
from functools import cmp_to_key

_LEADING_ZEROS = re.compile(r"^0+(?=\d)")


def _char(s: str, i: int) -> str:
    return s[i] if i < len(s) else ""


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def strnatcmp(a: str, b: str) -> int:
    """Return -1, 0 or 1."""
    if not a or not b:
        return (len(a) > len(b)) - (len(a) < len(b))

    a = _LEADING_ZEROS.sub("", a, count=1)
    b = _LEADING_ZEROS.sub("", b, count=1)
    i = j = 0

    while i < len(a) and j < len(b):
        while _char(a, i).isspace():
            i += 1
        while _char(b, j).isspace():
            j += 1

        ac, bc = _char(a, i), _char(b, j)
        a_digit, b_digit = _is_digit(ac), _is_digit(bc)

        if a_digit and b_digit:
            bias = 0
            fractional = ac == "0" or bc == "0"
            while a_digit or b_digit:
                if not a_digit:
                    return -1
                if not b_digit:
                    return 1
                if ac < bc:
                    if fractional:
                        return -1
                    bias = bias or -1
                elif ac > bc:
                    if fractional:
                        return 1
                    bias = bias or 1
                i += 1
                j += 1
                ac, bc = _char(a, i), _char(b, j)
                a_digit, b_digit = _is_digit(ac), _is_digit(bc)
            if not fractional and bias:
                return bias
            continue

        if not ac or not bc:
            continue
        if ac < bc:
            return -1
        if ac > bc:
            return 1
        i += 1
        j += 1

    a_rest, b_rest = i < len(a), j < len(b)
    return int(a_rest and not b_rest) - int(b_rest and not a_rest)


natural_key = cmp_to_key(strnatcmp)
