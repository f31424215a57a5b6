#!/usr/bin/env python3
"""
AV number <-> BV short code conversion

A BV code is ``BV1`` followed by 9 characters. Six of them carry the
obfuscated AV number as base-58 digits, the others are fixed.
"""

from .errors import DecodeError

TABLE = "fZodR9XQDSUm21yCkr6zBqiveYah8bt4xsWpHnJE7jL5VG3guMTKNPAwcF"
REVERSE_TABLE = {c: i for i, c in enumerate(TABLE)}
# Positions of the base-58 digits, least significant first
POSITIONS = (11, 10, 3, 8, 4, 6)
TEMPLATE = "BV1  4 1 7  "
XOR = 177451812
ADD = 8728348608
BASE = len(TABLE)
LIMIT = BASE ** len(POSITIONS)


def av_to_bv(av):
    """Convert an AV number to its 12 character BV code"""
    if isinstance(av, bool) or not isinstance(av, int) or av < 0:
        raise DecodeError(f"Invalid AV number: {av!r}")
    x = (av ^ XOR) + ADD
    if x >= LIMIT:
        raise DecodeError("AV number is too big.")
    r = list(TEMPLATE)
    for i, pos in enumerate(POSITIONS):
        r[pos] = TABLE[x // BASE ** i % BASE]
    return "".join(r)


def normalize_bv(bv):
    """Return the canonical 12 character form of a BV code

    The 11 character form (``BV`` + 9 characters) misses the leading ``1``.
    """
    if not isinstance(bv, str) or len(bv) not in (11, 12) or bv[:2].upper() != "BV":
        raise DecodeError(f"Invalid BV code: {bv!r}")
    if len(bv) == 11:
        return "BV1" + bv[2:]
    return "BV" + bv[2:]


def bv_to_av(bv):
    """Convert a BV code (12 or 11 characters) to the AV number"""
    s = normalize_bv(bv)
    r = 0
    for i, pos in enumerate(POSITIONS):
        c = s[pos]
        if c not in REVERSE_TABLE:
            raise DecodeError(f"Invalid character {c!r} in BV code: {bv!r}")
        r += REVERSE_TABLE[c] * BASE ** i
    if r < ADD:
        raise DecodeError(f"Invalid BV code: {bv!r}")
    return (r - ADD) ^ XOR
