#!/usr/bin/env python3
"""
Small helpers shared by providers, settings and downloaders
"""

import os
import re

SIZE_PATTERN = re.compile(r'^(\d+)([kmgtpezy]i?)?b?$', re.IGNORECASE)
SIZE_POWERS = "kmgtpezy"
CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')
UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|]')


def get_data_dir():
    """Get bili-dl data directory (settings and cookies live here)"""
    if os.name == 'nt':  # Windows
        base_dir = os.path.join(os.environ.get('APPDATA', os.path.expanduser('~')), 'bili-dl')
    elif os.name == 'posix':  # Linux/macOS
        base_dir = os.path.join(os.path.expanduser('~'), '.local', 'share', 'bili-dl')
    else:
        base_dir = os.path.join(os.path.expanduser('~'), '.bili-dl')

    os.makedirs(base_dir, exist_ok=True)
    return base_dir


def to_uint(value):
    """Convert a JSON number or an ASCII digit string to a non-negative int

    Returns None when the value can not be converted.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        if value.is_integer() and value >= 0:
            return int(value)
        return None
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return None


def parse_size(s):
    """Convert a size like ``20M``, ``1Mi``, ``4kb`` or ``1048576`` to bytes

    A single unit letter is 1000 based, a unit with ``i`` is 1024 based.
    """
    if isinstance(s, bool):
        return None
    if isinstance(s, int):
        return s if s >= 0 else None
    if not isinstance(s, str):
        return None
    m = SIZE_PATTERN.match(s.strip())
    if not m:
        return None
    number = int(m.group(1))
    unit = m.group(2)
    if not unit:
        return number
    base = 1000 if len(unit) == 1 else 1024
    return number * base ** (SIZE_POWERS.index(unit[0].lower()) + 1)


def filter_file_name(name):
    """Replace characters which can not appear in a file name with ``_``"""
    name = CONTROL_CHARS.sub('_', name)
    return UNSAFE_CHARS.sub('_', name)


def first_present(obj, keys):
    """Return the first value in ``obj`` whose key is in ``keys`` and is not None"""
    if not isinstance(obj, dict):
        return None
    for key in keys:
        value = obj.get(key)
        if value is not None:
            return value
    return None
