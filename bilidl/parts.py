#!/usr/bin/env python3
"""
Part number ranges

Accepted forms (spaces are ignored):
    3       part 3
    2-34    part 2 to part 34
    3-      part 3 to the last part
    -10     first part to part 10
    -       all parts
A list joins ranges with commas: "3, 5-10". In settings files a list may
also be a JSON array mixing numbers and range strings: [3, "5-10"].
"""

import re

from pydantic import BaseModel, ConfigDict

from .errors import PartRangeOrderError, PartRangeSyntaxError

RANGE_PATTERN = re.compile(r'^\s*(?P<start>\d+)?\s*(?:(?P<concat>-)\s*(?P<end>\d+)?)?\s*$')


class PartRange(BaseModel):
    """Inclusive range of part numbers, 0 means unbounded"""
    model_config = ConfigDict(frozen=True)

    start: int = 0
    end: int = 0

    @classmethod
    def of(cls, start, end):
        if start < 0 or end < 0:
            raise PartRangeSyntaxError(f"Part number can not be negative: {start}-{end}")
        if start and end and start > end:
            raise PartRangeOrderError(start, end)
        return cls(start=start, end=end)

    def __contains__(self, page):
        if self.start and page < self.start:
            return False
        if self.end and page > self.end:
            return False
        return True


def parse_range(s):
    """Parse one range such as ``1-3``, ``1-``, ``-4``, ``1`` or ``-``"""
    m = RANGE_PATTERN.match(s)
    if not m:
        raise PartRangeSyntaxError(f"Invalid part range: {s!r}")
    start, concat, end = m.group('start'), m.group('concat'), m.group('end')
    if start is None and concat is None:
        raise PartRangeSyntaxError(f"Invalid part range: {s!r}")
    if concat is None:
        return PartRange.of(int(start), int(start))
    return PartRange.of(int(start) if start else 0, int(end) if end else 0)


def parse_list(s):
    """Parse a comma separated list of ranges such as ``1-34, 36``"""
    ranges = [parse_range(segment) for segment in s.split(',')]
    if not ranges:
        raise PartRangeSyntaxError(f"Empty part list: {s!r}")
    return ranges


def _from_number(n):
    if isinstance(n, bool) or n < 0:
        raise PartRangeSyntaxError(f"Invalid part number: {n!r}")
    return PartRange.of(n, n)


def parse_json(value):
    """Parse a part list from a JSON value: number, string or array of both"""
    if isinstance(value, str):
        return parse_list(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return [_from_number(value)]
    if not isinstance(value, list):
        raise PartRangeSyntaxError(f"Invalid part list: {value!r}")
    ranges = []
    for item in value:
        if isinstance(item, str):
            ranges.append(parse_range(item))
        elif isinstance(item, int) and not isinstance(item, bool):
            ranges.append(_from_number(item))
        else:
            raise PartRangeSyntaxError(f"Invalid part list item: {item!r}")
    if not ranges:
        raise PartRangeSyntaxError("Empty part list")
    return ranges


def select_parts(parts, ranges):
    """Return the parts whose page number falls in any of the ranges

    The result keeps the order of ``parts`` and contains each part once.
    """
    return [p for p in parts if any(p.page in r for r in ranges)]
