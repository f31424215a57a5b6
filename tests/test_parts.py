import pytest

from bilidl.errors import PartRangeOrderError, PartRangeSyntaxError
from bilidl.part_info import PartInfo
from bilidl.parts import PartRange, parse_json, parse_list, parse_range, select_parts


def r(start, end):
    return PartRange(start=start, end=end)


@pytest.mark.parametrize("text, expected", [
    ("-", r(0, 0)),
    (" -30", r(0, 30)),
    (" 12 - 23 ", r(12, 23)),
    ("13-", r(13, 0)),
    ("33", r(33, 33)),
])
def test_parse_range(text, expected):
    assert parse_range(text) == expected


def test_parse_range_order():
    with pytest.raises(PartRangeOrderError):
        parse_range("34-2")


@pytest.mark.parametrize("text", ["", "a", "1-2-3", "--"])
def test_parse_range_syntax(text):
    with pytest.raises(PartRangeSyntaxError):
        parse_range(text)


def test_parse_list():
    assert parse_list("1-3, 5-11") == [r(1, 3), r(5, 11)]
    assert parse_list("1-34, 37") == [r(1, 34), r(37, 37)]


def test_parse_list_empty_segment():
    with pytest.raises(PartRangeSyntaxError):
        parse_list("3,,4")


def test_parse_json():
    assert parse_json("1-33, 38") == [r(1, 33), r(38, 38)]
    assert parse_json(4) == [r(4, 4)]
    assert parse_json([3, "5-"]) == [r(3, 3), r(5, 0)]


@pytest.mark.parametrize("value", [True, None, 1.5, [], [3, None], {"a": 1}, -1])
def test_parse_json_invalid(value):
    with pytest.raises(PartRangeSyntaxError):
        parse_json(value)


def test_contains():
    assert 5 in r(0, 0)
    assert 5 in r(3, 0)
    assert 2 not in r(3, 0)
    assert 11 not in r(0, 10)


def test_select_parts_keeps_order_without_duplicates():
    parts = [PartInfo(cid=100 + i, page=i, part=f"P{i}") for i in range(1, 7)]
    selected = select_parts(parts, [r(5, 0), r(1, 2), r(2, 2)])
    assert [p.page for p in selected] == [1, 2, 5, 6]


def test_select_parts_nothing():
    parts = [PartInfo(cid=1, page=1, part="P1")]
    assert select_parts(parts, [r(3, 3)]) == []
