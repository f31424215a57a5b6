import pytest

from bilidl.errors import MalformedResponse
from bilidl.part_info import PartInfoList


def test_from_api_array():
    parts = PartInfoList.from_api_array([{"cid": 279786, "page": 1, "part": "Intro", "duration": 1200}])
    assert len(parts) == 1
    assert parts[0].cid == 279786
    assert parts[0].page == 1
    assert parts[0].part == "Intro"
    assert parts[0].duration == 1200


def test_string_numbers_and_missing_page():
    parts = PartInfoList.from_api_array([
        {"cid": "11", "part": "A"},
        {"cid": 12, "part": "B", "duration": "30"},
    ])
    assert [p.page for p in parts] == [1, 2]
    assert parts[0].cid == 11
    assert parts[1].duration == 30
    assert parts.first_cid() == 11
    assert parts.by_page(2).part == "B"
    assert parts.by_page(3) is None


@pytest.mark.parametrize("value", [
    [],
    [{"page": 1, "part": "A"}],
    [{"cid": "x", "part": "A"}],
    [{"cid": "²", "part": "A"}],
    [{"cid": 1}],
    [{"cid": 1, "part": 3}],
    ["a"],
    {"cid": 1, "part": "A"},
    None,
])
def test_invalid(value):
    with pytest.raises(MalformedResponse):
        PartInfoList.from_api_array(value)


def test_missing_cid_fails_whole_list():
    with pytest.raises(MalformedResponse):
        PartInfoList.from_api_array([{"cid": 1, "part": "A"}, {"part": "B"}])
