import pytest

from bilidl.utils import filter_file_name, first_present, parse_size, to_uint


@pytest.mark.parametrize("value, expected", [
    (5, 5), ("12", 12), (3.0, 3), (True, None), (-1, None), ("1a", None), (None, None), (2.5, None),
    ("²", None), ("١٢", None),
])
def test_to_uint(value, expected):
    assert to_uint(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("20M", 20000000),
    ("1Mi", 1048576),
    ("1MiB", 1048576),
    ("4kb", 4000),
    ("1gi", 1073741824),
    ("1048576", 1048576),
    (2048, 2048),
    ("abc", None),
    ("1x", None),
    (False, None),
])
def test_parse_size(value, expected):
    assert parse_size(value) == expected


def test_filter_file_name():
    assert filter_file_name('a/b\\c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"
    assert filter_file_name("line\nbreak\x7f") == "line_break_"
    assert filter_file_name("普通 标题") == "普通 标题"


def test_first_present():
    assert first_present({"a": None, "b": 2, "c": 3}, ["a", "b", "c"]) == 2
    assert first_present({"a": None}, ["a", "b"]) is None
    assert first_present("text", ["a"]) is None
