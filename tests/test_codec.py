import pytest

from bilidl.codec import av_to_bv, bv_to_av, normalize_bv
from bilidl.errors import DecodeError


@pytest.mark.parametrize("av, bv", [
    (170001, "BV17x411w7KC"),
    (9, "BV1xx411c7mC"),
    (207281893, "BV1nh411B7G5"),
])
def test_known_codes(av, bv):
    assert av_to_bv(av) == bv
    assert bv_to_av(bv) == av


def test_round_trip_large_number():
    for av in (1, 2, 88888888, 999999999):
        assert bv_to_av(av_to_bv(av)) == av


def test_short_form():
    assert bv_to_av("BV7x411w7KC") == 170001
    assert normalize_bv("BV7x411w7KC") == "BV17x411w7KC"


def test_lowercase_prefix():
    assert bv_to_av("bv17x411w7KC") == 170001


def test_invalid_character():
    # 0 is not in the alphabet
    with pytest.raises(DecodeError):
        bv_to_av("BV10x411w7KC")


def test_invalid_length():
    with pytest.raises(DecodeError):
        bv_to_av("BV2331")


def test_invalid_av():
    with pytest.raises(DecodeError):
        av_to_bv(-1)
    with pytest.raises(DecodeError):
        av_to_bv(True)


def test_av_too_big():
    with pytest.raises(DecodeError):
        av_to_bv(58 ** 6)
