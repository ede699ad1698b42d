import pytest

from binpeek.bits import format_binary


def test_one_is_last_bit():
    assert format_binary(1) == "0000 " * 7 + "0001 "


def test_minus_one_is_all_ones():
    assert format_binary(-1) == "1111 " * 8


@pytest.mark.parametrize("num", [0, 1, 5, 0x85, 0x7FFFFFFF, 0xDEADBEEF, 2**31])
def test_round_trip(num):
    text = format_binary(num)
    assert int(text.replace(" ", ""), 2) == num


@pytest.mark.parametrize("num", [0, 3, 0xFFFF, -7])
def test_shape(num):
    text = format_binary(num)
    assert len(text) == 40
    assert text.endswith(" ")
    assert [len(group) for group in text.split()] == [4] * 8


def test_negative_is_twos_complement():
    assert format_binary(-2) == format_binary(0xFFFFFFFE)