import pytest

from luastd.objects import (
    LuaError,
    chunkid,
    fb2int,
    format_message,
    format_number,
    int2fb,
    log2,
    raw_equal,
    str2d,
)


@pytest.mark.parametrize("x", range(8))
def test_small_values_encode_exactly(x):
    assert int2fb(x) == x
    assert fb2int(int2fb(x)) == x


@pytest.mark.parametrize("x", [8, 9, 15, 16, 100, 1000, 65535, 123456])
def test_fb_roundtrip_never_loses_capacity(x):
    decoded = fb2int(int2fb(x))
    assert decoded >= x
    assert decoded < 2 * x + 8


def test_int2fb_rejects_negative():
    with pytest.raises(ValueError):
        int2fb(-1)


def test_log2_of_zero_is_minus_one():
    assert log2(0) == -1


@pytest.mark.parametrize("x", [1, 2, 3, 255, 256, 65535, 65536, 0x01000000, 0xFFFFFFFF])
def test_log2_bounds(x):
    k = log2(x)
    assert 2**k <= x < 2 ** (k + 1)


def test_str2d_accepts_numerals_with_spaces():
    assert str2d("  3.5  ") == 3.5
    assert str2d("1e2") == 100.0
    assert str2d(".5") == 0.5


@pytest.mark.parametrize("text", ["", "   ", "abc", "1e", "12x", "1 2"])
def test_str2d_rejects_malformed(text):
    assert str2d(text) is None


def test_str2d_hex():
    assert str2d("0x10") == 16.0


def test_raw_equal_distinguishes_types():
    assert raw_equal(None, None)
    assert raw_equal(1, 1.0)
    assert not raw_equal(True, 1)
    assert not raw_equal("1", 1)
    assert raw_equal("abc", "ab" + "c")


def test_raw_equal_objects_by_identity():
    a, b = [], []
    assert raw_equal(a, a)
    assert not raw_equal(a, b)


def test_format_number_integral_has_no_fraction():
    assert format_number(3.0) == "3"
    assert str2d(format_number(0.1)) == 0.1


def test_format_message_from_source_formats():
    msg = format_message("too many %s (limit=%d)", "lines in a chunk", 10)
    assert msg == "too many lines in a chunk (limit=10)"


def test_format_message_char_and_percent():
    assert format_message("char(%d)%%", 7) == "char(7)%"
    assert format_message("%c", ord("A")) == "A"


def test_format_message_invalid_option():
    with pytest.raises(ValueError):
        format_message("%x", 1)


def test_chunkid_equals_prefix():
    assert chunkid("=stdin", 80) == "stdin"


def test_chunkid_file_name():
    assert chunkid("@script.lua", 80) == "script.lua"


def test_chunkid_long_file_name_is_truncated():
    name = "d/" * 60 + "end.lua"
    out = chunkid("@" + name, 80)
    assert out.startswith("...")
    assert out.endswith("end.lua")
    assert len(out) <= 80


def test_chunkid_string_source():
    assert chunkid("print(1)", 80) == '[string "print(1)"]'


def test_chunkid_string_stops_at_newline():
    out = chunkid("first\nsecond", 80)
    assert out == '[string "first..."]'


def test_lua_error_carries_value():
    err = LuaError("boom")
    assert err.value == "boom"
    assert str(err) == "boom"