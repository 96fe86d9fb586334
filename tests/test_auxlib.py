import pytest

from luastd.auxlib import (
    FREELIST_REF,
    LUA_REFNIL,
    RESERVED_REFS,
    LuaTable,
    find_string,
    read_chunk,
)
from luastd.objects import LuaError


def test_find_string_found_and_missing():
    modes = ["set", "cur", "end"]
    assert find_string("cur", modes) == 1
    assert find_string("end", modes) == 2
    assert find_string("bogus", modes) == -1


def test_table_from_sequence_is_one_based():
    t = LuaTable(["a", "b", "c"])
    assert t.rawget(1) == "a"
    assert t.rawget(3) == "c"
    assert t.rawget(0) is None
    assert t.getn() == 3


def test_rawset_none_removes():
    t = LuaTable({"x": 1})
    t.rawset("x", None)
    assert t.rawget("x") is None
    assert t.next() is None


def test_nil_key_rejected():
    t = LuaTable()
    with pytest.raises(LuaError):
        t.rawset(None, 1)


def test_boolean_keys_distinct_from_numbers():
    t = LuaTable()
    t.rawset(1, "one")
    t.rawset(True, "yes")
    assert t.rawget(1) == "one"
    assert t.rawget(True) == "yes"


def test_float_and_int_keys_are_the_same_number():
    t = LuaTable()
    t.rawset(2, "two")
    assert t.rawget(2.0) == "two"


def test_getn_uses_n_field():
    t = LuaTable({"n": 5, 1: "a"})
    assert t.getn() == 5


def test_setn_updates_n_field_when_present():
    t = LuaTable({"n": 2})
    t.setn(7)
    assert t.rawget("n") == 7
    assert t.getn() == 7


def test_setn_without_n_field_roundtrip():
    t = LuaTable(["a", "b", "c"])
    t.setn(1)
    assert t.getn() == 1
    assert t.rawget("n") is None


def test_negative_n_field_falls_back_to_count():
    t = LuaTable({"n": -1, 1: "a", 2: "b"})
    assert t.getn() == 2


def test_next_visits_every_entry_once():
    data = {"a": 1, "b": 2, 3: "c"}
    t = LuaTable(data)
    seen = {}
    key = None
    while (entry := t.next(key)) is not None:
        key, value = entry
        assert key not in seen
        seen[key] = value
    assert seen == data


def test_next_invalid_key():
    t = LuaTable({"a": 1})
    with pytest.raises(LuaError, match="invalid key to `next'"):
        t.next("zzz")


def test_ref_skips_reserved_slots():
    t = LuaTable()
    r = t.ref("value")
    assert r == RESERVED_REFS + 1
    assert t.rawget(r) == "value"


def test_ref_nil_is_refnil():
    t = LuaTable()
    assert t.ref(None) == LUA_REFNIL


def test_refs_are_unique_and_reused_after_unref():
    t = LuaTable()
    r1 = t.ref("x")
    r2 = t.ref("y")
    assert r1 != r2
    t.unref(r1)
    assert t.rawget(FREELIST_REF) == r1
    r3 = t.ref("z")
    assert r3 == r1
    assert t.rawget(r3) == "z"
    assert t.rawget(r2) == "y"


def test_read_chunk_from_file(tmp_path):
    path = tmp_path / "chunk.lua"
    path.write_bytes(b"return 1\n")
    text, name = read_chunk(str(path))
    assert text == "return 1\n"
    assert name == "@" + str(path)


def test_read_chunk_missing_file(tmp_path):
    missing = tmp_path / "nope.lua"
    with pytest.raises(LuaError, match="cannot read"):
        read_chunk(str(missing))