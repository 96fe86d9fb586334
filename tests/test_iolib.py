import io
import os
import sys

import pytest

from luastd import iolib
from luastd.auxlib import LuaTable
from luastd.iolib import (
    FileHandle,
    IOLibrary,
    clock,
    date,
    difftime,
    execute,
    getenv,
    remove,
    rename,
    setlocale,
    time,
    tmpname,
)
from luastd.objects import LuaError


def handle(data=b""):
    return FileHandle(io.BytesIO(data), "mem")


def test_read_line_default_and_eof():
    f = handle(b"first\nsecond")
    assert f.read() == "first"
    assert f.read("*l") == "second"
    assert f.read("*l") is None


def test_read_all_at_eof_gives_empty_string():
    f = handle(b"abc")
    assert f.read("*a") == "abc"
    assert f.read("*a") == ""


def test_read_counts_and_eof_test():
    f = handle(b"abcdef")
    assert f.read(0) == ""
    assert f.read(4) == "abcd"
    assert f.read(10) == "ef"
    assert f.read(0) is None
    assert f.read(3) is None


def test_read_number_leaves_rest():
    f = handle(b"  12.5e1 rest")
    assert f.read("*n") == 125.0
    assert f.read("*a") == " rest"


def test_read_number_failure():
    f = handle(b"word")
    assert f.read("*n") is None


def test_read_several_formats_stops_at_failure():
    f = handle(b"7 8\nline")
    assert f.read("*n", "*n", "*l", "*l", "*l") == (7.0, 8.0, "", "line", None)
    g = handle(b"x")
    assert g.read(1, 1, 1) == ("x", None)


def test_read_invalid_options():
    f = handle(b"data")
    with pytest.raises(LuaError, match="bad argument #1 to `read' \\(invalid option\\)"):
        f.read("l")
    with pytest.raises(LuaError, match="invalid format"):
        f.read("*z")
    with pytest.raises(LuaError, match="obsolete option `\\*w'"):
        f.read("*w")


def test_write_round_trip_and_seek():
    f = FileHandle(io.BytesIO())
    assert f.write("a", 1, " ", 2.5) is True
    assert f.seek("set") == 0
    assert f.read("*a") == "a1 2.5"
    assert f.seek("end") == len("a1 2.5")
    assert f.seek("set", 1) == 1
    assert f.read(2) == "1 "


def test_seek_cur_accounts_for_lookahead():
    f = handle(b"42 tail")
    assert f.read("*n") == 42.0
    assert f.seek() == 2
    assert f.read("*a") == " tail"


def test_seek_invalid_mode():
    with pytest.raises(LuaError, match="invalid mode"):
        handle(b"x").seek("middle")


def test_write_rejects_tables():
    with pytest.raises(LuaError, match="string expected, got table"):
        FileHandle(io.BytesIO()).write(LuaTable())


def test_lines_iterates_remaining_lines():
    f = handle(b"one\ntwo\nthree\n")
    f.read()
    assert list(f.lines()) == ["two", "three"]
    assert f.closed is False


def test_closed_file_use_and_str():
    f = handle(b"x")
    assert f.close() is True
    assert f.closed
    assert str(f) == "file (closed)"
    with pytest.raises(LuaError, match="attempt to use a closed file"):
        f.read()


def test_context_manager_closes():
    with handle(b"x") as f:
        assert f.read(1) == "x"
    assert f.closed


def test_library_default_streams():
    out = io.BytesIO()
    lib = IOLibrary(stdin=io.BytesIO(b"hello\nworld\n"), stdout=out, stderr=io.BytesIO())
    assert lib.read() == "hello"
    assert list(lib.lines()) == ["world"]
    lib.write("x=", 3, "\n")
    assert out.getvalue() == b"x=3\n"
    assert lib.close() is False
    assert lib.type(lib.stdout) == "file"


def test_type_of_values():
    lib = IOLibrary(io.BytesIO(), io.BytesIO(), io.BytesIO())
    f = lib.tmpfile()
    assert lib.type(f) == "file"
    f.close()
    assert lib.type(f) == "closed file"
    assert lib.type("not a file") is None


def test_open_write_then_lines(tmp_path):
    lib = IOLibrary(io.BytesIO(), io.BytesIO(), io.BytesIO())
    path = str(tmp_path / "data.txt")
    f = lib.open(path, "w")
    f.write("a\nb\n")
    f.close()
    assert list(lib.lines(path)) == ["a", "b"]


def test_output_to_file_name(tmp_path):
    lib = IOLibrary(io.BytesIO(), io.BytesIO(), io.BytesIO())
    path = str(tmp_path / "out.txt")
    handle_out = lib.output(path)
    assert lib.output() is handle_out
    lib.write("content")
    lib.close()
    lib.input(path)
    assert lib.read("*a") == "content"


def test_open_errors(tmp_path):
    lib = IOLibrary(io.BytesIO(), io.BytesIO(), io.BytesIO())
    missing = str(tmp_path / "missing.txt")
    with pytest.raises(FileNotFoundError):
        lib.open(missing)
    with pytest.raises(OSError):
        lib.open(missing, "q")
    with pytest.raises(LuaError, match="bad argument #1 to `input'"):
        lib.input(missing)
    with pytest.raises(LuaError, match="bad argument #1 to `lines'"):
        lib.lines(missing)
    with pytest.raises(LuaError, match="bad file"):
        lib.output(LuaTable())


def test_popen_reads_command_output():
    lib = IOLibrary(io.BytesIO(), io.BytesIO(), io.BytesIO())
    f = lib.popen(f'"{sys.executable}" -c "print(42)"')
    assert f.read("*n") == 42.0
    assert f.close() is True


def test_date_utc_epoch_and_time_round_trip():
    assert date("!%Y-%m-%d", 0) == "1970-01-01"
    stamp = 1_000_000_000
    table = date("*t", stamp)
    assert time(table) == stamp


def test_date_table_fields_are_consistent():
    table = date("!*t", 86400)
    assert table.rawget("year") == 1970
    assert table.rawget("day") == 2
    assert table.rawget("yday") == 2


def test_date_empty_format_is_error():
    with pytest.raises(LuaError, match="`date' format too long"):
        date("", 0)


def test_time_missing_field():
    with pytest.raises(LuaError, match="field `day' missing in date table"):
        time(LuaTable({"month": 1, "year": 2000}))
    with pytest.raises(LuaError, match="table expected"):
        time("now")


def test_difftime_invariants():
    assert difftime(500, 500) == 0.0
    assert difftime(700, 300) == -difftime(300, 700)
    assert difftime(9) == difftime(9, 0)


def test_clock_is_monotonic():
    first = clock()
    second = clock()
    assert first <= second


def test_execute_success():
    assert execute(f'"{sys.executable}" -c "pass"') == 0


def test_exit_carries_the_code():
    with pytest.raises(SystemExit) as info:
        iolib.exit(2)
    assert info.value.code == 2


def test_getenv(monkeypatch):
    monkeypatch.setenv("LUASTD_SAMPLE", "value")
    assert getenv("LUASTD_SAMPLE") == "value"
    monkeypatch.delenv("LUASTD_SAMPLE")
    assert getenv("LUASTD_SAMPLE") is None


def test_rename_and_remove(tmp_path):
    src = tmp_path / "a.txt"
    dst = tmp_path / "b.txt"
    src.write_text("x")
    assert rename(str(src), str(dst)) is True
    assert dst.exists() and not src.exists()
    assert remove(str(dst)) is True
    assert not dst.exists()
    with pytest.raises(FileNotFoundError):
        remove(str(dst))


def test_remove_empty_directory(tmp_path):
    folder = tmp_path / "empty"
    folder.mkdir()
    assert remove(str(folder)) is True
    assert not folder.exists()


def test_setlocale():
    assert setlocale("C", "numeric") == "C"
    with pytest.raises(LuaError, match="invalid option"):
        setlocale("C", "weather")
    with pytest.raises(LuaError, match="string expected"):
        setlocale(LuaTable())


def test_tmpname_creates_fresh_file():
    name = tmpname()
    other = tmpname()
    try:
        assert os.path.exists(name)
        assert os.path.getsize(name) == 0
        assert other != name
    finally:
        os.remove(name)
        os.remove(other)