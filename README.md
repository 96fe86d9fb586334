# luastd

Pure-Python building blocks of a Lua 5.0-style runtime. It has no dependencies beyond the standard library.

## Modules

- `luastd.objects` provides number parsing (`str2d`) and number formatting (`format_number`, `"%.14g"`). It has the "floating point byte" encoding (`int2fb`, `fb2int`) and an integer `log2`. It also holds primitive equality (`raw_equal`), a small message formatter (`format_message`, which accepts `%d %c %f %s %%`), chunk names for messages (`chunkid`) and the `LuaError` exception.
- `luastd.memory` provides the array growth policy (`grow_size`) and a `BlockCounter` that keeps allocation accounts. Both raise `AllocationError`.
- `luastd.opcodes` covers the instruction set (`OpCode`, `OpMode`, `OpModeMask`) and the encoding and decoding of instruction fields (`create_abc`, `create_abx`, `getarg_a` … `setarg_sbx`). It also has operand mode queries (`get_op_mode`, `test_op_mode`) and `opname`.
- `luastd.lexer` is a tokenizer. `Lexer(text, source)` yields `LexToken` objects with a `TokenKind` or a single character as `kind`. Its errors are `LuaSyntaxError`, with messages such as ``[string "x = 1 .."]:1: ... near `..'``.
- `luastd.strlib` is the string library with Lua patterns: `length`, `sub`, `lower`, `upper`, `rep`, `byte`, `char`, `find`, `gfind` (a generator), `gsub` and `format`.
- `luastd.auxlib` provides `LuaTable`, a table in which `None` values are absent. It supports `rawget`, `rawset`, `next`, an array size through `getn`/`setn`, and integer references through `ref`/`unref`. The module also has `find_string` and `read_chunk`.
- `luastd.tablib` is the table library: `foreach`, `foreachi`, `getn`, `setn`, `insert`, `remove`, `concat` and `sort`.
- `luastd.mathlib` holds the math functions with C semantics, so out-of-domain input gives NaN or infinity. It also has `min`/`max`, and `random`/`randomseed` on a shared generator or on your own `Random` instance.
- `luastd.baselib` holds the basic functions:
  - conversion: `tonumber` (bases 2–36), `tostring`, `lua_type`
  - raw table access: `rawequal`, `rawget`, `rawset`
  - iteration: `next_key`, `pairs`, `ipairs`, `unpack`
  - errors and output: `lua_assert`, `error`, `lua_print`
  - package loading: the search path helpers `get_path` and `expand_path` (from `LUA_PATH` or `"?;?.lua"`), and `PackageLoader`.
- `luastd.iolib` provides `FileHandle` with the read formats `"*n"`, `"*l"` and `"*a"` and a character count. `IOLibrary` supplies the default input and output, `open`, `popen`, `tmpfile` and `lines`. The module also has the operating-system functions `clock`, `date`, `time`, `difftime`, `execute`, `exit`, `getenv`, `remove`, `rename`, `setlocale` and `tmpname`. File text is exchanged as `str` with one character per byte (latin-1).

String positions are 1-based, and negative positions count from the end, as in Lua. Errors that a Lua script would see are raised as `luastd.objects.LuaError`. Bad arguments give messages such as ``bad argument #1 to `sub' (string expected, got nil)``.

## Examples

```python
from luastd import strlib, tablib
from luastd.auxlib import LuaTable
from luastd.lexer import Lexer

strlib.find("hello world", "o w")          # (5, 7)
strlib.gsub("hello world", "(o)", "[%1]")  # ('hell[o] w[o]rld', 2)
list(strlib.gfind("a1 b2", "(%a)(%d)"))    # [('a', '1'), ('b', '2')]
strlib.format("%5.2f|%q", 3.14159, 'a"b')  # ' 3.14|"a\\"b"'

t = LuaTable(["c", "a", "b"])
tablib.sort(t)
tablib.concat(t, ",")                       # 'a,b,c'

for token in Lexer("local x = 10 .. 'y'", "=example"):
    print(token.kind, token.value)
```

## What it does not do

The package holds no parser, no code generator and no virtual machine, so it cannot run scripts on its own:

- The lexer produces tokens only.
- The opcode module describes instructions but does not execute them.
- `PackageLoader` finds and reads a package file, but it runs the chunk through a `runner(text, chunkname)` callable that you must supply.
- `error` does not add a call-stack location to the message.
- There is no command-line interpreter.

## Install and test

```
pip install .[test]
pytest
```