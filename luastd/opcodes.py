"""Virtual machine instruction layout: opcodes, argument fields and modes."""

from __future__ import annotations

from enum import IntEnum

__all__ = [
    "OpCode",
    "OpMode",
    "OpModeMask",
    "SIZE_A",
    "SIZE_B",
    "SIZE_C",
    "SIZE_BX",
    "SIZE_OP",
    "POS_A",
    "POS_B",
    "POS_C",
    "POS_BX",
    "MAXARG_A",
    "MAXARG_B",
    "MAXARG_C",
    "MAXARG_BX",
    "MAXARG_SBX",
    "NO_REG",
    "NUM_OPCODES",
    "LFIELDS_PER_FLUSH",
    "OPNAMES",
    "get_opcode",
    "set_opcode",
    "getarg_a",
    "setarg_a",
    "getarg_b",
    "setarg_b",
    "getarg_c",
    "setarg_c",
    "getarg_bx",
    "setarg_bx",
    "getarg_sbx",
    "setarg_sbx",
    "create_abc",
    "create_abx",
    "get_op_mode",
    "test_op_mode",
    "opname",
]

SIZE_C = 9
SIZE_B = 9
SIZE_BX = SIZE_C + SIZE_B
SIZE_A = 8
SIZE_OP = 6

POS_C = SIZE_OP
POS_B = POS_C + SIZE_C
POS_BX = POS_C
POS_A = POS_B + SIZE_B

MAXARG_BX = (1 << SIZE_BX) - 1
MAXARG_SBX = MAXARG_BX >> 1
MAXARG_A = (1 << SIZE_A) - 1
MAXARG_B = (1 << SIZE_B) - 1
MAXARG_C = (1 << SIZE_C) - 1

NO_REG = MAXARG_A

LFIELDS_PER_FLUSH = 32

_INSTRUCTION_BITS = 32
_INSTRUCTION_MASK = (1 << _INSTRUCTION_BITS) - 1


def _mask1(n: int, p: int) -> int:
    """A mask with ``n`` one bits starting at position ``p``."""
    return ((1 << n) - 1) << p


def _mask0(n: int, p: int) -> int:
    """A mask with ``n`` zero bits starting at position ``p``."""
    return ~_mask1(n, p) & _INSTRUCTION_MASK


class OpMode(IntEnum):
    """Basic instruction formats."""

    ABC = 0
    ABX = 1
    ASBX = 2


class OpModeMask(IntEnum):
    """Bit positions of instruction properties in the mode table."""

    BREG = 2
    BRK = 3
    CRK = 4
    SETA = 5
    K = 6
    T = 7


class OpCode(IntEnum):
    """Instruction opcodes, in encoding order."""

    MOVE = 0
    LOADK = 1
    LOADBOOL = 2
    LOADNIL = 3
    GETUPVAL = 4
    GETGLOBAL = 5
    GETTABLE = 6
    SETGLOBAL = 7
    SETUPVAL = 8
    SETTABLE = 9
    NEWTABLE = 10
    SELF = 11
    ADD = 12
    SUB = 13
    MUL = 14
    DIV = 15
    POW = 16
    UNM = 17
    NOT = 18
    CONCAT = 19
    JMP = 20
    EQ = 21
    LT = 22
    LE = 23
    TEST = 24
    CALL = 25
    TAILCALL = 26
    RETURN = 27
    FORLOOP = 28
    TFORLOOP = 29
    TFORPREP = 30
    SETLIST = 31
    SETLISTO = 32
    CLOSE = 33
    CLOSURE = 34


NUM_OPCODES = len(OpCode)

OPNAMES: tuple[str, ...] = tuple(op.name for op in OpCode)


def _opmode(t: int, b: int, bk: int, ck: int, sa: int, k: int, mode: OpMode) -> int:
    return (
        (t << OpModeMask.T)
        | (b << OpModeMask.BREG)
        | (bk << OpModeMask.BRK)
        | (ck << OpModeMask.CRK)
        | (sa << OpModeMask.SETA)
        | (k << OpModeMask.K)
        | int(mode)
    )


_OPMODES: dict[OpCode, int] = {
    #                          T  B Bk Ck sA  K  mode
    OpCode.MOVE: _opmode(0, 1, 0, 0, 1, 0, OpMode.ABC),
    OpCode.LOADK: _opmode(0, 0, 0, 0, 1, 1, OpMode.ABX),
    OpCode.LOADBOOL: _opmode(0, 0, 0, 0, 1, 0, OpMode.ABC),
    OpCode.LOADNIL: _opmode(0, 1, 0, 0, 1, 0, OpMode.ABC),
    OpCode.GETUPVAL: _opmode(0, 0, 0, 0, 1, 0, OpMode.ABC),
    OpCode.GETGLOBAL: _opmode(0, 0, 0, 0, 1, 1, OpMode.ABX),
    OpCode.GETTABLE: _opmode(0, 1, 0, 1, 1, 0, OpMode.ABC),
    OpCode.SETGLOBAL: _opmode(0, 0, 0, 0, 0, 1, OpMode.ABX),
    OpCode.SETUPVAL: _opmode(0, 0, 0, 0, 0, 0, OpMode.ABC),
    OpCode.SETTABLE: _opmode(0, 0, 1, 1, 0, 0, OpMode.ABC),
    OpCode.NEWTABLE: _opmode(0, 0, 0, 0, 1, 0, OpMode.ABC),
    OpCode.SELF: _opmode(0, 1, 0, 1, 1, 0, OpMode.ABC),
    OpCode.ADD: _opmode(0, 0, 1, 1, 1, 0, OpMode.ABC),
    OpCode.SUB: _opmode(0, 0, 1, 1, 1, 0, OpMode.ABC),
    OpCode.MUL: _opmode(0, 0, 1, 1, 1, 0, OpMode.ABC),
    OpCode.DIV: _opmode(0, 0, 1, 1, 1, 0, OpMode.ABC),
    OpCode.POW: _opmode(0, 0, 1, 1, 1, 0, OpMode.ABC),
    OpCode.UNM: _opmode(0, 1, 0, 0, 1, 0, OpMode.ABC),
    OpCode.NOT: _opmode(0, 1, 0, 0, 1, 0, OpMode.ABC),
    OpCode.CONCAT: _opmode(0, 1, 0, 1, 1, 0, OpMode.ABC),
    OpCode.JMP: _opmode(0, 0, 0, 0, 0, 0, OpMode.ASBX),
    OpCode.EQ: _opmode(1, 0, 1, 1, 0, 0, OpMode.ABC),
    OpCode.LT: _opmode(1, 0, 1, 1, 0, 0, OpMode.ABC),
    OpCode.LE: _opmode(1, 0, 1, 1, 0, 0, OpMode.ABC),
    OpCode.TEST: _opmode(1, 1, 0, 0, 1, 0, OpMode.ABC),
    OpCode.CALL: _opmode(0, 0, 0, 0, 0, 0, OpMode.ABC),
    OpCode.TAILCALL: _opmode(0, 0, 0, 0, 0, 0, OpMode.ABC),
    OpCode.RETURN: _opmode(0, 0, 0, 0, 0, 0, OpMode.ABC),
    OpCode.FORLOOP: _opmode(0, 0, 0, 0, 0, 0, OpMode.ASBX),
    OpCode.TFORLOOP: _opmode(1, 0, 0, 0, 0, 0, OpMode.ABC),
    OpCode.TFORPREP: _opmode(0, 0, 0, 0, 0, 0, OpMode.ASBX),
    OpCode.SETLIST: _opmode(0, 0, 0, 0, 0, 0, OpMode.ABX),
    OpCode.SETLISTO: _opmode(0, 0, 0, 0, 0, 0, OpMode.ABX),
    OpCode.CLOSE: _opmode(0, 0, 0, 0, 0, 0, OpMode.ABC),
    OpCode.CLOSURE: _opmode(0, 0, 0, 0, 1, 0, OpMode.ABX),
}


def _set_field(i: int, value: int, size: int, pos: int) -> int:
    i &= _INSTRUCTION_MASK
    return (i & _mask0(size, pos)) | ((value << pos) & _mask1(size, pos))


def _get_field(i: int, size: int, pos: int) -> int:
    return (i >> pos) & _mask1(size, 0)


def get_opcode(i: int) -> OpCode:
    """Return the opcode of instruction ``i``."""
    return OpCode(i & _mask1(SIZE_OP, 0))


def set_opcode(i: int, o: int) -> int:
    """Return ``i`` with its opcode replaced by ``o``."""
    return ((i & _INSTRUCTION_MASK) & _mask0(SIZE_OP, 0)) | int(o)


def getarg_a(i: int) -> int:
    """Return argument A of instruction ``i``."""
    return _get_field(i, SIZE_A, POS_A)


def setarg_a(i: int, u: int) -> int:
    """Return ``i`` with argument A replaced by ``u``."""
    return _set_field(i, u, SIZE_A, POS_A)


def getarg_b(i: int) -> int:
    """Return argument B of instruction ``i``."""
    return _get_field(i, SIZE_B, POS_B)


def setarg_b(i: int, b: int) -> int:
    """Return ``i`` with argument B replaced by ``b``."""
    return _set_field(i, b, SIZE_B, POS_B)


def getarg_c(i: int) -> int:
    """Return argument C of instruction ``i``."""
    return _get_field(i, SIZE_C, POS_C)


def setarg_c(i: int, c: int) -> int:
    """Return ``i`` with argument C replaced by ``c``."""
    return _set_field(i, c, SIZE_C, POS_C)


def getarg_bx(i: int) -> int:
    """Return argument Bx (B and C together) of instruction ``i``."""
    return _get_field(i, SIZE_BX, POS_BX)


def setarg_bx(i: int, bx: int) -> int:
    """Return ``i`` with argument Bx replaced by ``bx``."""
    return _set_field(i, bx, SIZE_BX, POS_BX)


def getarg_sbx(i: int) -> int:
    """Return the signed argument sBx (stored in excess MAXARG_SBX)."""
    return getarg_bx(i) - MAXARG_SBX


def setarg_sbx(i: int, sbx: int) -> int:
    """Return ``i`` with the signed argument sBx replaced by ``sbx``."""
    return setarg_bx(i, sbx + MAXARG_SBX)


def create_abc(o: int, a: int, b: int, c: int) -> int:
    """Build an instruction in iABC format."""
    return (int(o) | (a << POS_A) | (b << POS_B) | (c << POS_C)) & _INSTRUCTION_MASK


def create_abx(o: int, a: int, bx: int) -> int:
    """Build an instruction in iABx format."""
    return (int(o) | (a << POS_A) | (bx << POS_BX)) & _INSTRUCTION_MASK


def get_op_mode(op: int) -> OpMode:
    """Return the instruction format used by opcode ``op``."""
    return OpMode(_OPMODES[OpCode(op)] & 3)


def test_op_mode(op: int, bit: int) -> bool:
    """Tell whether opcode ``op`` has the property at mask position ``bit``."""
    return bool(_OPMODES[OpCode(op)] & (1 << int(bit)))


test_op_mode.__test__ = False  # keep test collectors from picking it up


def opname(op: int) -> str:
    """Return the printable name of opcode ``op``."""
    return OPNAMES[OpCode(op)]