#!/usr/bin/env python3

"""
Instruction Decoder

Turns a 16-bit instruction word into an Instruction: the operation it selects
plus every operand field, whether or not that operation uses it.

    x   = bits 8-11, a register number
    y   = bits 4-7, a register number
    n   = bits 0-3, a nibble
    nn  = bits 0-7, a byte
    nnn = bits 0-11, an address

Anything not recognised decodes to Op.UNKNOWN rather than failing, so the CPU
can decide what to do with it.  Decoding is pure, so results are cached; there
are only 65536 possible words.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from collections import namedtuple
from enum import Enum, auto
from functools import lru_cache

Instruction = namedtuple("Instruction", ("opcode", "op", "x", "y", "n", "nn", "nnn"))


class Op(Enum):
    UNKNOWN = auto()
    # CHIP-8
    CLS = auto()        # 00E0
    RET = auto()        # 00EE
    JP = auto()         # 1nnn
    CALL = auto()       # 2nnn
    SE_BYTE = auto()    # 3xnn
    SNE_BYTE = auto()   # 4xnn
    SE_REG = auto()     # 5xy0
    LD_BYTE = auto()    # 6xnn
    ADD_BYTE = auto()   # 7xnn
    LD_REG = auto()     # 8xy0
    OR = auto()         # 8xy1
    AND = auto()        # 8xy2
    XOR = auto()        # 8xy3
    ADD_REG = auto()    # 8xy4
    SUB = auto()        # 8xy5
    SHR = auto()        # 8xy6
    SUBN = auto()       # 8xy7
    SHL = auto()        # 8xyE
    SNE_REG = auto()    # 9xy0
    LD_I = auto()       # Annn
    JP_V0 = auto()      # Bnnn
    RND = auto()        # Cxnn
    DRW = auto()        # Dxyn
    SKP = auto()        # Ex9E
    SKNP = auto()       # ExA1
    LD_VX_DT = auto()   # Fx07
    LD_VX_K = auto()    # Fx0A
    LD_DT_VX = auto()   # Fx15
    LD_ST_VX = auto()   # Fx18
    ADD_I = auto()      # Fx1E
    LD_F = auto()       # Fx29
    LD_B = auto()       # Fx33
    LD_MEM_VX = auto()  # Fx55
    LD_VX_MEM = auto()  # Fx65
    # Super-CHIP
    SCD = auto()        # 00Cn
    SCR = auto()        # 00FB
    SCL = auto()        # 00FC
    EXIT = auto()       # 00FD
    LOW = auto()        # 00FE
    HIGH = auto()       # 00FF
    LD_HF = auto()      # Fx30
    LD_R_VX = auto()    # Fx75
    LD_VX_R = auto()    # Fx85


# Simple groups, selected by the first nibble alone
GROUP_OPS = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_BYTE,
    0x4: Op.SNE_BYTE,
    0x5: Op.SE_REG,  # The low nibble is ignored
    0x6: Op.LD_BYTE,
    0x7: Op.ADD_BYTE,
    0x9: Op.SNE_REG,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW
}

# Group 0x0, keyed by the low byte (00Cn is handled separately)
SYSTEM_OPS = {
    0xE0: Op.CLS,
    0xEE: Op.RET,
    0xFB: Op.SCR,
    0xFC: Op.SCL,
    0xFD: Op.EXIT,
    0xFE: Op.LOW,
    0xFF: Op.HIGH
}

# Group 0x8, keyed by the low nibble
ALU_OPS = {
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL
}

# Group 0xE, keyed by the low byte
KEY_OPS = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP
}

# Group 0xF, keyed by the low byte
MISC_OPS = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I,
    0x29: Op.LD_F,
    0x30: Op.LD_HF,
    0x33: Op.LD_B,
    0x55: Op.LD_MEM_VX,
    0x65: Op.LD_VX_MEM,
    0x75: Op.LD_R_VX,
    0x85: Op.LD_VX_R
}


def _select_op(group, n, nn):
    op = GROUP_OPS.get(group)

    if op is not None:
        return op

    if group == 0x0:
        # Only the low byte matters.  0nnn machine code routines are not emulated, so they fall through to UNKNOWN.
        if nn & 0xF0 == 0xC0:
            return Op.SCD

        return SYSTEM_OPS.get(nn, Op.UNKNOWN)

    if group == 0x8:
        return ALU_OPS.get(n, Op.UNKNOWN)

    if group == 0xE:
        return KEY_OPS.get(nn, Op.UNKNOWN)

    return MISC_OPS.get(nn, Op.UNKNOWN)  # Only 0xF is left


@lru_cache(maxsize=None)
def decode(opcode):
    opcode &= 0xFFFF
    x = (opcode & 0xF00) >> 8
    y = (opcode & 0xF0) >> 4
    n = opcode & 0xF
    nn = opcode & 0xFF
    op = _select_op(opcode >> 12, n, nn)
    return Instruction(opcode, op, x, y, n, nn, opcode & 0xFFF)
