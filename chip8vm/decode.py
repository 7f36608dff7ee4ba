"""CHIP-8 instruction decoding."""

import enum
from typing import Optional

from chex import dataclass


class Operation(enum.Enum):
    """Every operation of the instruction set, plus the zero-word no-op."""
    NOP = "nop"
    CLS = "00E0"
    RET = "00EE"
    JP = "1nnn"
    CALL = "2nnn"
    SE_IMM = "3xkk"
    SNE_IMM = "4xkk"
    SE_REG = "5xy0"
    LD_IMM = "6xkk"
    ADD_IMM = "7xkk"
    LD_REG = "8xy0"
    OR = "8xy1"
    AND = "8xy2"
    XOR = "8xy3"
    ADD_REG = "8xy4"
    SUB = "8xy5"
    SHR = "8xy6"
    SUBN = "8xy7"
    SHL = "8xyE"
    SNE_REG = "9xy0"
    LD_I = "Annn"
    JP_V0 = "Bnnn"
    RND = "Cxkk"
    DRW = "Dxyn"
    SKP = "Ex9E"
    SKNP = "ExA1"
    LD_VX_DT = "Fx07"
    LD_VX_K = "Fx0A"
    LD_DT_VX = "Fx15"
    LD_ST_VX = "Fx18"
    ADD_I = "Fx1E"
    LD_F = "Fx29"
    LD_B = "Fx33"
    LD_MEM_VX = "Fx55"
    LD_VX_MEM = "Fx65"


# Families fully selected by the top nibble.
_DIRECT = {
    0x1: Operation.JP,
    0x2: Operation.CALL,
    0x3: Operation.SE_IMM,
    0x4: Operation.SNE_IMM,
    0x6: Operation.LD_IMM,
    0x7: Operation.ADD_IMM,
    0xA: Operation.LD_I,
    0xB: Operation.JP_V0,
    0xC: Operation.RND,
    0xD: Operation.DRW,
}

_SYSTEM = {0x00E0: Operation.CLS, 0x00EE: Operation.RET}

_ALU = {
    0x0: Operation.LD_REG,
    0x1: Operation.OR,
    0x2: Operation.AND,
    0x3: Operation.XOR,
    0x4: Operation.ADD_REG,
    0x5: Operation.SUB,
    0x6: Operation.SHR,
    0x7: Operation.SUBN,
    0xE: Operation.SHL,
}

_KEY = {0x9E: Operation.SKP, 0xA1: Operation.SKNP}

_MISC = {
    0x07: Operation.LD_VX_DT,
    0x0A: Operation.LD_VX_K,
    0x15: Operation.LD_DT_VX,
    0x18: Operation.LD_ST_VX,
    0x1E: Operation.ADD_I,
    0x29: Operation.LD_F,
    0x33: Operation.LD_B,
    0x55: Operation.LD_MEM_VX,
    0x65: Operation.LD_VX_MEM,
}

_MNEMONICS = {
    Operation.NOP: "NOP",
    Operation.CLS: "CLS",
    Operation.RET: "RET",
    Operation.JP: "JP 0x{nnn:03X}",
    Operation.CALL: "CALL 0x{nnn:03X}",
    Operation.SE_IMM: "SE V{x:X}, 0x{nn:02X}",
    Operation.SNE_IMM: "SNE V{x:X}, 0x{nn:02X}",
    Operation.SE_REG: "SE V{x:X}, V{y:X}",
    Operation.LD_IMM: "LD V{x:X}, 0x{nn:02X}",
    Operation.ADD_IMM: "ADD V{x:X}, 0x{nn:02X}",
    Operation.LD_REG: "LD V{x:X}, V{y:X}",
    Operation.OR: "OR V{x:X}, V{y:X}",
    Operation.AND: "AND V{x:X}, V{y:X}",
    Operation.XOR: "XOR V{x:X}, V{y:X}",
    Operation.ADD_REG: "ADD V{x:X}, V{y:X}",
    Operation.SUB: "SUB V{x:X}, V{y:X}",
    Operation.SHR: "SHR V{x:X}",
    Operation.SUBN: "SUBN V{x:X}, V{y:X}",
    Operation.SHL: "SHL V{x:X}",
    Operation.SNE_REG: "SNE V{x:X}, V{y:X}",
    Operation.LD_I: "LD I, 0x{nnn:03X}",
    Operation.JP_V0: "JP V0, 0x{nnn:03X}",
    Operation.RND: "RND V{x:X}, 0x{nn:02X}",
    Operation.DRW: "DRW V{x:X}, V{y:X}, {n}",
    Operation.SKP: "SKP V{x:X}",
    Operation.SKNP: "SKNP V{x:X}",
    Operation.LD_VX_DT: "LD V{x:X}, DT",
    Operation.LD_VX_K: "LD V{x:X}, K",
    Operation.LD_DT_VX: "LD DT, V{x:X}",
    Operation.LD_ST_VX: "LD ST, V{x:X}",
    Operation.ADD_I: "ADD I, V{x:X}",
    Operation.LD_F: "LD F, V{x:X}",
    Operation.LD_B: "LD B, V{x:X}",
    Operation.LD_MEM_VX: "LD [I], V{x:X}",
    Operation.LD_VX_MEM: "LD V{x:X}, [I]",
}


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)
    operation: Optional[Operation] = None  # None when undefined


def _classify(instruction: int, opcode: int, n: int, nn: int) -> Optional[Operation]:
    if instruction == 0:
        return Operation.NOP
    if opcode == 0x0:
        return _SYSTEM.get(instruction)
    if opcode == 0x5:
        return Operation.SE_REG if n == 0 else None
    if opcode == 0x8:
        return _ALU.get(n)
    if opcode == 0x9:
        return Operation.SNE_REG if n == 0 else None
    if opcode == 0xE:
        return _KEY.get(nn)
    if opcode == 0xF:
        return _MISC.get(nn)
    return _DIRECT[opcode]


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    instruction = int(instruction) & 0xFFFF
    opcode = (instruction & 0xF000) >> 12
    n = instruction & 0x000F
    nn = instruction & 0x00FF
    return DecodedInstruction(
        raw=instruction,
        opcode=opcode,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=n,
        nn=nn,
        nnn=instruction & 0x0FFF,
        operation=_classify(instruction, opcode, n, nn),
    )


def disassemble(instruction: int) -> str:
    """Render an instruction word as an assembler mnemonic."""
    decoded = decode(instruction)
    if decoded.operation is None:
        return f"??? 0x{decoded.raw:04X}"
    return _MNEMONICS[decoded.operation].format(
        x=decoded.x, y=decoded.y, n=decoded.n, nn=decoded.nn, nnn=decoded.nnn
    )
