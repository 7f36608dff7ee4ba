"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy)`` to ``(result, flag)``. ``flag`` is the new
value of VF, or ``None`` when the operation leaves VF untouched.
"""

from typing import Optional

from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction, Operation


def alu_set(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = vx + vy
    return result & 0xFF, int(result > 0xFF)


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    if vx >= vy:
        return vx - vy, 1
    return 256 - (vy - vx), 0


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX = VY >> 1, VF = shifted out bit."""
    return vy >> 1, vy & 1


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    return alu_sub_xy(vy, vx)


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX = VY << 1, VF = shifted out bit."""
    return (vy << 1) & 0xFF, (vy & 0x80) >> 7


ALU_OPERATIONS = {
    Operation.LD_REG: alu_set,
    Operation.OR: alu_or,
    Operation.AND: alu_and,
    Operation.XOR: alu_xor,
    Operation.ADD_REG: alu_add,
    Operation.SUB: alu_sub_xy,
    Operation.SHR: alu_shift_right,
    Operation.SUBN: alu_sub_yx,
    Operation.SHL: alu_shift_left,
}


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    vx = int(state.V[instruction.x])
    vy = int(state.V[instruction.y])

    result, vf = ALU_OPERATIONS[instruction.operation](vx, vy)

    # The flag is written last so it wins when X is F.
    new_V = state.V.at[instruction.x].set(result)
    if vf is not None:
        new_V = new_V.at[0xF].set(vf)
    return state.replace(V=new_V).advance()
