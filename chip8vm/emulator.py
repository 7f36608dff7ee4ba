"""Main CHIP-8 emulator execution engine."""

from typing import Optional

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import Operation, decode
from chip8vm.constants import PROGRAM_START, MAX_ROM_SIZE, LAST_FETCH_ADDRESS, TIMER_PERIOD
from chip8vm.errors import InvalidOpcodeError, RomTooLargeError
from chip8vm.instructions.system import no_op, execute_clear_screen, execute_return
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed,
)
from chip8vm.instructions.alu import ALU_OPERATIONS, execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
)

DISPATCH = {
    Operation.NOP: no_op,
    Operation.CLS: execute_clear_screen,
    Operation.RET: execute_return,
    Operation.JP: execute_jump,
    Operation.CALL: execute_call,
    Operation.SE_IMM: execute_skip_if_equal_immediate,
    Operation.SNE_IMM: execute_skip_if_not_equal_immediate,
    Operation.SE_REG: execute_skip_if_equal_register,
    Operation.LD_IMM: execute_set,
    Operation.ADD_IMM: execute_add,
    **{operation: execute_alu_operation for operation in ALU_OPERATIONS},
    Operation.SNE_REG: execute_skip_if_not_equal_register,
    Operation.LD_I: execute_set_index,
    Operation.JP_V0: execute_jump_with_offset,
    Operation.RND: execute_random,
    Operation.DRW: execute_display,
    Operation.SKP: execute_skip_if_key_pressed,
    Operation.SKNP: execute_skip_if_key_not_pressed,
    Operation.LD_VX_DT: execute_get_delay_timer,
    Operation.LD_VX_K: execute_wait_for_key,
    Operation.LD_DT_VX: execute_set_delay_timer,
    Operation.LD_ST_VX: execute_set_sound_timer,
    Operation.ADD_I: execute_add_to_index,
    Operation.LD_F: execute_font_character,
    Operation.LD_B: execute_bcd_conversion,
    Operation.LD_MEM_VX: execute_store_registers,
    Operation.LD_VX_MEM: execute_load_registers,
}


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)
    handler = DISPATCH.get(decoded_instruction.operation)
    if handler is None:
        raise InvalidOpcodeError(decoded_instruction.raw, int(state.pc))
    return handler(state, decoded_instruction)


def fetch(state: EmulatorState) -> int:
    """Fetch the big-endian instruction word at pc."""
    pc = int(state.pc)
    return (int(state.memory[pc]) << 8) | int(state.memory[pc + 1])


def tick_timers(state: EmulatorState, now: float) -> EmulatorState:
    """Decrement non-zero timers once if a 60Hz period elapsed since the last tick."""
    if now - state.last_timer_tick < TIMER_PERIOD:
        return state
    return state.replace(
        delay_timer=jnp.astype(jnp.maximum(state.delay_timer, 1) - 1, jnp.uint8),
        sound_timer=jnp.astype(jnp.maximum(state.sound_timer, 1) - 1, jnp.uint8),
        last_timer_tick=now,
    )


def resolve_key_wait(state: EmulatorState) -> EmulatorState:
    """Consume the reported key, completing a pending FX0A if there is one."""
    key = state.pending_key
    state = state.replace(pending_key=None)
    if state.key_wait is None or key is None:
        return state
    new_V = state.V.at[state.key_wait].set(key)
    return state.replace(V=new_V, key_wait=None).advance()


def check_termination(state: EmulatorState) -> EmulatorState:
    """Halt once pc runs off memory or past the loaded program."""
    pc = int(state.pc)
    if pc >= LAST_FETCH_ADDRESS or pc >= PROGRAM_START + state.program_length:
        return state.replace(running=False)
    return state


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy program bytes into memory at 0x200 and record their length."""
    program = bytes(program)
    if len(program) > MAX_ROM_SIZE:
        raise RomTooLargeError(len(program), MAX_ROM_SIZE)
    if not program:
        return state.replace(program_length=0)
    rom_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(rom_array)
    return state.replace(memory=new_memory, program_length=len(program))


def load_rom(filename: str) -> bytes:
    """Read ROM data from disk."""
    with open(filename, 'rb') as f:
        return f.read()


def run_cycle(state: EmulatorState, now: float) -> tuple[EmulatorState, Optional[int]]:
    """One fetch-decode-execute cycle. Returns the new state and the executed word, if any.

    While an FX0A wait is pending only the timers run; the cycle in which a
    key arrives completes the wait and executes nothing else.
    """
    if not state.running:
        return state, None
    state = tick_timers(state, now)

    waiting = state.key_wait is not None
    state = resolve_key_wait(state)
    if waiting:
        return (state if state.key_wait is not None else check_termination(state)), None

    state = check_termination(state)
    if not state.running:
        return state, None
    instruction = fetch(state)
    state = execute(state, instruction)
    return check_termination(state), instruction
