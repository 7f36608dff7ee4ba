"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, create_state
from chip8vm.emulator import execute, fetch, load_rom, load_program, run_cycle
from chip8vm.decode import DecodedInstruction, Operation, decode, disassemble
from chip8vm.errors import (
    Chip8Error, InvalidOpcodeError, StackOverflowError, StackUnderflowError, RomTooLargeError,
)
from chip8vm.interpreter import Chip8
from chip8vm.constants import *

__all__ = [
    "Chip8",
    "EmulatorState",
    "create_state",
    "fetch",
    "execute",
    "run_cycle",
    "load_rom",
    "load_program",
    "DecodedInstruction",
    "Operation",
    "decode",
    "disassemble",
    "Chip8Error",
    "InvalidOpcodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "RomTooLargeError",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
