"""CHIP-8 interpreter core.

``Chip8`` owns the machine state and is the only thing that mutates it. The
host drives it by calling :meth:`Chip8.step` at its chosen instruction rate,
feeding input through :meth:`Chip8.set_keypad` and
:meth:`Chip8.report_key_pressed` between steps, and reading the framebuffer
through :meth:`Chip8.display`.
"""

import os
import time
from typing import Any, Callable, Dict, Optional

import jax
import numpy as np

from chip8vm.constants import NUM_KEYS
from chip8vm.emulator import load_program, load_rom, run_cycle
from chip8vm.logging import TraceLogger, format_dump
from chip8vm.state import EmulatorState, create_state


class Chip8:
    """Single-owner CHIP-8 virtual machine.

    Args:
        clock: Monotonic time source in seconds, used for the 60Hz timers.
        seed: Seed for the ``CXNN`` random number generator.
        logger: Logger for loads, halts and traces. A quiet one is created
            when omitted.
        trace: Log every executed instruction at DEBUG level.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.perf_counter,
        seed: int = 0,
        logger: Optional[TraceLogger] = None,
        trace: bool = False,
    ):
        self._clock = clock
        self._seed = seed
        self.logger = logger if logger is not None else TraceLogger(trace=trace, log_level="WARNING")
        self.rom_name: Optional[str] = None
        self._state = self._fresh_state()

    def _fresh_state(self) -> EmulatorState:
        return create_state(jax.random.PRNGKey(self._seed), now=self._clock())

    @property
    def state(self) -> EmulatorState:
        """Current machine state (immutable)."""
        return self._state

    def reset(self):
        """Zero the machine, reinstall the font and restart at 0x200."""
        self._state = self._fresh_state()

    def load(self, program: bytes):
        """Reset, then place ``program`` at 0x200."""
        self.reset()
        self._state = load_program(self._state, program)
        self.logger.log_load(self._state.program_length, self.rom_name)

    def load_file(self, filename: str):
        """Read a ROM file from disk and load it."""
        program = load_rom(filename)
        self.rom_name = os.path.basename(filename)
        self.load(program)

    def step(self):
        """Run one cycle.

        Raises:
            InvalidOpcodeError: The word at pc is not a defined instruction.
            StackOverflowError: A call was made with 16 frames on the stack.
            StackUnderflowError: A return was made with an empty stack.
        """
        state = self._state
        pc = int(state.pc)
        new_state, instruction = run_cycle(state, self._clock())
        self._state = new_state
        if instruction is not None:
            self.logger.log_instruction(pc, instruction)
        if state.running and not new_state.running:
            self.logger.log_halt(int(new_state.pc))

    def set_keypad(self, index: int, pressed: bool):
        """Record whether pad key ``index`` is held down."""
        _check_key(index)
        self._state = self._state.replace(keypad=self._state.keypad.at[index].set(bool(pressed)))

    def report_key_pressed(self, index: Optional[int]):
        """Report a key press for the next step to consume, or ``None`` for no key."""
        if index is not None:
            _check_key(index)
        self._state = self._state.replace(pending_key=index)

    def display(self) -> np.ndarray:
        """Copy of the framebuffer as a (64, 32) boolean array indexed [x, y]."""
        return np.array(self._state.display, dtype=np.bool_)

    def is_running(self) -> bool:
        return self._state.running

    def is_waiting_for_key(self) -> bool:
        return self._state.key_wait is not None

    def sound_active(self) -> bool:
        """True while the sound timer is non-zero and a tone should play."""
        return int(self._state.sound_timer) > 0

    def dump(self) -> Dict[str, Any]:
        """Snapshot of registers, timers, pc, I and stack for debugging."""
        state = self._state
        pointer = int(state.stack.pointer)
        return {
            "pc": int(state.pc),
            "I": int(state.I),
            "V": [int(v) for v in state.V],
            "sp": pointer,
            "stack": [int(a) for a in state.stack.data[:pointer]],
            "delay_timer": int(state.delay_timer),
            "sound_timer": int(state.sound_timer),
            "key_wait": state.key_wait,
            "running": state.running,
        }

    def format_dump(self) -> str:
        return format_dump(self.dump())


def _check_key(index: int):
    if not 0 <= index < NUM_KEYS:
        raise ValueError(f"Key index must be in [0, {NUM_KEYS}), got {index}")
