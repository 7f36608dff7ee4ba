"""CHIP-8 emulator state structures."""

from typing import Optional

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8vm.constants import (
    MEMORY_SIZE, NUM_REGISTERS, NUM_KEYS, PROGRAM_START, FONT_START, FONT_DATA,
    SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE,
)


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: int = 0


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    Machine registers and memories are arrays. Interpreter bookkeeping
    (halt flag, loaded program length, key wait) is kept as static fields.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    running: bool = field(pytree_node=False, default=True)
    program_length: int = field(pytree_node=False, default=0)
    key_wait: Optional[int] = field(pytree_node=False, default=None)  # register awaiting a key
    pending_key: Optional[int] = field(pytree_node=False, default=None)  # key reported by the host
    last_timer_tick: float = field(pytree_node=False, default=0.0)

    def advance(self, skip: bool = False) -> "EmulatorState":
        """Move pc past the current instruction, and past the next one when skipping."""
        return self.replace(pc=self.pc + (4 if skip else 2))

    def set_flag(self, value) -> "EmulatorState":
        """Write VF."""
        return self.replace(V=self.V.at[0xF].set(value))


def create_state(rng: jax.random.PRNGKey = jax.random.PRNGKey(0), now: float = 0.0) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    state = EmulatorState(rng, last_timer_tick=now)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
