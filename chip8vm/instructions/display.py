"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_mask(memory: jnp.ndarray, address: int, x: int, y: int, height: int) -> jnp.ndarray:
    """Boolean screen-sized mask of the sprite bits landing at origin (x, y).

    Rows and columns past the screen edge are dropped.
    """
    in_sprite = (xx >= x) & (xx < x + 8) & (yy >= y) & (yy < y + height)

    row_offset = jnp.clip(yy - y, 0, 15)
    col_offset = jnp.clip(xx - x, 0, 7)
    sprite_bytes = memory[address + row_offset]
    return (((sprite_bytes >> (7 - col_offset)) & 1) == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    # The origin wraps onto the screen, the sprite itself is clipped.
    sprite_x = int(state.V[instruction.x]) % SCREEN_WIDTH
    sprite_y = int(state.V[instruction.y]) % SCREEN_HEIGHT

    sprite = sprite_mask(state.memory, int(state.I), sprite_x, sprite_y, instruction.n)
    collision = jnp.any(state.display & sprite)

    return state.replace(display=state.display ^ sprite).set_flag(collision).advance()
