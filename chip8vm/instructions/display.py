"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, ADDRESS_MASK, FLAG_REGISTER

# Pre-computed row-major coordinate grids for display operations
yy, xx = jnp.meshgrid(jnp.arange(SCREEN_HEIGHT), jnp.arange(SCREEN_WIDTH), indexing='ij')


def sprite_mask(memory: jnp.ndarray, index: jnp.ndarray, x: jnp.ndarray, y: jnp.ndarray,
                height: jnp.ndarray) -> jnp.ndarray:
    """Boolean screen-sized mask of the set bits of a sprite placed at (x, y).

    Rows past the bottom edge and columns past the right edge are dropped.
    """
    sprite_x = jnp.astype(x, jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(y, jnp.int32) % SCREEN_HEIGHT

    in_sprite = (xx >= sprite_x) & (xx < sprite_x + SPRITE_WIDTH) & (yy >= sprite_y) & (yy < sprite_y + height)

    row_offset = yy - sprite_y
    col_offset = jnp.clip(xx - sprite_x, 0, SPRITE_WIDTH - 1)
    sprite_bytes = memory[(jnp.astype(index, jnp.int32) + row_offset) & ADDRESS_MASK]
    bits = (sprite_bytes >> (SPRITE_WIDTH - 1 - col_offset)) & 1
    return jnp.astype(bits, jnp.bool_) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N."""
    sprite = sprite_mask(state.memory, state.I, state.V[instruction.x], state.V[instruction.y], instruction.n)
    collision = jnp.any(state.display & sprite)

    return state.replace(
        display=state.display ^ sprite,
        redraw=jnp.ones((), dtype=jnp.bool_),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
