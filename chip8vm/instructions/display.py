"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, ADDRESS_MASK, FLAG_REGISTER

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Sprites clip at the right and bottom edges. VF is set to 1 when any
    toggled pixel was already lit, 0 otherwise.
    """
    sprite_x = (state.V[instruction.x] % SCREEN_WIDTH).astype(jnp.int32)
    sprite_y = (state.V[instruction.y] % SCREEN_HEIGHT).astype(jnp.int32)
    height = jnp.asarray(instruction.n, dtype=jnp.int32)

    in_sprite = (
        (xx >= sprite_x) & (xx < sprite_x + SPRITE_WIDTH)
        & (yy >= sprite_y) & (yy < sprite_y + height)
    )

    row_offset = yy - sprite_y
    col_offset = jnp.clip(xx - sprite_x, 0, SPRITE_WIDTH - 1)
    addresses = (state.I.astype(jnp.int32) + row_offset) & ADDRESS_MASK
    sprite_bytes = state.memory[addresses].astype(jnp.int32)
    sprite = (((sprite_bytes >> (SPRITE_WIDTH - 1 - col_offset)) & 1) == 1) & in_sprite

    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(collision.astype(jnp.uint8)),
        frame_changed=jnp.ones((), dtype=jnp.bool_),
    )
