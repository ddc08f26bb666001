"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8vm.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE,
    MEMORY_SIZE, NUM_REGISTERS, NUM_KEYS, DEFAULT_CYCLES_PER_SECOND,
)


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    ``display`` is indexed ``[x, y]``; use ``frame_buffer`` for the row-major view.
    ``error`` holds an ``ErrorCode``; a nonzero value halts the machine.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.array(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    frame_changed: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    timer_counter: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    error: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    error_instruction: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    cycles_per_second: int = field(pytree_node=False, default=DEFAULT_CYCLES_PER_SECOND)


def create_state(
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
    cycles_per_second: int = DEFAULT_CYCLES_PER_SECOND,
) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    if cycles_per_second <= 0:
        raise ValueError(f"cycles_per_second must be positive, got {cycles_per_second}")
    state = EmulatorState(rng, cycles_per_second=cycles_per_second)
    return state.replace(
        memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA),
    )
