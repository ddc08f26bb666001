"""CHIP-8 memory and register operations."""

import jax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction


def random_byte(key: jax.random.PRNGKey) -> jnp.ndarray:
    """Draw one uniformly distributed byte from ``key``."""
    return jax.random.bits(key, shape=(), dtype=jnp.uint8)


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    return state.replace(V=state.V.at[instruction.x].set(jnp.asarray(instruction.nn, dtype=jnp.uint8)))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX, wrapping. VF is not touched."""
    result = (state.V[instruction.x].astype(jnp.uint16) + instruction.nn) & 0xFF
    return state.replace(V=state.V.at[instruction.x].set(result.astype(jnp.uint8)))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.asarray(instruction.nnn, dtype=jnp.uint16))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = random_byte(subkey) & jnp.asarray(instruction.nn, dtype=jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(random_value), rng=key)
