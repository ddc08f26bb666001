"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state, load_program


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def slow_timer_state():
    """Fresh state declaring 120 cycles per second (timers tick every 2 cycles)."""
    return create_state(cycles_per_second=120)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def write_words(state, address, words):
    """Helper to put big-endian instruction words in memory."""
    data = []
    for word in words:
        data.extend([(word >> 8) & 0xFF, word & 0xFF])
    return setup_sprite_in_memory(state, address, data)


def program_state(words, state=None):
    """Fresh state with ``words`` loaded as the program."""
    data = bytearray()
    for word in words:
        data.extend([(word >> 8) & 0xFF, word & 0xFF])
    return load_program(state if state is not None else create_state(), bytes(data))
