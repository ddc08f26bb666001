"""Delay and sound timer driver.

Timers decay at 60 Hz of declared machine time. Each cycle adds
``TIMER_FREQUENCY`` to ``state.timer_counter``; every whole
``cycles_per_second`` accumulated is one decrement of both timers,
saturating at zero. Over T cycles the timers drop ``floor(T * 60 / R)`` times
for any declared rate R.
"""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.constants import TIMER_FREQUENCY


def _decrement(timer: jnp.ndarray, ticks: jnp.ndarray) -> jnp.ndarray:
    return jnp.maximum(timer.astype(jnp.int32) - ticks, 0).astype(jnp.uint8)


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Advance the timer accumulator by one cycle."""
    counter = state.timer_counter + TIMER_FREQUENCY
    # More than one tick per cycle only when the rate is below 60
    ticks = counter // state.cycles_per_second
    return state.replace(
        delay_timer=_decrement(state.delay_timer, ticks),
        sound_timer=_decrement(state.sound_timer, ticks),
        timer_counter=(counter % state.cycles_per_second).astype(jnp.int32),
    )
