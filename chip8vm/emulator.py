"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Union

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import Operation, decode, classify
from chip8vm.constants import PROGRAM_START, MAX_PROGRAM_SIZE, ADDRESS_MASK, NUM_KEYS
from chip8vm.errors import ErrorCode, LoadCapacityError
from chip8vm.timers import tick_timers
from chip8vm.instructions.system import execute_clear_screen, execute_return, execute_unknown
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_down, execute_skip_if_key_up
)
from chip8vm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)


HANDLERS = {
    Operation.CLEAR_SCREEN: execute_clear_screen,
    Operation.RETURN: execute_return,
    Operation.JUMP: execute_jump,
    Operation.CALL: execute_call,
    Operation.SKIP_EQ_IMM: execute_skip_if_equal_immediate,
    Operation.SKIP_NE_IMM: execute_skip_if_not_equal_immediate,
    Operation.SKIP_EQ_REG: execute_skip_if_equal_register,
    Operation.SET_IMM: execute_set,
    Operation.ADD_IMM: execute_add,
    Operation.ALU_SET: execute_alu_set,
    Operation.ALU_OR: execute_alu_or,
    Operation.ALU_AND: execute_alu_and,
    Operation.ALU_XOR: execute_alu_xor,
    Operation.ALU_ADD: execute_alu_add,
    Operation.ALU_SUB: execute_alu_sub_xy,
    Operation.ALU_SHR: execute_alu_shift_right,
    Operation.ALU_SUBN: execute_alu_sub_yx,
    Operation.ALU_SHL: execute_alu_shift_left,
    Operation.SKIP_NE_REG: execute_skip_if_not_equal_register,
    Operation.SET_INDEX: execute_set_index,
    Operation.JUMP_OFFSET: execute_jump_with_offset,
    Operation.RANDOM: execute_random,
    Operation.DRAW: execute_display,
    Operation.SKIP_KEY_DOWN: execute_skip_if_key_down,
    Operation.SKIP_KEY_UP: execute_skip_if_key_up,
    Operation.GET_DELAY: execute_get_delay_timer,
    Operation.WAIT_KEY: execute_wait_for_key,
    Operation.SET_DELAY: execute_set_delay_timer,
    Operation.SET_SOUND: execute_set_sound_timer,
    Operation.ADD_INDEX: execute_add_to_index,
    Operation.FONT_CHARACTER: execute_font_character,
    Operation.BCD: execute_bcd_conversion,
    Operation.STORE_REGISTERS: execute_store_registers,
    Operation.LOAD_REGISTERS: execute_load_registers,
    Operation.UNKNOWN: execute_unknown,
}

# Branch order of jax.lax.switch follows the Operation values
_BRANCHES = [HANDLERS[operation] for operation in Operation]


@jax.jit
def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)
    return jax.lax.switch(classify(decoded_instruction), _BRANCHES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance the program counter."""
    instruction = _pack_u16(
        state.memory[state.pc & ADDRESS_MASK],
        state.memory[(state.pc + 1) & ADDRESS_MASK],
    )
    return state.replace(pc=(state.pc + 2).astype(jnp.uint16)), instruction


def _step(state: EmulatorState) -> EmulatorState:
    state = state.replace(frame_changed=jnp.zeros((), dtype=jnp.bool_))
    state = tick_timers(state)
    state, instruction = fetch(state)
    return execute(state, instruction)


@jax.jit
def cycle(state: EmulatorState) -> EmulatorState:
    """Advance the machine by one timer tick unit and one instruction.

    A machine with a nonzero ``error`` is halted and returned unchanged.
    """
    return jax.lax.cond(state.error == int(ErrorCode.NONE), _step, lambda s: s, state)


@partial(jax.jit, static_argnums=1)
def run_cycles(state: EmulatorState, n: int) -> EmulatorState:
    """Run ``n`` cycles in a single compiled loop."""
    state, _ = jax.lax.scan(lambda s, _: (cycle(s), None), state, length=n)
    return state


def load_program(state: EmulatorState, program: Union[bytes, bytearray]) -> EmulatorState:
    """Copy program bytes into memory starting at 0x200."""
    if len(program) > MAX_PROGRAM_SIZE:
        raise LoadCapacityError(len(program), MAX_PROGRAM_SIZE)
    rom_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data from a file into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)


def _check_key(key: int) -> int:
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key must be in [0, {NUM_KEYS - 1}], got {key}")
    return key


def key_down(state: EmulatorState, key: int) -> EmulatorState:
    """Mark keypad key ``key`` as pressed."""
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(True))


def key_up(state: EmulatorState, key: int) -> EmulatorState:
    """Mark keypad key ``key`` as released."""
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(False))


def frame_buffer(state: EmulatorState) -> jnp.ndarray:
    """Pixel grid as a flat row-major boolean array of SCREEN_WIDTH * SCREEN_HEIGHT cells."""
    return state.display.T.reshape(-1)
