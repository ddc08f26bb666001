"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import ADDRESS_MASK, NUM_KEYS
from chip8vm.errors import ErrorCode
from chip8vm.stack import push
from chip8vm.instructions.system import record_fault


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.asarray(instruction.nnn, dtype=jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    stack, overflow = push(state.stack, state.pc)
    target = jnp.asarray(instruction.nnn, dtype=jnp.uint16)
    state = state.replace(stack=stack, pc=jnp.where(overflow, state.pc, target))
    return record_fault(state, instruction, ErrorCode.STACK_OVERFLOW, overflow)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=(s.pc + 2).astype(jnp.uint16)),
            lambda s: s,
            state
        )
    return skip_instruction


def _key_down(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    return state.keypad[state.V[instruction.x] & (NUM_KEYS - 1)]


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

# EX9E / EXA1 use the low nibble of VX as the key index
execute_skip_if_key_down = make_skip_instruction(_key_down)

execute_skip_if_key_up = make_skip_instruction(
    lambda state, inst: ~_key_down(state, inst)
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = (instruction.nnn + state.V[0].astype(jnp.uint16)) & ADDRESS_MASK
    return state.replace(pc=jnp.asarray(jump_address, dtype=jnp.uint16))
