"""CHIP-8 system instructions (0x0xxx) and fault reporting."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.errors import ErrorCode
from chip8vm.stack import pop


def record_fault(
    state: EmulatorState,
    instruction: DecodedInstruction,
    code: ErrorCode,
    condition=True,
) -> EmulatorState:
    """Set the error status to ``code`` where ``condition`` holds."""
    return state.replace(
        error=jnp.where(condition, jnp.uint8(int(code)), state.error),
        error_instruction=jnp.where(
            condition, jnp.asarray(instruction.raw, dtype=jnp.uint16), state.error_instruction
        ),
    )


def execute_unknown(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Any word that matches no instruction halts the machine."""
    return record_fault(state, instruction, ErrorCode.UNKNOWN_INSTRUCTION)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(
        display=jnp.zeros_like(state.display),
        frame_changed=jnp.ones((), dtype=jnp.bool_),
    )


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address, underflow = pop(state.stack)
    state = state.replace(stack=stack, pc=jnp.where(underflow, state.pc, address).astype(jnp.uint16))
    return record_fault(state, instruction, ErrorCode.STACK_UNDERFLOW, underflow)
