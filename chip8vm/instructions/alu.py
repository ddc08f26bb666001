"""CHIP-8 ALU operations (8xxx).

Each ``alu_*`` function maps ``(vx, vy)`` to ``(result, flag)``. A ``None``
flag leaves VF untouched. VX is written before VF, so VF holds the flag
even when it is also the destination register.
"""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER


def alu_set(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, None]:
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, None]:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, None]:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, None]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = vx.astype(jnp.uint16) + vy.astype(jnp.uint16)
    carry = (result > 0xFF).astype(jnp.uint8)
    return (result & 0xFF).astype(jnp.uint8), carry


def alu_sub_xy(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when there is no borrow."""
    no_borrow = (vx >= vy).astype(jnp.uint8)
    return (vx - vy).astype(jnp.uint8), no_borrow


def alu_shift_right(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """8XY6 - Shift right: VX >>= 1."""
    shifted_bit = vx & 1
    return vx >> 1, shifted_bit


def alu_sub_yx(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when there is no borrow."""
    no_borrow = (vy >= vx).astype(jnp.uint8)
    return (vy - vx).astype(jnp.uint8), no_borrow


def alu_shift_left(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """8XYE - Shift left: VX <<= 1."""
    shifted_bit = (vx & 0x80) >> 7
    return (vx << 1).astype(jnp.uint8), shifted_bit


def make_alu_instruction(operation):
    """Wrap an ``alu_*`` function into an instruction handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        result, flag = operation(vx, vy)

        new_V = state.V.at[instruction.x].set(result)
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(flag)
        return state.replace(V=new_V)
    alu_instruction.__doc__ = operation.__doc__
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
