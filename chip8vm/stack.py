"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chip8vm.constants import ADDRESS_MASK, STACK_SIZE
from chip8vm.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack.

    Returns the new stack and an overflow flag. On overflow the stack is unchanged.
    """
    overflow = stack.pointer >= STACK_SIZE
    index = jnp.minimum(stack.pointer, STACK_SIZE - 1)
    masked_address = (address & ADDRESS_MASK).astype(jnp.uint16)
    new_data = jnp.where(overflow, stack.data, stack.data.at[index].set(masked_address))
    new_pointer = jnp.where(overflow, stack.pointer, stack.pointer + 1).astype(jnp.uint8)
    return stack.replace(data=new_data, pointer=new_pointer), overflow


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack.

    Returns the new stack, the popped address and an underflow flag.
    On underflow the stack is unchanged and the address is meaningless.
    """
    underflow = stack.pointer == 0
    new_pointer = jnp.where(underflow, stack.pointer, stack.pointer - 1).astype(jnp.uint8)
    popped_address = stack.data[new_pointer]
    new_data = jnp.where(underflow, stack.data, stack.data.at[new_pointer].set(0))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address, underflow
