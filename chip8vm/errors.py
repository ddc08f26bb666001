"""CHIP-8 fault codes and the exceptions they map to.

Compiled code cannot raise, so the executor records a fault as an
``ErrorCode`` in the emulator state. Hosts convert it with ``raise_for_error``.
"""

import enum


class ErrorCode(enum.IntEnum):
    """Fault status stored in ``EmulatorState.error``."""
    NONE = 0
    UNKNOWN_INSTRUCTION = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3


class Chip8Error(Exception):
    """Base class for every machine fault."""


class LoadCapacityError(Chip8Error):
    """Program does not fit in program space."""

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(f"Program of {size} bytes exceeds the {capacity} bytes of program space")


class ExecutionError(Chip8Error):
    """Fault raised by a single cycle."""

    def __init__(self, message: str, instruction: int, address: int):
        self.instruction = instruction
        self.address = address
        super().__init__(message)


class UnknownInstructionError(ExecutionError):
    pass


class StackOverflowError(ExecutionError):
    pass


class StackUnderflowError(ExecutionError):
    pass


_EXCEPTIONS = {
    ErrorCode.UNKNOWN_INSTRUCTION: (UnknownInstructionError, "Unknown instruction"),
    ErrorCode.STACK_OVERFLOW: (StackOverflowError, "Call stack overflow"),
    ErrorCode.STACK_UNDERFLOW: (StackUnderflowError, "Return with empty call stack"),
}


def raise_for_error(state) -> None:
    """Raise the exception matching ``state.error``, if any."""
    code = ErrorCode(int(state.error))
    if code == ErrorCode.NONE:
        return
    exception_type, description = _EXCEPTIONS[code]
    instruction = int(state.error_instruction)
    # pc was advanced past the faulting instruction during fetch
    address = (int(state.pc) - 2) & 0xFFFF
    raise exception_type(
        f"{description}: 0x{instruction:04X} at 0x{address:03X}",
        instruction=instruction,
        address=address,
    )
