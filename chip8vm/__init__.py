"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, StackState, create_state
from chip8vm.emulator import (
    execute, fetch, cycle, run_cycles, load_program, load_rom, key_down, key_up, frame_buffer,
)
from chip8vm.decode import DecodedInstruction, Operation, decode, classify
from chip8vm.errors import (
    ErrorCode, Chip8Error, LoadCapacityError, ExecutionError, UnknownInstructionError,
    StackOverflowError, StackUnderflowError, raise_for_error,
)
from chip8vm.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "cycle",
    "run_cycles",
    "load_program",
    "load_rom",
    "key_down",
    "key_up",
    "frame_buffer",
    "DecodedInstruction",
    "Operation",
    "decode",
    "classify",
    "ErrorCode",
    "Chip8Error",
    "LoadCapacityError",
    "ExecutionError",
    "UnknownInstructionError",
    "StackOverflowError",
    "StackUnderflowError",
    "raise_for_error",
    "PROGRAM_START",
    "MAX_PROGRAM_SIZE",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "DEFAULT_CYCLES_PER_SECOND",
]
