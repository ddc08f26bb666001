"""CHIP-8 instruction decoding.

Decoding happens in two stages: ``decode`` splits the word into operand
fields, then ``classify`` maps the fields to exactly one ``Operation``.
Every word that matches no rule classifies as ``Operation.UNKNOWN``.
"""

import enum

import jax.numpy as jnp
from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


class Operation(enum.IntEnum):
    """Every instruction the machine executes, plus the unknown catch-all."""
    CLEAR_SCREEN = 0          # 00E0
    RETURN = enum.auto()      # 00EE
    JUMP = enum.auto()        # 1NNN
    CALL = enum.auto()        # 2NNN
    SKIP_EQ_IMM = enum.auto()     # 3XNN
    SKIP_NE_IMM = enum.auto()     # 4XNN
    SKIP_EQ_REG = enum.auto()     # 5XY0
    SET_IMM = enum.auto()         # 6XNN
    ADD_IMM = enum.auto()         # 7XNN
    ALU_SET = enum.auto()         # 8XY0
    ALU_OR = enum.auto()          # 8XY1
    ALU_AND = enum.auto()         # 8XY2
    ALU_XOR = enum.auto()         # 8XY3
    ALU_ADD = enum.auto()         # 8XY4
    ALU_SUB = enum.auto()         # 8XY5
    ALU_SHR = enum.auto()         # 8XY6
    ALU_SUBN = enum.auto()        # 8XY7
    ALU_SHL = enum.auto()         # 8XYE
    SKIP_NE_REG = enum.auto()     # 9XY0
    SET_INDEX = enum.auto()       # ANNN
    JUMP_OFFSET = enum.auto()     # BNNN
    RANDOM = enum.auto()          # CXNN
    DRAW = enum.auto()            # DXYN
    SKIP_KEY_DOWN = enum.auto()   # EX9E
    SKIP_KEY_UP = enum.auto()     # EXA1
    GET_DELAY = enum.auto()       # FX07
    WAIT_KEY = enum.auto()        # FX0A
    SET_DELAY = enum.auto()       # FX15
    SET_SOUND = enum.auto()       # FX18
    ADD_INDEX = enum.auto()       # FX1E
    FONT_CHARACTER = enum.auto()  # FX29
    BCD = enum.auto()             # FX33
    STORE_REGISTERS = enum.auto() # FX55
    LOAD_REGISTERS = enum.auto()  # FX65
    UNKNOWN = enum.auto()


def _family(opcode: int, **selectors: int):
    """Build a predicate matching an opcode family and optional field selectors."""
    def predicate(instruction: DecodedInstruction):
        matches = instruction.opcode == opcode
        for name, value in selectors.items():
            matches = matches & (getattr(instruction, name) == value)
        return matches
    return predicate


OPERATION_RULES = (
    (Operation.CLEAR_SCREEN, _family(0x0, nnn=0x0E0)),
    (Operation.RETURN, _family(0x0, nnn=0x0EE)),
    (Operation.JUMP, _family(0x1)),
    (Operation.CALL, _family(0x2)),
    (Operation.SKIP_EQ_IMM, _family(0x3)),
    (Operation.SKIP_NE_IMM, _family(0x4)),
    (Operation.SKIP_EQ_REG, _family(0x5, n=0x0)),
    (Operation.SET_IMM, _family(0x6)),
    (Operation.ADD_IMM, _family(0x7)),
    (Operation.ALU_SET, _family(0x8, n=0x0)),
    (Operation.ALU_OR, _family(0x8, n=0x1)),
    (Operation.ALU_AND, _family(0x8, n=0x2)),
    (Operation.ALU_XOR, _family(0x8, n=0x3)),
    (Operation.ALU_ADD, _family(0x8, n=0x4)),
    (Operation.ALU_SUB, _family(0x8, n=0x5)),
    (Operation.ALU_SHR, _family(0x8, n=0x6)),
    (Operation.ALU_SUBN, _family(0x8, n=0x7)),
    (Operation.ALU_SHL, _family(0x8, n=0xE)),
    (Operation.SKIP_NE_REG, _family(0x9, n=0x0)),
    (Operation.SET_INDEX, _family(0xA)),
    (Operation.JUMP_OFFSET, _family(0xB)),
    (Operation.RANDOM, _family(0xC)),
    (Operation.DRAW, _family(0xD)),
    (Operation.SKIP_KEY_DOWN, _family(0xE, nn=0x9E)),
    (Operation.SKIP_KEY_UP, _family(0xE, nn=0xA1)),
    (Operation.GET_DELAY, _family(0xF, nn=0x07)),
    (Operation.WAIT_KEY, _family(0xF, nn=0x0A)),
    (Operation.SET_DELAY, _family(0xF, nn=0x15)),
    (Operation.SET_SOUND, _family(0xF, nn=0x18)),
    (Operation.ADD_INDEX, _family(0xF, nn=0x1E)),
    (Operation.FONT_CHARACTER, _family(0xF, nn=0x29)),
    (Operation.BCD, _family(0xF, nn=0x33)),
    (Operation.STORE_REGISTERS, _family(0xF, nn=0x55)),
    (Operation.LOAD_REGISTERS, _family(0xF, nn=0x65)),
)


def classify(instruction: DecodedInstruction) -> jnp.ndarray:
    """Map a decoded instruction to its ``Operation`` index."""
    conditions = [jnp.asarray(predicate(instruction), dtype=jnp.bool_) for _, predicate in OPERATION_RULES]
    choices = [int(operation) for operation, _ in OPERATION_RULES]
    return jnp.select(conditions, choices, default=int(Operation.UNKNOWN))
