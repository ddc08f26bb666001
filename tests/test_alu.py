"""Tests for ALU operations (8xxx)."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest
from chip8vm import execute, ErrorCode
from chip8vm.instructions.alu import alu_add, alu_sub_xy, alu_sub_yx, alu_shift_left, alu_shift_right


class TestBasicALU:
    """Test basic ALU operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x42))
        state = state.replace(V=state.V.at[2].set(0x99))

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xF0))
        state = state.replace(V=state.V.at[2].set(0x0F))

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xF0))
        state = state.replace(V=state.V.at[2].set(0xF1))

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_same(self, fresh_state):
        """8XY3 - XOR with same value should be 0."""
        state = fresh_state
        state = state.replace(V=state.V.at[3].set(0xAA))
        state = state.replace(V=state.V.at[4].set(0xAA))

        state = execute(state, 0x8343)  # V3 ^= V4

        assert state.V[3] == 0x00

    @pytest.mark.parametrize("instruction", [0x8120, 0x8121, 0x8122, 0x8123])
    def test_logical_operations_leave_vf(self, fresh_state, instruction):
        """8XY0-8XY3 do not touch VF."""
        state = fresh_state.replace(V=fresh_state.V.at[15].set(0x7E))
        state = execute(state, instruction)
        assert state.V[15] == 0x7E


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - Add without carry."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x10))
        state = state.replace(V=state.V.at[2].set(0x20))

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x30
        assert state.V[15] == 0

    def test_alu_add_with_carry(self, fresh_state):
        """8XY4 - Add with carry."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xFF))
        state = state.replace(V=state.V.at[2].set(0x01))

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x00  # 256 wraps to 0
        assert state.V[15] == 1

    def test_alu_sub_xy_no_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, no borrow."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x30))
        state = state.replace(V=state.V.at[2].set(0x10))

        state = execute(state, 0x8125)  # V1 -= V2

        assert state.V[1] == 0x20
        assert state.V[15] == 1

    def test_alu_sub_xy_with_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, with borrow."""
        state = fresh_state
        state = state.replace(V=state.V.at[3].set(0x10))
        state = state.replace(V=state.V.at[4].set(0x30))

        state = execute(state, 0x8345)  # V3 -= V4

        assert state.V[3] == 0xE0  # 16 - 48 = -32 → 224
        assert state.V[15] == 0

    def test_alu_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, no borrow."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x10))
        state = state.replace(V=state.V.at[2].set(0x30))

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20  # 48 - 16 = 32
        assert state.V[15] == 1

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        """8XY7 - Uses VY - VX, not VY - VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x30))
        state = state.replace(V=state.V.at[2].set(0x10))

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0xE0
        assert state.V[15] == 0

    def test_add_immediate_wraps_without_flag(self, fresh_state):
        """7XNN - Wraps on overflow and leaves VF alone."""
        state = fresh_state.replace(V=fresh_state.V.at[2].set(0xF0))
        state = execute(state, 0x7220)
        assert state.V[2] == 0x10
        assert state.V[15] == 0


class TestALUShifts:
    """Test shift operations."""

    def test_shift_right_even(self, fresh_state):
        """8XY6 - Shift right, even number."""
        state = fresh_state.replace(V=fresh_state.V.at[1].set(0x04))
        state = state.replace(V=state.V.at[2].set(0xFF))  # Should be ignored

        state = execute(state, 0x8126)  # V1 >>= 1

        assert state.V[1] == 0x02
        assert state.V[15] == 0

    def test_shift_right_odd(self, fresh_state):
        """8XY6 - Shift right, odd number."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0x05))

        state = execute(state, 0x8346)  # V3 >>= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1

    def test_shift_left_overflow(self, fresh_state):
        """8XYE - Shift left, with overflow."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0x81))  # 10000001
        state = state.replace(V=state.V.at[4].set(0xFF))  # Should be ignored

        state = execute(state, 0x834E)  # V3 <<= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1


@pytest.fixture(scope="module")
def byte_pairs():
    values = jnp.arange(256, dtype=jnp.uint8)
    a, b = jnp.meshgrid(values, values, indexing='ij')
    return a.ravel(), b.ravel()


class TestALUProperties:
    """Flag behaviour over every pair of byte values."""

    def test_add_carry_all_pairs(self, byte_pairs):
        a, b = byte_pairs
        result, carry = jax.vmap(alu_add)(a, b)
        total = np.asarray(a, dtype=np.int32) + np.asarray(b, dtype=np.int32)
        np.testing.assert_array_equal(np.asarray(result), total & 0xFF)
        np.testing.assert_array_equal(np.asarray(carry), (total > 255).astype(np.uint8))

    def test_sub_borrow_all_pairs(self, byte_pairs):
        a, b = byte_pairs
        result, no_borrow = jax.vmap(alu_sub_xy)(a, b)
        difference = np.asarray(a, dtype=np.int32) - np.asarray(b, dtype=np.int32)
        np.testing.assert_array_equal(np.asarray(result), difference & 0xFF)
        np.testing.assert_array_equal(np.asarray(no_borrow), (difference >= 0).astype(np.uint8))

    def test_reverse_sub_borrow_all_pairs(self, byte_pairs):
        a, b = byte_pairs
        result, no_borrow = jax.vmap(alu_sub_yx)(a, b)
        difference = np.asarray(b, dtype=np.int32) - np.asarray(a, dtype=np.int32)
        np.testing.assert_array_equal(np.asarray(result), difference & 0xFF)
        np.testing.assert_array_equal(np.asarray(no_borrow), (difference >= 0).astype(np.uint8))

    def test_shifts_capture_outgoing_bit(self):
        values = jnp.arange(256, dtype=jnp.uint8)
        as_int = np.arange(256)

        right, low_bit = jax.vmap(alu_shift_right)(values, values)
        np.testing.assert_array_equal(np.asarray(right), as_int >> 1)
        np.testing.assert_array_equal(np.asarray(low_bit), as_int & 1)

        left, high_bit = jax.vmap(alu_shift_left)(values, values)
        np.testing.assert_array_equal(np.asarray(left), (as_int << 1) & 0xFF)
        np.testing.assert_array_equal(np.asarray(high_bit), as_int >> 7)


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    def test_alu_undefined_operations(self, fresh_state):
        """Undefined 8XYN selectors are reported as unknown instructions."""
        for op in [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF]:
            state = fresh_state.replace(V=fresh_state.V.at[1].set(0x42))

            state = execute(state, 0x8120 | op)

            assert state.V[1] == 0x42, f"Undefined op {op:X} changed VX"
            assert int(state.error) == ErrorCode.UNKNOWN_INSTRUCTION, f"Undefined op {op:X} not reported"

    def test_alu_self_operations(self, fresh_state):
        """Test operations where VX and VY are the same register."""
        state = fresh_state.replace(V=fresh_state.V.at[5].set(0xAA))

        state = execute(state, 0x8553)
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        state = state.replace(V=state.V.at[5].set(0x80))
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"

    def test_vf_register_operations(self, fresh_state):
        """Flag overwrites the result when VF is the destination."""
        state = fresh_state
        state = state.replace(V=state.V.at[15].set(0x42))
        state = state.replace(V=state.V.at[1].set(0x10))

        state = execute(state, 0x81F4)  # V1 += VF
        assert state.V[1] == 0x52, "Addition with VF as source failed"
        assert state.V[15] == 0

        state = execute(state, 0x8F14)  # VF += V1
        assert state.V[15] == 0
