"""Tests for control flow instructions."""

import pytest
from chip8vm import execute, tick, load_program, STATUS_UNKNOWN_OPCODE
from conftest import set_registers


class TestJump:
    """Test jump instructions."""

    def test_execute_jump(self, fresh_state):
        """1NNN - Jump to address."""
        state = execute(fresh_state, 0x1208)
        assert state.pc == 0x208

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump to NNN + V0."""
        state = execute(fresh_state, 0x6010)  # V0 = 0x10
        state = execute(state, 0xB250)
        assert state.pc == 0x260

    def test_jump_with_offset_ignores_other_registers(self, fresh_state):
        state = set_registers(fresh_state, V0=0x10, V2=0x30)
        state = execute(state, 0xB250)
        assert state.pc == 0x260

    def test_jump_with_offset_wraps_to_address_space(self, fresh_state):
        state = set_registers(fresh_state, V0=0x02)
        state = execute(state, 0xBFFF)
        assert state.pc == 0x001


class TestSkipInstructions:
    """Test all skip instruction variants."""

    def test_skip_if_equal_immediate_true(self, fresh_state):
        """3XNN - Should skip when VX == NN."""
        state = set_registers(fresh_state, V5=0x42)
        initial_pc = state.pc

        state = execute(state, 0x3542)
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_immediate_false(self, fresh_state):
        """3XNN - Should not skip when VX != NN."""
        state = set_registers(fresh_state, V5=0x41)
        initial_pc = state.pc

        state = execute(state, 0x3542)
        assert state.pc == initial_pc

    def test_skip_if_not_equal_immediate_true(self, fresh_state):
        """4XNN - Should skip when VX != NN."""
        state = set_registers(fresh_state, V3=0x10)
        initial_pc = state.pc

        state = execute(state, 0x4320)
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_immediate_false(self, fresh_state):
        """4XNN - Should not skip when VX == NN."""
        state = set_registers(fresh_state, V3=0x20)
        initial_pc = state.pc

        state = execute(state, 0x4320)
        assert state.pc == initial_pc

    def test_skip_if_equal_register_true(self, fresh_state):
        """5XY0 - Should skip when VX == VY."""
        state = set_registers(fresh_state, V1=0x55, V2=0x55)
        initial_pc = state.pc

        state = execute(state, 0x5120)
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_register_false(self, fresh_state):
        """5XY0 - Should not skip when VX != VY."""
        state = set_registers(fresh_state, V1=0x55, V2=0x44)
        initial_pc = state.pc

        state = execute(state, 0x5120)
        assert state.pc == initial_pc

    def test_skip_if_not_equal_register_true(self, fresh_state):
        """9XY0 - Should skip when VX != VY."""
        state = set_registers(fresh_state, V7=0xAA, V8=0xBB)
        initial_pc = state.pc

        state = execute(state, 0x9780)
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_register_false(self, fresh_state):
        """9XY0 - Should not skip when VX == VY."""
        state = set_registers(fresh_state, V7=0xCC, V8=0xCC)
        initial_pc = state.pc

        state = execute(state, 0x9780)
        assert state.pc == initial_pc

    @pytest.mark.parametrize("instruction,registers,expected_pc", [
        (0x3AFF, {"VA": 0xFF}, 0x204),
        (0x3AFF, {"VA": 0xF0}, 0x202),
        (0x4AFF, {"VA": 0xF0}, 0x204),
        (0x4AFF, {"VA": 0xFF}, 0x202),
        (0x5AB0, {"VA": 0xF0, "VB": 0xF0}, 0x204),
        (0x5AB0, {"VA": 0x0F, "VB": 0xF0}, 0x202),
        (0x9AB0, {"VA": 0x0F, "VB": 0xF0}, 0x204),
        (0x9AB0, {"VA": 0xF0, "VB": 0xF0}, 0x202),
    ])
    def test_skip_relative_to_fetch(self, fresh_state, instruction, registers, expected_pc):
        """A tick moves pc by 4 on a match and by 2 otherwise."""
        state = load_program(set_registers(fresh_state, **registers), [instruction])

        state = tick(state)

        assert state.pc == expected_pc


class TestKeySkips:
    """Test EX9E/EXA1 against the supplied keypress."""

    def test_skip_if_key_pressed(self, fresh_state):
        """EX9E - Skip when the pressed key equals VX."""
        state = load_program(set_registers(fresh_state, V1=0x7), [0xE19E])
        state = tick(state, 0x7)
        assert state.pc == 0x204

    def test_no_skip_if_other_key_pressed(self, fresh_state):
        state = load_program(set_registers(fresh_state, V1=0x7), [0xE19E])
        state = tick(state, 0x3)
        assert state.pc == 0x202

    def test_no_skip_if_no_key_pressed(self, fresh_state):
        state = load_program(set_registers(fresh_state, V1=0x0), [0xE19E])
        state = tick(state)
        assert state.pc == 0x202

    def test_skip_if_key_not_pressed(self, fresh_state):
        """EXA1 - Skip when the pressed key differs from VX."""
        state = load_program(set_registers(fresh_state, V1=0x7), [0xE1A1])
        state = tick(state, 0x3)
        assert state.pc == 0x204

    def test_skip_if_key_not_pressed_without_key(self, fresh_state):
        """EXA1 - No key pressed counts as not pressed."""
        state = load_program(set_registers(fresh_state, V1=0x0), [0xE1A1])
        state = tick(state)
        assert state.pc == 0x204

    def test_no_skip_if_key_not_pressed_matches(self, fresh_state):
        state = load_program(set_registers(fresh_state, V1=0x7), [0xE1A1])
        state = tick(state, 0x7)
        assert state.pc == 0x202

    def test_undefined_key_instruction(self, fresh_state):
        state = load_program(fresh_state, [0xE1FF])
        state = tick(state, 0x1)
        assert state.pc == 0x202
        assert state.status == STATUS_UNKNOWN_OPCODE
