"""Tests for miscellaneous instructions (Fxxx)."""

import pytest
import jax.numpy as jnp
from chip8vm import (
    execute, tick, load_program, FONT_DATA, STATUS_AWAITING_KEY, STATUS_EXECUTED,
    STATUS_UNKNOWN_OPCODE,
)
from conftest import set_registers


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        """Test timer set and get operations."""
        state = execute(fresh_state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # Set delay timer to V0
        assert state.delay_timer == 48

        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # Set sound timer to V1
        assert state.sound_timer == 32

        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48

    def test_timers_not_decremented_by_ticks(self, fresh_state):
        """Instruction execution alone never moves the timers."""
        state = load_program(set_registers(fresh_state, VA=57), [0xFA15, 0x6000, 0x6000])
        state = tick(tick(tick(state)))
        assert state.delay_timer == 57


class TestIndex:

    def test_add_to_index(self, fresh_state):
        """FX1E - I += VX, VF unaffected."""
        state = set_registers(fresh_state, V3=0x10, VF=0x5A)
        state = execute(state, 0xA200)
        state = execute(state, 0xF31E)
        assert state.I == 0x210
        assert state.V[15] == 0x5A

    def test_add_to_index_wraps_to_address_space(self, fresh_state):
        state = set_registers(fresh_state, V3=0x02)
        state = execute(state, 0xAFFF)
        state = execute(state, 0xF31E)
        assert state.I == 0x001
        assert state.V[15] == 0

    @pytest.mark.parametrize("digit", [0x0, 0x7, 0xE, 0xF])
    def test_font_character(self, fresh_state, digit):
        """FX29 - I points at the glyph for VX."""
        state = set_registers(fresh_state, VA=digit)
        state = execute(state, 0xFA29)
        assert state.I == digit * 5
        assert jnp.array_equal(state.memory[digit * 5:digit * 5 + 5], FONT_DATA[digit * 5:digit * 5 + 5])


class TestBCD:
    """Test BCD conversion."""

    def test_misc_bcd_conversion(self, fresh_state):
        state = execute(fresh_state, 0x609D)  # V0 = 157
        state = execute(state, 0xA300)
        state = execute(state, 0xF033)

        assert state.memory[0x300] == 1
        assert state.memory[0x301] == 5
        assert state.memory[0x302] == 7

    @pytest.mark.parametrize("value,digits", [(0, (0, 0, 0)), (9, (0, 0, 9)), (40, (0, 4, 0)), (255, (2, 5, 5))])
    def test_bcd_edge_cases(self, fresh_state, value, digits):
        state = set_registers(fresh_state, V4=value)
        state = execute(state, 0xA400)
        state = execute(state, 0xF433)

        assert tuple(int(d) for d in state.memory[0x400:0x403]) == digits
        assert state.I == 0x400


class TestRegisterBlock:
    """Test FX55/FX65."""

    def test_store_registers(self, fresh_state):
        """FX55 - V0..VX inclusive, I unchanged."""
        state = set_registers(fresh_state, V0=1, V1=2, V2=3, V3=4)
        state = execute(state, 0xA300)
        state = execute(state, 0xF255)

        assert tuple(int(b) for b in state.memory[0x300:0x304]) == (1, 2, 3, 0)
        assert state.I == 0x300

    def test_load_registers(self, fresh_state):
        """FX65 - V0..VX inclusive, I unchanged."""
        state = fresh_state.replace(memory=fresh_state.memory.at[:].set(0xAA))
        state = execute(state, 0xA300)
        state = execute(state, 0xF265)

        assert state.V[0] == 0xAA
        assert state.V[1] == 0xAA
        assert state.V[2] == 0xAA
        assert state.V[3] == 0
        assert state.I == 0x300

    def test_store_then_load_all_registers(self, fresh_state):
        state = fresh_state.replace(V=jnp.arange(16, dtype=jnp.uint8) * 3)
        state = execute(state, 0xA500)
        state = execute(state, 0xFF55)
        state = state.replace(V=jnp.zeros(16, dtype=jnp.uint8))
        state = execute(state, 0xFF65)

        assert jnp.array_equal(state.V, jnp.arange(16, dtype=jnp.uint8) * 3)


class TestWaitForKey:
    """FX0A suspends progress until a key is supplied."""

    def test_waits_without_key(self, fresh_state):
        state = load_program(fresh_state, [0xF30A])

        state = tick(state)

        assert state.pc == 0x200
        assert state.awaiting_key
        assert state.status == STATUS_AWAITING_KEY

    def test_keeps_waiting_across_ticks(self, fresh_state):
        state = load_program(fresh_state, [0xF30A])

        state = tick(tick(tick(state)))

        assert state.pc == 0x200
        assert state.awaiting_key

    def test_stores_key_when_pressed(self, fresh_state):
        state = load_program(fresh_state, [0xF30A])
        state = tick(state)

        state = tick(state, 0xB)

        assert state.pc == 0x202
        assert state.V[3] == 0xB
        assert not state.awaiting_key
        assert state.status == STATUS_EXECUTED


def test_unknown_misc_instruction(fresh_state):
    state = set_registers(fresh_state, V1=0x12)
    new_state = execute(state, 0xF1FF)
    assert new_state.status == STATUS_UNKNOWN_OPCODE
    assert jnp.array_equal(new_state.V, state.V)
