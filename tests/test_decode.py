"""Tests for instruction decoding and mnemonics."""

import pytest
from chip8vm import decode, mnemonic, describe, register_access


def test_decode_fields():
    instruction = decode(0xD12A)
    assert instruction.code == 0xD12A
    assert instruction.family == 0xD
    assert instruction.x == 0x1
    assert instruction.y == 0x2
    assert instruction.n == 0xA
    assert instruction.nn == 0x2A
    assert instruction.nnn == 0x12A


@pytest.mark.parametrize("word,expected", [
    (0x00E0, "00E0"),
    (0x00EE, "00EE"),
    (0x0123, "0NNN"),
    (0x1ABC, "1NNN"),
    (0x5120, "5XY0"),
    (0x8AB4, "8XY4"),
    (0x8ABE, "8XYE"),
    (0x8AB9, "????"),
    (0xE29E, "EX9E"),
    (0xE2A1, "EXA1"),
    (0xE200, "????"),
    (0xF30A, "FX0A"),
    (0xF365, "FX65"),
    (0xF3FF, "????"),
])
def test_mnemonic(word, expected):
    assert mnemonic(word) == expected


def test_describe_unknown():
    assert describe(0xF3FF) == "Unknown opcode."
    assert describe(0x6A45) == "Sets VX to NN."


@pytest.mark.parametrize("word,reads,writes", [
    (0x6A45, (), (0xA,)),
    (0x7A02, (0xA,), (0xA,)),
    (0x8AB0, (0xB,), (0xA,)),
    (0x8AB4, (0xA, 0xB), (0xA, 0xF)),
    (0xD123, (0x1, 0x2), (0xF,)),
    (0xF255, (0, 1, 2), ()),
    (0xF265, (), (0, 1, 2)),
    (0x1200, (), ()),
])
def test_register_access(word, reads, writes):
    assert register_access(word) == (reads, writes)
