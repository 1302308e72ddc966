"""CHIP-8 instruction decoding."""

from chex import dataclass

from chip8vm.constants import FLAG_REGISTER


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    code: int    # Full 16-bit word
    family: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        code=instruction,
        family=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


UNKNOWN_MNEMONIC = "????"

DESCRIPTIONS = {
    "00E0": "Clears the screen.",
    "00EE": "Returns from a subroutine.",
    "0NNN": "Calls machine code routine at NNN (ignored).",
    "1NNN": "Jumps to address NNN.",
    "2NNN": "Calls subroutine at NNN.",
    "3XNN": "Skips the next instruction if VX equals NN.",
    "4XNN": "Skips the next instruction if VX does not equal NN.",
    "5XY0": "Skips the next instruction if VX equals VY.",
    "6XNN": "Sets VX to NN.",
    "7XNN": "Adds NN to VX (carry flag unchanged).",
    "8XY0": "Sets VX to VY.",
    "8XY1": "Sets VX to VX or VY.",
    "8XY2": "Sets VX to VX and VY.",
    "8XY3": "Sets VX to VX xor VY.",
    "8XY4": "Adds VY to VX, VF is the carry.",
    "8XY5": "Subtracts VY from VX, VF is 0 on borrow.",
    "8XY6": "Shifts VX right by one, VF is the bit shifted out.",
    "8XY7": "Sets VX to VY minus VX, VF is 0 on borrow.",
    "8XYE": "Shifts VX left by one, VF is the bit shifted out.",
    "9XY0": "Skips the next instruction if VX does not equal VY.",
    "ANNN": "Sets I to NNN.",
    "BNNN": "Jumps to NNN plus V0.",
    "CXNN": "Sets VX to a random byte and NN.",
    "DXYN": "Draws an 8xN sprite from I at (VX, VY), VF is the collision.",
    "EX9E": "Skips the next instruction if the key in VX is pressed.",
    "EXA1": "Skips the next instruction if the key in VX is not pressed.",
    "FX07": "Sets VX to the delay timer.",
    "FX0A": "Waits for a key press and stores it in VX.",
    "FX15": "Sets the delay timer to VX.",
    "FX18": "Sets the sound timer to VX.",
    "FX1E": "Adds VX to I (VF unchanged).",
    "FX29": "Sets I to the font glyph for the digit in VX.",
    "FX33": "Stores the BCD digits of VX at I, I+1, I+2.",
    "FX55": "Stores V0 through VX in memory starting at I.",
    "FX65": "Loads V0 through VX from memory starting at I.",
}

_ALU_MNEMONICS = {0x0: "8XY0", 0x1: "8XY1", 0x2: "8XY2", 0x3: "8XY3", 0x4: "8XY4",
                  0x5: "8XY5", 0x6: "8XY6", 0x7: "8XY7", 0xE: "8XYE"}
_KEY_MNEMONICS = {0x9E: "EX9E", 0xA1: "EXA1"}
_MISC_MNEMONICS = {0x07: "FX07", 0x0A: "FX0A", 0x15: "FX15", 0x18: "FX18", 0x1E: "FX1E",
                   0x29: "FX29", 0x33: "FX33", 0x55: "FX55", 0x65: "FX65"}
_SIMPLE_MNEMONICS = {0x1: "1NNN", 0x2: "2NNN", 0x3: "3XNN", 0x4: "4XNN", 0x5: "5XY0", 0x6: "6XNN",
                     0x7: "7XNN", 0x9: "9XY0", 0xA: "ANNN", 0xB: "BNNN", 0xC: "CXNN", 0xD: "DXYN"}


def mnemonic(instruction: int) -> str:
    """Return the opcode pattern (e.g. ``"8XY4"``) of a concrete instruction word."""
    instruction = int(instruction)
    family = instruction >> 12
    if family == 0x0:
        if instruction == 0x00E0:
            return "00E0"
        if instruction == 0x00EE:
            return "00EE"
        return "0NNN"
    if family == 0x8:
        return _ALU_MNEMONICS.get(instruction & 0xF, UNKNOWN_MNEMONIC)
    if family == 0xE:
        return _KEY_MNEMONICS.get(instruction & 0xFF, UNKNOWN_MNEMONIC)
    if family == 0xF:
        return _MISC_MNEMONICS.get(instruction & 0xFF, UNKNOWN_MNEMONIC)
    return _SIMPLE_MNEMONICS[family]


def describe(instruction: int) -> str:
    """Human-readable description of an instruction word."""
    return DESCRIPTIONS.get(mnemonic(instruction), "Unknown opcode.")


def register_access(instruction: int) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Registers read and written by an instruction.

    Diagnostic aid only; VF is listed as written by every instruction that
    may overwrite the flag, whether or not the flag value changes.
    """
    instruction = int(instruction)
    op = mnemonic(instruction)
    x = (instruction & 0x0F00) >> 8
    y = (instruction & 0x00F0) >> 4
    flag = (FLAG_REGISTER,)

    if op in ("3XNN", "4XNN", "EX9E", "EXA1", "FX15", "FX18", "FX1E", "FX29", "FX33"):
        return (x,), ()
    if op in ("5XY0", "9XY0"):
        return (x, y), ()
    if op in ("6XNN", "CXNN", "FX07", "FX0A"):
        return (), (x,)
    if op == "7XNN":
        return (x,), (x,)
    if op == "8XY0":
        return (y,), (x,)
    if op in ("8XY1", "8XY2", "8XY3"):
        return (x, y), (x,)
    if op in ("8XY4", "8XY5", "8XY7"):
        return (x, y), (x,) + flag
    if op in ("8XY6", "8XYE"):
        return (x,), (x,) + flag
    if op == "BNNN":
        return (0,), ()
    if op == "DXYN":
        return (x, y), flag
    if op == "FX55":
        return tuple(range(x + 1)), ()
    if op == "FX65":
        return (), tuple(range(x + 1))
    return (), ()
