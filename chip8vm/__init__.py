"""CHIP-8 virtual machine core."""

from chip8vm.state import EmulatorState, StackState, create_state, reset_state
from chip8vm.emulator import (
    execute, fetch, tick, decay_timers, run_frame, run_instructions,
    load_rom, load_rom_file, load_program,
)
from chip8vm.decode import DecodedInstruction, decode, mnemonic, describe, register_access
from chip8vm.errors import Chip8Error, RomTooLarge, MachineFault, StackOverflow, StackUnderflow
from chip8vm.machine import Machine, TickOutcome
from chip8vm.logging import ConsoleLogger, InstructionObserver, ConsoleObserver, TraceRecorder
from chip8vm.rendering import display_to_rgb, create_color_scheme
from chip8vm.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "reset_state",
    "fetch",
    "execute",
    "tick",
    "decay_timers",
    "run_frame",
    "run_instructions",
    "load_rom",
    "load_rom_file",
    "load_program",
    "DecodedInstruction",
    "decode",
    "mnemonic",
    "describe",
    "register_access",
    "Chip8Error",
    "RomTooLarge",
    "MachineFault",
    "StackOverflow",
    "StackUnderflow",
    "Machine",
    "TickOutcome",
    "ConsoleLogger",
    "InstructionObserver",
    "ConsoleObserver",
    "TraceRecorder",
    "display_to_rgb",
    "create_color_scheme",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STACK_SIZE",
    "NO_KEY",
]
