"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Iterable, Optional

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import decode
from chip8vm.constants import (
    PROGRAM_START, MEMORY_SIZE, ADDRESS_MASK, NUM_KEYS, NO_KEY, STATUS_EXECUTED,
)
from chip8vm.errors import RomTooLarge
from chip8vm.instructions.system import execute_system_instruction
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import execute_misc_instruction
from chip8vm.logging import scan_with_progress


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    ``pc`` is expected to already point past ``instruction``.
    """
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.family,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory."""
    address = jnp.astype(state.pc, jnp.int32) & ADDRESS_MASK
    instruction = _pack_u16(state.memory[address], state.memory[(address + 1) & ADDRESS_MASK])
    return state.replace(pc=(state.pc + 2) & ADDRESS_MASK), instruction


def tick(state: EmulatorState, keypress: int = NO_KEY) -> EmulatorState:
    """Run one fetch/decode/execute step.

    ``keypress`` is the currently pressed key (0-15) or ``NO_KEY``; any other
    value is treated as ``NO_KEY``. The result code is left in ``state.status``.
    A halted state is returned unchanged.
    """
    key = jnp.astype(keypress, jnp.int32)
    key = jnp.where((key >= 0) & (key < NUM_KEYS), key, NO_KEY)

    def _step(state):
        state = state.replace(
            status=jnp.astype(STATUS_EXECUTED, jnp.uint8),
            keypress=key,
        )
        state, instruction = fetch(state)
        state = state.replace(opcode=instruction)
        return execute(state, instruction)

    return jax.lax.cond(state.halted, lambda state: state, _step, state)


def decay_timers(state: EmulatorState) -> EmulatorState:
    """Count both timers down by one, stopping at zero. Driven at 60 Hz by the host.

    Timers of a halted state are frozen.
    """
    def _decay(timer):
        return jnp.astype(jnp.where((timer > 0) & ~state.halted, timer - 1, timer), jnp.uint8)

    return state.replace(delay_timer=_decay(state.delay_timer), sound_timer=_decay(state.sound_timer))


@partial(jax.jit, static_argnums=2)
def run_frame(state: EmulatorState, keypress: int, instructions_per_frame: int) -> EmulatorState:
    """Execute one 60 Hz frame: several instructions, then one timer decrement."""
    def run_instruction(state, _):
        return tick(state, keypress), None

    state, _ = jax.lax.scan(run_instruction, state, length=instructions_per_frame)
    return decay_timers(state)


def run_instructions(
    state: EmulatorState,
    n: int,
    keypress: int = NO_KEY,
    progress: bool = False,
    desc: Optional[str] = None,
) -> EmulatorState:
    """Execute ``n`` instructions without touching the timers.

    With ``progress`` a tqdm bar follows the jitted loop.
    """
    def run_instruction(state, _):
        return tick(state, keypress), None

    if progress:
        run_instruction = scan_with_progress(n, desc=desc or f"Executing ({n:,} instructions)")(run_instruction)

    @jax.jit
    def _run(state):
        state, _ = jax.lax.scan(run_instruction, state, jnp.arange(n))
        return state

    return _run(state)


def load_rom(state: EmulatorState, rom_data: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    capacity = MEMORY_SIZE - PROGRAM_START
    if len(rom_data) > capacity:
        raise RomTooLarge(len(rom_data), capacity)
    rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom_file(state: EmulatorState, filename: str) -> EmulatorState:
    """Read a ROM file and load it at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_rom(state, rom_data)


def load_program(state: EmulatorState, instructions: Iterable[int]) -> EmulatorState:
    """Write 16-bit instructions big-endian from 0x200."""
    rom_data = b"".join(int(word).to_bytes(2, "big") for word in instructions)
    return load_rom(state, rom_data)
