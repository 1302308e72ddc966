"""Host-side CHIP-8 machine.

``Machine`` owns a single ``EmulatorState`` and drives the functional core one
tick at a time. It turns the per-tick status codes into ``TickOutcome`` values
and typed exceptions, notifies instruction observers, and exposes read-only
views of the machine state for frontends and debuggers.
"""

import enum
from typing import Iterable, List, Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
import numpy as np

from chip8vm.constants import (
    NUM_KEYS, NO_KEY, STATUS_EXECUTED, STATUS_AWAITING_KEY, STATUS_UNKNOWN_OPCODE,
    STATUS_MACHINE_CALL, STATUS_STACK_OVERFLOW, STATUS_STACK_UNDERFLOW,
)
from chip8vm.decode import DecodedInstruction, decode, mnemonic, register_access
from chip8vm.emulator import tick, decay_timers, load_rom, load_rom_file, load_program
from chip8vm.errors import MachineFault, StackOverflow, StackUnderflow
from chip8vm.logging import InstructionObserver
from chip8vm.rendering import display_to_rgb, create_color_scheme
from chip8vm.state import EmulatorState, create_state, reset_state


class TickOutcome(enum.IntEnum):
    """Result of executing one instruction."""
    EXECUTED = STATUS_EXECUTED
    AWAITING_KEY = STATUS_AWAITING_KEY
    UNKNOWN_OPCODE = STATUS_UNKNOWN_OPCODE
    MACHINE_CALL = STATUS_MACHINE_CALL


_FAULTS = {
    STATUS_STACK_OVERFLOW: (StackOverflow, "Stack overflow"),
    STATUS_STACK_UNDERFLOW: (StackUnderflow, "Stack underflow"),
}


class Machine:
    """Stateful CHIP-8 machine driven by an external clock.

    Call ``tick`` once per instruction and ``decay_timers`` at 60 Hz, or
    ``run_frame`` once per 60 Hz frame to do both.
    """

    def __init__(
        self,
        seed: int = 0,
        instructions_per_frame: int = 10,
        observers: Optional[Sequence[InstructionObserver]] = None,
        jit: bool = True,
    ):
        """Create a machine with the font loaded and ``pc`` at 0x200.

        Args:
            seed: Seed of the random source used by CXNN
            instructions_per_frame: Instructions executed by ``run_frame`` per timer decrement
            observers: Instruction observers notified after every tick
            jit: Compile the tick function with ``jax.jit``
        """
        if instructions_per_frame < 1:
            raise ValueError("instructions_per_frame must be at least 1")

        self.instructions_per_frame = instructions_per_frame
        self.observers: List[InstructionObserver] = list(observers or [])
        self._tick = jax.jit(tick) if jit else tick
        self._decay_timers = jax.jit(decay_timers) if jit else decay_timers
        self.state: EmulatorState = create_state(jax.random.PRNGKey(seed))
        self.fault: Optional[MachineFault] = None
        self.registers_read: Tuple[int, ...] = ()
        self.registers_written: Tuple[int, ...] = ()

    def add_observer(self, observer: InstructionObserver):
        self.observers.append(observer)

    def reset(self):
        """Restore the power-on state. Loaded ROM data is discarded."""
        self.state = reset_state(self.state)
        self.fault = None
        self.registers_read = ()
        self.registers_written = ()

    def load_rom(self, rom_data: bytes):
        self.state = load_rom(self.state, rom_data)

    def load_rom_file(self, filename: str):
        self.state = load_rom_file(self.state, filename)

    def load_program(self, instructions: Iterable[int]):
        self.state = load_program(self.state, instructions)

    def tick(self, keypress: Optional[int] = None) -> TickOutcome:
        """Execute one instruction.

        Raises:
            StackOverflow, StackUnderflow: the machine halted. Every further
                tick raises the same fault until ``reset``.
        """
        if self.fault is not None:
            raise self.fault

        key = _validate_key(keypress)
        pc = self.pc
        self.state = self._tick(self.state, key)
        status = int(self.state.status)
        opcode = int(self.state.opcode)

        if status in _FAULTS:
            fault_class, message = _FAULTS[status]
            self.fault = fault_class(message, pc, opcode)
            self.registers_read, self.registers_written = (), ()
            for observer in self.observers:
                observer.on_fault(self.fault)
            raise self.fault

        if status == STATUS_EXECUTED:
            self.registers_read, self.registers_written = register_access(opcode)
        else:
            self.registers_read, self.registers_written = (), ()

        op = mnemonic(opcode)
        for observer in self.observers:
            observer.on_instruction(pc, opcode, op)
            if status == STATUS_UNKNOWN_OPCODE:
                observer.on_diagnostic(pc, opcode, f"Unknown opcode {opcode:04X}, skipped")
            elif status == STATUS_MACHINE_CALL:
                observer.on_diagnostic(pc, opcode, f"Machine code routine at 0x{opcode & 0xFFF:03X} ignored")

        return TickOutcome(status)

    def decay_timers(self):
        """Count the delay and sound timers down once. Call at 60 Hz."""
        self.state = self._decay_timers(self.state)

    def run_frame(self, keypress: Optional[int] = None) -> TickOutcome:
        """Execute ``instructions_per_frame`` ticks, then decay the timers once."""
        outcome = TickOutcome.EXECUTED
        for _ in range(self.instructions_per_frame):
            outcome = self.tick(keypress)
        self.decay_timers()
        return outcome

    def clear_redraw(self):
        """Acknowledge that the frontend has drawn the current frame."""
        self.state = self.state.replace(redraw=jnp.zeros((), dtype=jnp.bool_))

    # Read-only views

    @property
    def pc(self) -> int:
        return int(self.state.pc)

    @property
    def opcode(self) -> DecodedInstruction:
        """The instruction fetched by the last tick."""
        return decode(int(self.state.opcode))

    @property
    def index(self) -> int:
        return int(self.state.I)

    @property
    def registers(self) -> Tuple[int, ...]:
        return tuple(int(value) for value in np.asarray(self.state.V))

    @property
    def stack(self) -> Tuple[int, ...]:
        """Return addresses, bottom first."""
        depth = self.stack_depth
        return tuple(int(value) for value in np.asarray(self.state.stack.data)[:depth])

    @property
    def stack_depth(self) -> int:
        return int(self.state.stack.pointer)

    @property
    def delay_timer(self) -> int:
        return int(self.state.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self.state.sound_timer)

    @property
    def keypress(self) -> Optional[int]:
        key = int(self.state.keypress)
        return None if key == NO_KEY else key

    @property
    def awaiting_key(self) -> bool:
        return bool(self.state.awaiting_key)

    @property
    def redraw(self) -> bool:
        return bool(self.state.redraw)

    @property
    def halted(self) -> bool:
        return self.fault is not None

    @property
    def display(self) -> np.ndarray:
        """Copy of the ``(32, 64)`` boolean display, indexed ``[y, x]``."""
        return np.array(self.state.display, dtype=np.bool_)

    @property
    def memory(self) -> bytes:
        return np.asarray(self.state.memory, dtype=np.uint8).tobytes()

    def pixels(self, color_scheme: str = "classic", scale: int = 1) -> np.ndarray:
        """RGB rendering of the display."""
        on_color, off_color = create_color_scheme(color_scheme)
        return display_to_rgb(self.state.display, scale, on_color, off_color)


def _validate_key(keypress: Optional[int]) -> int:
    if keypress is None:
        return NO_KEY
    if not 0 <= keypress < NUM_KEYS:
        raise ValueError(f"Key index must be in 0..{NUM_KEYS - 1}, got {keypress}")
    return int(keypress)
