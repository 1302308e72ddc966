"""CHIP-8 emulator state structures."""

from dataclasses import field

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode

from chip8vm.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NO_KEY, STATUS_EXECUTED, FATAL_STATUSES,
)


@dataclass(frozen=True)
class StackState:
    """Bounded LIFO of return addresses. ``pointer`` is the current depth."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    ``display`` is row-major: ``display[y, x]``. ``opcode`` holds the word
    fetched by the last tick, ``keypress`` the key supplied to it (``NO_KEY``
    when none) and ``status`` its result code.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    opcode: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_))
    redraw: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypress: jnp.ndarray = field(default_factory=lambda: jnp.astype(NO_KEY, jnp.int32))
    awaiting_key: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    status: jnp.ndarray = field(default_factory=lambda: jnp.astype(STATUS_EXECUTED, jnp.uint8))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))

    @property
    def halted(self) -> jnp.ndarray:
        """True once a fatal fault has been recorded."""
        return jnp.isin(self.status, jnp.array(FATAL_STATUSES, dtype=jnp.uint8))


def create_state(rng: jax.random.PRNGKey = jax.random.PRNGKey(0)) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    state = EmulatorState(rng)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


def reset_state(state: EmulatorState) -> EmulatorState:
    """Restore the power-on state, keeping the random stream where it is."""
    return create_state(state.rng)
