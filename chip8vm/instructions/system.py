"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import ADDRESS_MASK, STATUS_UNKNOWN_OPCODE, STATUS_MACHINE_CALL, STATUS_STACK_UNDERFLOW
from chip8vm.stack import pop


def set_status(state: EmulatorState, status: int) -> EmulatorState:
    return state.replace(status=jnp.astype(status, jnp.uint8))


def fault(state: EmulatorState, status: int) -> EmulatorState:
    """Record a fatal status and leave pc on the faulting instruction."""
    return set_status(state.replace(pc=jnp.astype((state.pc - 2) & ADDRESS_MASK, jnp.uint16)), status)


def unknown_opcode(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Unrecognised opcode, reported through the status and otherwise skipped."""
    return set_status(state, STATUS_UNKNOWN_OPCODE)


def execute_machine_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """0NNN - Machine code routine. Not executed."""
    return set_status(state, STATUS_MACHINE_CALL)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display), redraw=jnp.ones((), dtype=jnp.bool_))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address, underflow = pop(state.stack)
    return jax.lax.cond(
        underflow,
        lambda state: fault(state, STATUS_STACK_UNDERFLOW),
        lambda state: state.replace(stack=stack, pc=address),
        state
    )


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions."""
    return jax.lax.cond(
        0x00E0 == instruction.code,
        execute_clear_screen,
        lambda state, instruction: jax.lax.cond(
            0x00EE == instruction.code,
            execute_return,
            execute_machine_call,
            state, instruction
        ),
        state, instruction
    )
