"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import ADDRESS_MASK, STATUS_STACK_OVERFLOW
from chip8vm.stack import push
from chip8vm.instructions.system import fault, unknown_opcode


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    stack, overflow = push(state.stack, state.pc)
    return jax.lax.cond(
        overflow,
        lambda state: fault(state, STATUS_STACK_OVERFLOW),
        lambda state: execute_jump(state.replace(stack=stack), instruction),
        state
    )


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=(s.pc + 2) & ADDRESS_MASK),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

# No key pressed (keypress == -1) never equals a register value
execute_skip_if_key_pressed = make_skip_instruction(
    lambda state, inst: state.keypress == jnp.astype(state.V[inst.x], jnp.int32)
)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: state.keypress != jnp.astype(state.V[inst.x], jnp.int32)
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = (instruction.nnn + jnp.astype(state.V[0], jnp.uint16)) & ADDRESS_MASK
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def execute_skip_if_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""
    index = jnp.where(instruction.nn == 0x9E, 0, jnp.where(instruction.nn == 0xA1, 1, 2))
    return jax.lax.switch(
        index,
        [execute_skip_if_key_pressed, execute_skip_if_key_not_pressed, unknown_opcode],
        state, instruction
    )
