"""CHIP-8 ALU operations (8xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER
from chip8vm.instructions.system import unknown_opcode


def alu_set(vx: int, vy: int) -> tuple[int, int]:
    """8XY0 - Set: VX = VY."""
    return vy, jnp.zeros((), dtype=jnp.int32)


def alu_or(vx: int, vy: int) -> tuple[int, int]:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, jnp.zeros((), dtype=jnp.int32)


def alu_and(vx: int, vy: int) -> tuple[int, int]:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, jnp.zeros((), dtype=jnp.int32)


def alu_xor(vx: int, vy: int) -> tuple[int, int]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, jnp.zeros((), dtype=jnp.int32)


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = vx + vy
    carry = jnp.astype(result > 0xFF, jnp.int32)
    return result & 0xFF, carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when there is no borrow."""
    no_borrow = jnp.astype(vx >= vy, jnp.int32)
    return (vx - vy) & 0xFF, no_borrow


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX >>= 1."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when there is no borrow."""
    no_borrow = jnp.astype(vy >= vx, jnp.int32)
    return (vy - vx) & 0xFF, no_borrow


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX <<= 1."""
    return (vx << 1) & 0xFF, (vx >> 7) & 1


# Operations 0-7 and E, in switch order
ALU_OPERATIONS = [alu_set, alu_or, alu_and, alu_xor, alu_add,
                  alu_sub_xy, alu_shift_right, alu_sub_yx, alu_shift_left]

VALID_OPS = jnp.array([1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=bool)
FLAG_OPS = jnp.array([0, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=bool)


def execute_valid_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    vx = jnp.astype(state.V[instruction.x], jnp.int32)
    vy = jnp.astype(state.V[instruction.y], jnp.int32)

    result, vf = jax.lax.switch(
        jnp.where(instruction.n == 0xE, 8, instruction.n),
        ALU_OPERATIONS,
        vx, vy
    )

    # The flag write comes last so it wins when X is F
    new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
    new_vf = jnp.where(FLAG_OPS[instruction.n], jnp.astype(vf, jnp.uint8), new_V[FLAG_REGISTER])
    return state.replace(V=new_V.at[FLAG_REGISTER].set(new_vf))


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    return jax.lax.cond(
        VALID_OPS[instruction.n],
        execute_valid_alu_operation,
        unknown_opcode,
        state, instruction
    )
