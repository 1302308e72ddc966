"""CHIP-8 stack operations.

Each operation returns an explicit fault flag instead of raising, so the
callers stay traceable under ``jax.jit``. A faulting operation leaves the
stack unchanged.
"""

import jax.numpy as jnp
from chip8vm.constants import ADDRESS_MASK, STACK_SIZE
from chip8vm.state import StackState


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer <= 0


def is_full(stack: StackState) -> jnp.ndarray:
    return stack.pointer >= STACK_SIZE


def push(stack: StackState, address: jnp.ndarray) -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack. Returns ``(stack, overflow)``."""
    overflow = is_full(stack)
    slot = jnp.minimum(stack.pointer, STACK_SIZE - 1)
    masked_address = jnp.astype(address & ADDRESS_MASK, jnp.uint16)
    new_data = jnp.where(overflow, stack.data, stack.data.at[slot].set(masked_address))
    new_pointer = jnp.where(overflow, stack.pointer, stack.pointer + 1)
    return stack.replace(data=new_data, pointer=new_pointer), overflow


def top(stack: StackState) -> tuple[jnp.ndarray, jnp.ndarray]:
    """Peek at the return address on top. Returns ``(address, underflow)``."""
    underflow = is_empty(stack)
    slot = jnp.maximum(stack.pointer - 1, 0)
    address = jnp.where(underflow, jnp.zeros((), dtype=jnp.uint16), stack.data[slot])
    return address, underflow


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack. Returns ``(stack, address, underflow)``."""
    address, underflow = top(stack)
    slot = jnp.maximum(stack.pointer - 1, 0)
    new_data = jnp.where(underflow, stack.data, stack.data.at[slot].set(0))
    new_pointer = jnp.where(underflow, stack.pointer, stack.pointer - 1)
    return stack.replace(data=new_data, pointer=new_pointer), address, underflow
