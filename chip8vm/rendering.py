"""CHIP-8 display buffer to pixel conversion."""

import jax.numpy as jnp
import numpy as np
from typing import Tuple

from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT


def display_to_rgb(
    display: jnp.ndarray,
    scale: int = 1,
    on_color: Tuple[int, int, int] = (255, 255, 255),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert CHIP-8 boolean display to RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (32, 64), indexed [y, x]
        scale: Upscaling factor (nearest neighbour)
        on_color: RGB color for "on" pixels
        off_color: RGB color for "off" pixels

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    if scale < 1:
        raise ValueError(f"scale must be at least 1, got {scale}")

    pixels = np.array(display, dtype=np.bool_)
    if pixels.shape != (SCREEN_HEIGHT, SCREEN_WIDTH):
        raise ValueError(f"Expected display shape ({SCREEN_HEIGHT}, {SCREEN_WIDTH}), got {pixels.shape}")

    rgb_frame = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "classic": ((255, 255, 255), (0, 0, 0)),  # White on black
        "green": ((0, 255, 0), (0, 0, 0)),
        "amber": ((255, 176, 0), (0, 0, 0)),
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]
