"""Framebuffer conversion for the hosts.

The interpreter exposes its display as a (64, 32) boolean array indexed
``[x, y]``. pygame surfaces use the same ``[x, y]`` order, so frames are
built column-major and handed to ``pygame.surfarray`` unchanged.
"""

from typing import Tuple

import numpy as np

from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT

Color = Tuple[int, int, int]

PALETTES = {
    "classic": ((0, 255, 0), (0, 0, 0)),
    "amber": ((255, 176, 0), (0, 0, 0)),
    "white": ((255, 255, 255), (0, 0, 0)),
    "cosmac": ((255, 255, 255), (80, 40, 20)),
}


def palette(name: str = "classic") -> Tuple[Color, Color]:
    """Return the ``(on_color, off_color)`` pair for a named palette."""
    try:
        return PALETTES[name]
    except KeyError:
        raise ValueError(f"Unknown palette '{name}'. Available: {sorted(PALETTES)}") from None


def display_to_surface_array(
    display: np.ndarray,
    scale: int = 8,
    on_color: Color = PALETTES["classic"][0],
    off_color: Color = PALETTES["classic"][1],
) -> np.ndarray:
    """Colorize and upscale a framebuffer for ``pygame.surfarray.blit_array``.

    Args:
        display: Boolean array of shape (64, 32), indexed [x, y].
        scale: Size in screen pixels of one CHIP-8 pixel.
        on_color: RGB for lit pixels.
        off_color: RGB for dark pixels.

    Returns:
        uint8 array of shape (64 * scale, 32 * scale, 3), indexed [x, y].
    """
    pixels = np.asarray(display, dtype=np.bool_)
    if pixels.shape != (SCREEN_WIDTH, SCREEN_HEIGHT):
        raise ValueError(f"Expected display shape {(SCREEN_WIDTH, SCREEN_HEIGHT)}, got {pixels.shape}")
    if scale < 1:
        raise ValueError(f"scale must be positive, got {scale}")

    colors = np.array([off_color, on_color], dtype=np.uint8)
    frame = colors[pixels.astype(np.intp)]
    return frame.repeat(scale, axis=0).repeat(scale, axis=1)


def display_to_text(display: np.ndarray, on: str = "#", off: str = ".") -> str:
    """Render a framebuffer as 32 lines of 64 characters."""
    pixels = np.asarray(display, dtype=np.bool_)
    return "\n".join(
        "".join(on if pixels[x, y] else off for x in range(pixels.shape[0]))
        for y in range(pixels.shape[1])
    )
