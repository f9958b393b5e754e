"""Colour-grade export — a small ``.cube`` 3D LUT from a vibe palette."""

from __future__ import annotations

import logging
from collections.abc import Sequence

logger = logging.getLogger(__name__)

LUT_TITLE = "GenAI_B-Roll_Grade"
LUT_SIZE = 2
TINT_STRENGTH = 0.15


def parse_hex(token: str) -> tuple[float, float, float] | None:
    """``#RRGGBB`` / ``RRGGBB`` / ``#RGB`` → normalised RGB, or None."""
    value = token.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        return None
    try:
        r, g, b = (int(value[i:i + 2], 16) / 255 for i in (0, 2, 4))
    except ValueError:
        return None
    return (r, g, b)


def palette_mean(palette: Sequence[str]) -> tuple[float, float, float] | None:
    colours = [c for c in map(parse_hex, palette) if c is not None]
    if not colours:
        return None
    n = len(colours)
    return (
        sum(c[0] for c in colours) / n,
        sum(c[1] for c in colours) / n,
        sum(c[2] for c in colours) / n,
    )


def build_cube_lut(palette: Sequence[str], *, strength: float = TINT_STRENGTH) -> str:
    """Render a 2x2x2 ``.cube`` LUT nudged toward the palette's mean colour.

    Lattice order follows the format: red varies fastest, then green, then
    blue. With no parsable colours the lattice is the identity.
    """
    tint = palette_mean(palette)
    if tint is None:
        logger.debug("No parsable palette colours, exporting identity LUT")
        strength = 0.0
        tint = (0.0, 0.0, 0.0)

    lines = [f'TITLE "{LUT_TITLE}"', f"LUT_3D_SIZE {LUT_SIZE}", ""]
    steps = [i / (LUT_SIZE - 1) for i in range(LUT_SIZE)]
    for b in steps:
        for g in steps:
            for r in steps:
                out = (
                    r + (tint[0] - r) * strength,
                    g + (tint[1] - g) * strength,
                    b + (tint[2] - b) * strength,
                )
                lines.append(" ".join(f"{v:.6f}" for v in out))
    return "\n".join(lines) + "\n"
