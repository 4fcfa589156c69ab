"""The fixed colour palette notes are painted with."""
import random

PALETTE: tuple[str, ...] = (
    "#FFE066",  # Yellow
    "#FF6B6B",  # Red
    "#4ECDC4",  # Teal
    "#45B7D1",  # Blue
    "#96CEB4",  # Green
    "#FFEAA7",  # Light Yellow
    "#DDA0DD",  # Plum
    "#98D8C8",  # Mint
    "#FFB347",  # Orange
    "#B19CD9",  # Lavender
    "#FF8A95",  # Pink
    "#87CEEB",  # Sky Blue
)


def random_color(rng: random.Random) -> str:
    """Draw a palette colour uniformly at random from the given source."""
    return rng.choice(PALETTE)


def is_palette_color(color: str) -> bool:
    """Check whether a colour belongs to the palette (case-insensitive)."""
    return color.upper() in PALETTE
