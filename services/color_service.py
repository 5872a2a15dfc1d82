"""
Color conversion between HEX, RGB and CMYK.
RGB is the canonical intermediate; HEX and CMYK are derived from it.
"""
import math
import random
import re
from typing import Tuple

HEX_PATTERN = re.compile(r"#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})", re.IGNORECASE)
# ASCII digits only
COMPONENT_PATTERN = re.compile(r"[0-9]+")

COLOR_TYPES = ("hex", "rgb", "cmyk")

# Pantone-like labels are placeholders drawn from this range
PANTONE_RANGE = 7000


class InvalidColorFormat(ValueError):
    """Raised when a color value cannot be parsed for its declared type."""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    match = HEX_PATTERN.fullmatch(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidColorFormat("Invalid hex color")
    return tuple(int(part, 16) for part in match.groups())


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#" + "".join(f"{channel:02x}" for channel in (r, g, b))


def rgb_to_cmyk(r: int, g: int, b: int) -> Tuple[int, int, int, int]:
    r_norm, g_norm, b_norm = r / 255, g / 255, b / 255

    k = 1 - max(r_norm, g_norm, b_norm)
    if k == 1:
        # pure black
        c = m = y = 0.0
    else:
        c = (1 - r_norm - k) / (1 - k)
        m = (1 - g_norm - k) / (1 - k)
        y = (1 - b_norm - k) / (1 - k)

    return tuple(_round_half_up(x * 100) for x in (c, m, y, k))


def cmyk_to_rgb(c: int, m: int, y: int, k: int) -> Tuple[int, int, int]:
    k_norm = k / 100
    return tuple(
        _round_half_up(255 * (1 - x / 100) * (1 - k_norm))
        for x in (c, m, y)
    )


def _parse_components(value: str, count: int, upper: int, label: str) -> Tuple[int, ...]:
    if not isinstance(value, str):
        raise InvalidColorFormat(f"Invalid {label} format")

    parts = [part.strip() for part in value.split(",")]
    if len(parts) != count or not all(COMPONENT_PATTERN.fullmatch(part) for part in parts):
        raise InvalidColorFormat(f"Invalid {label} format")
    numbers = tuple(int(part) for part in parts)

    if any(n < 0 or n > upper for n in numbers):
        raise InvalidColorFormat(f"{label} values must be between 0 and {upper}")
    return numbers


def pantone_labels(r: int, g: int, b: int) -> Tuple[str, str]:
    """
    Pantone-like coated/uncoated labels for display.

    Not a Pantone lookup: the numbers are drawn from a generator seeded with
    the color, so a given color always gets the same pair.
    """
    rng = random.Random((r << 16) | (g << 8) | b)
    coated = rng.randint(1, PANTONE_RANGE)
    uncoated = rng.randint(1, PANTONE_RANGE)
    return f"Pantone {coated}C", f"Pantone {uncoated}U"


def convert_color(color_type: str, value: str) -> dict:
    """
    Convert a color given as hex, rgb or cmyk into every supported representation.

    Args:
        color_type: One of "hex", "rgb", "cmyk"
        value: "#ff0000" for hex, "255, 0, 0" for rgb, "0, 100, 100, 0" for cmyk

    Returns:
        Dict with rgb, hex, cmyk, pantoneCoated and pantoneUncoated strings

    Raises:
        InvalidColorFormat: If the type is unknown or the value does not parse
    """
    if color_type == "hex":
        rgb = hex_to_rgb(value)
    elif color_type == "rgb":
        rgb = _parse_components(value, 3, 255, "RGB")
    elif color_type == "cmyk":
        rgb = cmyk_to_rgb(*_parse_components(value, 4, 100, "CMYK"))
    else:
        raise InvalidColorFormat(f"Unsupported color type: {color_type}")

    c, m, y, k = rgb_to_cmyk(*rgb)
    coated, uncoated = pantone_labels(*rgb)

    return {
        "rgb": f"{rgb[0]}, {rgb[1]}, {rgb[2]}",
        "hex": rgb_to_hex(*rgb),
        "cmyk": f"{c}, {m}, {y}, {k}",
        "pantoneCoated": coated,
        "pantoneUncoated": uncoated,
    }
