"""
Color Harmony

Hue-rotation harmonies and brightness ramps computed in HSB space, as shown
next to a color's details: complementary, analogous, triadic, shades and
tints, and monochromatic variations.
"""

from typing import Callable, Dict, List

from .space import Color, from_hsb, to_hsb

SHADE_TINT_STEPS = (-45.0, -25.0, 0.0, 20.0, 40.0)
MONOCHROMATIC_STEPS = (-30.0, -15.0, 0.0, 15.0, 30.0)


def rotate_hue(color: Color, degrees: float) -> Color:
    """
    Rotate a color's hue, keeping saturation and brightness.

    Args:
        color: Base color
        degrees: Rotation in degrees (can be negative)

    Returns:
        Rotated color
    """
    h, s, b = to_hsb(color)
    return from_hsb(h + degrees, s, b)


def complementary(color: Color) -> List[Color]:
    """Base color followed by its +180° complement."""
    return [color, rotate_hue(color, 180.0)]


def analogous(color: Color, angle: float = 30.0) -> List[Color]:
    """Neighbours at -angle and +angle around the base color."""
    return [rotate_hue(color, -angle), color, rotate_hue(color, angle)]


def triadic(color: Color) -> List[Color]:
    """Base color with the two colors 120° away on the wheel."""
    return [color, rotate_hue(color, 120.0), rotate_hue(color, -120.0)]


def _brightness_ramp(color: Color, steps) -> List[Color]:
    h, s, b = to_hsb(color)
    return [from_hsb(h, s, max(0.0, min(100.0, b + delta))) for delta in steps]


def shades_and_tints(color: Color) -> List[Color]:
    """
    Darker and lighter variants of a color.

    Brightness is shifted by fixed steps and clamped, duplicates (by hex) are
    dropped, and the result is ordered from darkest to lightest.
    """
    unique: Dict[str, Color] = {}
    for variant in _brightness_ramp(color, SHADE_TINT_STEPS):
        unique.setdefault(variant.hex, variant)
    return sorted(unique.values(), key=lambda c: to_hsb(c)[2])


def monochromatic(color: Color) -> List[Color]:
    return _brightness_ramp(color, MONOCHROMATIC_STEPS)


HARMONY_MODES: Dict[str, Callable[[Color], List[Color]]] = {
    "complementary": complementary,
    "analogous": analogous,
    "triadic": triadic,
    "shades": shades_and_tints,
    "monochromatic": monochromatic,
}


def harmony(color: Color, mode: str) -> List[Color]:
    """
    Generate harmony colors for the given mode.

    Raises:
        ValueError: If the mode is unknown
    """
    try:
        generator = HARMONY_MODES[mode.lower()]
    except KeyError:
        raise ValueError(f"Unknown harmony mode: {mode}. Expected one of {sorted(HARMONY_MODES)}")
    return generator(color)
