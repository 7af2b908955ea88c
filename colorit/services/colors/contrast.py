"""
WCAG 2.x relative luminance and contrast ratio.
"""

from .space import BLACK, WHITE, Color

# WCAG thresholds: (AAA, AA)
NORMAL_TEXT_THRESHOLDS = (7.0, 4.5)
LARGE_TEXT_THRESHOLDS = (4.5, 3.0)


def _linearize(channel: int) -> float:
    x = channel / 255.0
    return x / 12.92 if x <= 0.04045 else ((x + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Color) -> float:
    """Perceptually weighted luminance in [0, 1]."""
    return (0.2126 * _linearize(color.r)
            + 0.7152 * _linearize(color.g)
            + 0.0722 * _linearize(color.b))


def contrast_ratio(a: Color, b: Color) -> float:
    """Symmetric contrast ratio in [1, 21]."""
    l1 = relative_luminance(a)
    l2 = relative_luminance(b)
    return (max(l1, l2) + 0.05) / (min(l1, l2) + 0.05)


def wcag_level(ratio: float, large_text: bool = False) -> str:
    """Grade a ratio as "AAA", "AA" or "fail"."""
    aaa, aa = LARGE_TEXT_THRESHOLDS if large_text else NORMAL_TEXT_THRESHOLDS
    if ratio >= aaa:
        return "AAA"
    if ratio >= aa:
        return "AA"
    return "fail"


def passes_aa(a: Color, b: Color, large_text: bool = False) -> bool:
    return wcag_level(contrast_ratio(a, b), large_text) != "fail"


def best_text_color(background: Color) -> Color:
    """Black or white, whichever reads better on the background (black wins ties)."""
    if contrast_ratio(BLACK, background) >= contrast_ratio(WHITE, background):
        return BLACK
    return WHITE
