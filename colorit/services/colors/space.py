"""
Color space conversions.

Pure conversions among RGB, hex, HSL, HSB and CMYK plus the RGB Euclidean
distance used as the similarity metric everywhere in the engine. Every
function here is total: malformed hex degrades to black channels instead of
raising. Use ``parse_hex_strict`` at system boundaries that need validation.
"""

import colorsys
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np


HEX_DIGITS_RE = re.compile(r"^[0-9A-Fa-f]+$")


@dataclass(frozen=True)
class Color:
    """An sRGB color with three 8-bit channels."""
    r: int
    g: int
    b: int

    def __post_init__(self):
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"Channel {name} must be an integer, got {value!r}")
            if not 0 <= value <= 255:
                raise ValueError(f"Channel {name} out of range [0, 255]: {value}")
            object.__setattr__(self, name, int(value))

    @property
    def hex(self) -> str:
        return to_hex(self)

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        return from_hex(text)

    def distance(self, other: "Color") -> float:
        return distance(self, other)

    def __str__(self) -> str:
        return self.hex


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)


def to_hex(color: Color) -> str:
    """Canonical ``#RRGGBB`` (uppercase) form of a color."""
    return f"#{color.r:02X}{color.g:02X}{color.b:02X}"


def normalize_hex(text: str) -> str:
    """Uppercase, whitespace- and ``#``-stripped hex key used for lookups."""
    cleaned = str(text).strip().upper()
    if cleaned.startswith("#"):
        cleaned = cleaned[1:]
    return cleaned


def _parse_channel(slot: str) -> int:
    if len(slot) != 2 or not HEX_DIGITS_RE.match(slot):
        return 0
    return int(slot, 16)


def from_hex(text: str) -> Color:
    """
    Leniently parse a hex color.

    An optional leading ``#`` is dropped and at most six digits are read.
    Each two-digit channel slot that is missing, truncated or not hex
    becomes 0, so ``"#GG8800"`` parses as ``(0, 136, 0)`` and ``"#AB"`` as
    ``(171, 0, 0)``.
    """
    if not isinstance(text, str):
        return BLACK
    digits = text.strip()
    if digits.startswith("#"):
        digits = digits[1:]
    digits = digits[:6]
    r, g, b = (_parse_channel(digits[i:i + 2]) for i in (0, 2, 4))
    return Color(r, g, b)


def parse_hex_strict(text: str) -> Color:
    """
    Validating hex parser for input crossing the system boundary.

    Accepts ``RGB`` shorthand and ``RRGGBB``, each with an optional ``#``.

    Raises:
        ValueError: If the string is not a 3 or 6 digit hex color
    """
    if not isinstance(text, str):
        raise ValueError(f"Invalid hex color format: {text!r}")
    digits = normalize_hex(text)
    if len(digits) not in (3, 6) or not HEX_DIGITS_RE.match(digits):
        raise ValueError(f"Invalid hex color format: {text}")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return Color(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def _to_unit(color: Color) -> Tuple[float, float, float]:
    return color.r / 255.0, color.g / 255.0, color.b / 255.0


def _from_unit(r: float, g: float, b: float) -> Color:
    return Color(*(max(0, min(255, round(v * 255))) for v in (r, g, b)))


def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def to_hsl(color: Color) -> Tuple[float, float, float]:
    """Return ``(hue°, saturation%, lightness%)``; hue is 0 for grays."""
    h, l, s = colorsys.rgb_to_hls(*_to_unit(color))
    return (h * 360.0) % 360.0, s * 100.0, l * 100.0


def from_hsl(h: float, s: float, l: float) -> Color:
    """Build a color from hue in degrees and saturation/lightness in percent."""
    r, g, b = colorsys.hls_to_rgb((h % 360.0) / 360.0, _clamp_percent(l) / 100.0, _clamp_percent(s) / 100.0)
    return _from_unit(r, g, b)


def to_hsb(color: Color) -> Tuple[float, float, float]:
    """Return ``(hue°, saturation%, brightness%)``; hue is 0 for grays."""
    h, s, v = colorsys.rgb_to_hsv(*_to_unit(color))
    return (h * 360.0) % 360.0, s * 100.0, v * 100.0


def from_hsb(h: float, s: float, b: float) -> Color:
    """Build a color from hue in degrees and saturation/brightness in percent."""
    r, g, bl = colorsys.hsv_to_rgb((h % 360.0) / 360.0, _clamp_percent(s) / 100.0, _clamp_percent(b) / 100.0)
    return _from_unit(r, g, bl)


def to_cmyk(color: Color) -> Tuple[float, float, float, float]:
    """Return ``(c, m, y, k)`` percentages; pure black is ``(0, 0, 0, 100)``."""
    r, g, b = _to_unit(color)
    k = 1.0 - max(r, g, b)
    if k >= 1.0:
        return 0.0, 0.0, 0.0, 100.0
    c = (1.0 - r - k) / (1.0 - k)
    m = (1.0 - g - k) / (1.0 - k)
    y = (1.0 - b - k) / (1.0 - k)
    return tuple(_clamp_percent(v * 100.0) for v in (c, m, y, k))


def distance(a: Color, b: Color) -> float:
    """Euclidean distance between two colors in RGB space."""
    dr = a.r - b.r
    dg = a.g - b.g
    db = a.b - b.b
    return math.sqrt(dr * dr + dg * dg + db * db)


def describe(color: Color) -> Dict[str, Any]:
    """All representations of a color, including display strings."""
    h, s, l = to_hsl(color)
    hh, ss, bb = to_hsb(color)
    c, m, y, k = to_cmyk(color)
    return {
        "hex": color.hex,
        "rgb": list(color.rgb),
        "hsl": [h, s, l],
        "hsb": [hh, ss, bb],
        "cmyk": [c, m, y, k],
        "rgb_text": f"RGB({color.r}, {color.g}, {color.b})",
        "hsb_text": f"HSB: {int(hh)}°, {int(ss)}%, {int(bb)}%",
        "cmyk_text": f"CMYK: C:{int(c)}%, M:{int(m)}%, Y:{int(y)}%, K:{int(k)}%",
    }
