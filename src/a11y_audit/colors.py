"""CSS color parsing and WCAG contrast computation."""

import math
import re
from dataclasses import dataclass

_HEX_RE = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$")
_FUNC_RE = re.compile(r"^rgba?\((.*)\)$")

NAMED_COLORS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "orange": (255, 165, 0),
    "purple": (128, 0, 128),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "silver": (192, 192, 192),
    "navy": (0, 0, 128),
    "maroon": (128, 0, 0),
    "teal": (0, 128, 128),
    "olive": (128, 128, 0),
    "lime": (0, 255, 0),
    "aqua": (0, 255, 255),
    "cyan": (0, 255, 255),
    "fuchsia": (255, 0, 255),
    "magenta": (255, 0, 255),
}


@dataclass(frozen=True)
class Color:
    """An sRGB color with alpha; channels are 0-255, alpha 0-1."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @property
    def is_opaque(self) -> bool:
        return self.a >= 1.0

    @property
    def is_transparent(self) -> bool:
        return self.a <= 0.0

    def over(self, backdrop: "Color") -> "Color":
        """Alpha-composite this color over an opaque backdrop."""
        if self.is_opaque:
            return self
        a = self.a
        return Color(
            r=self.r * a + backdrop.r * (1 - a),
            g=self.g * a + backdrop.g * (1 - a),
            b=self.b * a + backdrop.b * (1 - a),
            a=1.0,
        )

    def hex(self) -> str:
        return "#{:02x}{:02x}{:02x}".format(*(int(round(c)) for c in (self.r, self.g, self.b)))


WHITE = Color(255, 255, 255)


def _channel(token: str) -> float:
    token = token.strip()
    if token.endswith("%"):
        return max(0.0, min(255.0, float(token[:-1]) * 255 / 100))
    return max(0.0, min(255.0, float(token)))


def _alpha(token: str) -> float:
    token = token.strip()
    if token.endswith("%"):
        return max(0.0, min(1.0, float(token[:-1]) / 100))
    return max(0.0, min(1.0, float(token)))


def parse_color(value: str | None) -> Color | None:
    """Parse a CSS color string; returns None for anything unrecognised."""
    if not value:
        return None

    text = value.strip().lower()
    if text == "transparent":
        return Color(0, 0, 0, 0.0)
    if text in NAMED_COLORS:
        return Color(*NAMED_COLORS[text])

    match = _HEX_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        alpha = channels[3] / 255 if len(channels) == 4 else 1.0
        return Color(channels[0], channels[1], channels[2], alpha)

    match = _FUNC_RE.match(text)
    if not match:
        return None

    body = match.group(1)
    if "," in body:
        parts = body.split(",")
    else:
        # Space-separated syntax: "r g b / a"
        main, _, alpha_part = body.partition("/")
        parts = main.split()
        if alpha_part.strip():
            parts.append(alpha_part)

    try:
        if len(parts) == 3:
            return Color(_channel(parts[0]), _channel(parts[1]), _channel(parts[2]))
        if len(parts) == 4:
            return Color(_channel(parts[0]), _channel(parts[1]), _channel(parts[2]), _alpha(parts[3]))
    except ValueError:
        return None
    return None


def _linearize(channel: float) -> float:
    c = channel / 255
    if c <= 0.03928:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Color) -> float:
    """WCAG 2.x relative luminance of an opaque color."""
    return (
        0.2126 * _linearize(color.r)
        + 0.7152 * _linearize(color.g)
        + 0.0722 * _linearize(color.b)
    )


def contrast_ratio(foreground: Color, background: Color) -> float:
    """Contrast ratio between two colors, compositing the foreground if translucent."""
    background = background.over(WHITE)
    foreground = foreground.over(background)
    l1 = relative_luminance(foreground)
    l2 = relative_luminance(background)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def meets_minimum(ratio: float, minimum: float) -> bool:
    """Pass/fail decision: the ratio truncated to two decimals must be >= minimum."""
    truncated = math.floor(round(ratio * 100, 6)) / 100
    return truncated >= minimum


def is_large_text(font_size: float | None, font_weight: int | None) -> bool:
    """Large text is at least 18pt, or at least 14pt when bold."""
    if font_size is None:
        return False
    points = font_size * 0.75
    if points >= 18:
        return True
    return points >= 14 and (font_weight or 400) >= 700
