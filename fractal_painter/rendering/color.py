"""
Double-precision RGBA color model.

Colors built through the constructor (or any of the colorspace conversions)
are clamped to [0, 1]. Arithmetic operators do not clamp, so
intermediate results may leave that range until ``clamp`` is applied.
"""

from dataclasses import InitVar, dataclass
from numbers import Real
from typing import Sequence, Tuple, Union
import logging

from ..core.math_functions import clamp, ieee_divide_real

logger = logging.getLogger(__name__)

Operand = Union["Color", float, int]


def _to_byte(channel: float) -> int:
    """Truncate a channel to 0-255; non-finite channels encode as 0."""
    if channel != channel:
        return 0
    return int(clamp(channel, 0.0, 1.0) * 255)


@dataclass(frozen=True)
class Color:
    """
    RGBA color with double-precision channels.

    Args:
        r: Red channel
        g: Green channel
        b: Blue channel
        a: Alpha channel (opaque by default)
        clamp_channels: Clamp every channel to [0, 1]. Arithmetic results are built
            with ``clamp_channels=False``.
    """

    r: float
    g: float
    b: float
    a: float = 1.0
    clamp_channels: InitVar[bool] = True

    def __post_init__(self, clamp_channels: bool):
        if clamp_channels:
            for name in ('r', 'g', 'b', 'a'):
                object.__setattr__(self, name, clamp(float(getattr(self, name)), 0.0, 1.0))
        else:
            for name in ('r', 'g', 'b', 'a'):
                object.__setattr__(self, name, float(getattr(self, name)))

    @classmethod
    def from_argb(cls, a: float, r: float, g: float, b: float) -> 'Color':
        """Create a clamped color from channels in alpha, red, green, blue order."""
        return cls(r, g, b, a)

    @classmethod
    def _unclamped(cls, a: float, r: float, g: float, b: float) -> 'Color':
        return cls(r, g, b, a, clamp_channels=False)

    @classmethod
    def from_hue(cls, hue: float, a: float = 1.0) -> 'Color':
        """
        Create a fully saturated color from a hue in [0, 1].

        Uses the piecewise-linear ramp ``r = |6h - 3| - 1``,
        ``g = 2 - |6h - 2|``, ``b = 2 - |6h - 4|``.
        """
        r = abs(hue * 6.0 - 3.0) - 1.0
        g = 2.0 - abs(hue * 6.0 - 2.0)
        b = 2.0 - abs(hue * 6.0 - 4.0)
        return cls(r, g, b, a)

    @classmethod
    def from_hsv(cls, hue: float, saturation: float, value: float, a: float = 1.0) -> 'Color':
        """Create a color from hue, saturation and value, all in [0, 1]."""
        color = cls.from_hue(hue)
        r = ((color.r - 1.0) * saturation + 1.0) * value
        g = ((color.g - 1.0) * saturation + 1.0) * value
        b = ((color.b - 1.0) * saturation + 1.0) * value
        return cls(r, g, b, a)

    @classmethod
    def from_hsl(cls, hue: float, saturation: float, lightness: float, a: float = 1.0) -> 'Color':
        """Create a color from hue, saturation and lightness, all in [0, 1]."""
        rgb = cls.from_hue(hue)
        c = (1.0 - abs(2.0 * lightness - 1.0)) * saturation
        r = (rgb.r - 0.5) * c + lightness
        g = (rgb.g - 0.5) * c + lightness
        b = (rgb.b - 0.5) * c + lightness
        return cls(r, g, b, a)

    def contrast(self, c: float) -> 'Color':
        """Scale R, G, B around 0.5 by ``c``. Alpha is left as is."""
        t = 0.5 - c * 0.5
        return Color(self.r * c + t, self.g * c + t, self.b * c + t, self.a)

    def brightness(self, b: float) -> 'Color':
        """Add ``b`` to R, G, B. Alpha is left as is."""
        return Color(self.r + b, self.g + b, self.b + b, self.a)

    def clamp(self, minimum: float = 0.0, maximum: float = 1.0) -> 'Color':
        """Return a copy with every channel clamped to ``[minimum, maximum]``."""
        return Color._unclamped(
            clamp(self.a, minimum, maximum),
            clamp(self.r, minimum, maximum),
            clamp(self.g, minimum, maximum),
            clamp(self.b, minimum, maximum),
        )

    def to_argb(self) -> Tuple[float, float, float, float]:
        return (self.a, self.r, self.g, self.b)

    def to_argb_bytes(self) -> Tuple[int, int, int, int]:
        """Channels as truncated 0-255 integers in alpha, red, green, blue order."""
        return (_to_byte(self.a), _to_byte(self.r), _to_byte(self.g), _to_byte(self.b))

    def to_bgra_bytes(self) -> Tuple[int, int, int, int]:
        """Channels as truncated 0-255 integers in blue, green, red, alpha order."""
        return (_to_byte(self.b), _to_byte(self.g), _to_byte(self.r), _to_byte(self.a))

    # Arithmetic never clamps

    def _apply(self, other: Operand, op) -> 'Color':
        if isinstance(other, Color):
            return Color._unclamped(op(self.a, other.a), op(self.r, other.r),
                                    op(self.g, other.g), op(self.b, other.b))
        if isinstance(other, Real):
            value = float(other)
            return Color._unclamped(op(self.a, value), op(self.r, value),
                                    op(self.g, value), op(self.b, value))
        return NotImplemented

    def __add__(self, other: Operand) -> 'Color':
        return self._apply(other, lambda x, y: x + y)

    def __radd__(self, other: Operand) -> 'Color':
        return self._apply(other, lambda x, y: y + x)

    def __sub__(self, other: Operand) -> 'Color':
        return self._apply(other, lambda x, y: x - y)

    def __rsub__(self, other: Operand) -> 'Color':
        return self._apply(other, lambda x, y: y - x)

    def __mul__(self, other: Operand) -> 'Color':
        return self._apply(other, lambda x, y: x * y)

    def __rmul__(self, other: Operand) -> 'Color':
        return self._apply(other, lambda x, y: y * x)

    def __truediv__(self, other: Operand) -> 'Color':
        return self._apply(other, ieee_divide_real)

    @staticmethod
    def average(*colors: 'Color') -> 'Color':
        """
        Per-channel arithmetic mean of the given colors.

        Raises:
            ValueError: If no colors are given
        """
        if not colors:
            raise ValueError("average requires at least one color")
        count = float(len(colors))
        a = sum(color.a for color in colors)
        r = sum(color.r for color in colors)
        g = sum(color.g for color in colors)
        b = sum(color.b for color in colors)
        return Color.from_argb(a / count, r / count, g / count, b / count)

    @staticmethod
    def weighted_sum(colors: Sequence['Color'], weights: Sequence[float]) -> 'Color':
        """
        Per-channel weighted sum of colors divided by the number of colors.

        Note that the divisor is the count of colors and not the sum of the
        weights, so this is only a weighted average when the weights sum to
        the number of colors.

        Args:
            colors: Colors to combine
            weights: One weight per color

        Raises:
            ValueError: If no colors are given or the lengths differ
        """
        if not colors:
            raise ValueError("weighted_sum requires at least one color")
        if len(colors) != len(weights):
            raise ValueError(f"weighted_sum got {len(colors)} colors but {len(weights)} weights")
        count = float(len(colors))
        pairs = list(zip(colors, weights))
        a = sum(color.a * weight for color, weight in pairs)
        r = sum(color.r * weight for color, weight in pairs)
        g = sum(color.g * weight for color, weight in pairs)
        b = sum(color.b * weight for color, weight in pairs)
        return Color.from_argb(a / count, r / count, g / count, b / count)

    def __str__(self) -> str:
        return "({}, {}, {}, {})".format(*self.to_argb_bytes())


BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
TRANSPARENT = Color(0.0, 0.0, 0.0, 0.0)
