"""The PPUMASK register."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Mask:
    """Decoded view of a PPUMASK byte."""

    value: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", self.value & 0xFF)

    def _bit(self, n: int) -> bool:
        return bool((self.value >> n) & 1)

    @property
    def greyscale(self) -> bool:
        return self._bit(0)

    @property
    def show_background_left_8(self) -> bool:
        return self._bit(1)

    @property
    def show_sprites_left_8(self) -> bool:
        return self._bit(2)

    @property
    def show_background(self) -> bool:
        return self._bit(3)

    @property
    def show_sprites(self) -> bool:
        return self._bit(4)

    @property
    def emphasize_red(self) -> bool:
        return self._bit(5)

    @property
    def emphasize_green(self) -> bool:
        return self._bit(6)

    @property
    def emphasize_blue(self) -> bool:
        return self._bit(7)

    def rendering(self) -> bool:
        """True when either sprites or background are shown."""
        return self.show_sprites or self.show_background

    def rendering_background(self, x: int) -> bool:
        """True when the background is drawn at column *x*."""
        return self.show_background and (self.show_background_left_8 or x >= 8)

    def rendering_sprites(self, x: int) -> bool:
        """True when sprites are drawn at column *x*."""
        return self.show_sprites and (self.show_sprites_left_8 or x >= 8)