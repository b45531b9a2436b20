"""Sprites as read from object attribute memory."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .control import Control


def nth_bit(x: int, n: int) -> int:
    """Return bit *n* of *x* as 0 or 1."""
    return (x >> n) & 1


@dataclass(frozen=True)
class SpriteStatus:
    """Attribute byte of a sprite."""

    value: int = 0

    @property
    def palette(self) -> int:
        return self.value & 0b11

    @property
    def behind_background(self) -> bool:
        return bool(nth_bit(self.value, 5))

    @property
    def flip_x(self) -> bool:
        return bool(nth_bit(self.value, 6))

    @property
    def flip_y(self) -> bool:
        return bool(nth_bit(self.value, 7))


@dataclass(frozen=True)
class SpriteTileIndex:
    """Tile index byte of a sprite."""

    value: int = 0

    def base(self) -> int:
        """Pattern table base for 8x16 sprites, chosen by bit 0."""
        return 0x1000 * (self.value & 1)

    def large_offset(self) -> int:
        """Tile offset for 8x16 sprites, ignoring bit 0."""
        return 16 * (self.value & 0xFE)

    def small_offset(self) -> int:
        """Tile offset for 8x8 sprites."""
        return 16 * self.value


@dataclass
class Sprite:
    """One sprite with the pattern bits fetched for the current row."""

    x: int
    y: int
    status: SpriteStatus = field(default_factory=SpriteStatus)
    tile_index: SpriteTileIndex = field(default_factory=SpriteTileIndex)
    data_low: int = 0
    data_high: int = 0
    oam_index: int = 0

    @classmethod
    def from_oam(cls, oam_index: int, data: Sequence[int]) -> Sprite:
        """Build a sprite from its four OAM bytes: y, tile, attributes, x."""
        if len(data) < 4:
            raise ValueError(f"a sprite needs 4 bytes of OAM data, got {len(data)}")
        y, tile, attributes, x = data[:4]
        return cls(
            x=x,
            y=y,
            status=SpriteStatus(attributes),
            tile_index=SpriteTileIndex(tile),
            oam_index=oam_index,
        )

    def tile_address(self, scanline: int, control: Control) -> int:
        """Pattern address of this sprite's row on *scanline*."""
        if control.large_sprites:
            base = self.tile_index.base() + self.tile_index.large_offset()
        else:
            base = control.sprite_tile_base() + self.tile_index.small_offset()

        height = control.sprite_height()
        y_offset = ((scanline - self.y) & 0xFFFF) % height
        if self.status.flip_y:
            y_offset = height - 1 - y_offset

        # The lower half of a tall sprite lives in the next tile, 8 bytes further on.
        return (base + y_offset + (0 if y_offset < 8 else 8)) & 0xFFFF

    def color_index(self, x: int) -> int:
        """Two-bit colour of the sprite at screen column *x*; 0 if outside."""
        sprite_x = (x - self.x) & 0xFFFF
        if sprite_x >= 8:
            return 0
        if self.status.flip_x:
            sprite_x = 7 - sprite_x
        return nth_bit(self.data_high, 7 - sprite_x) << 1 | nth_bit(
            self.data_low, 7 - sprite_x
        )