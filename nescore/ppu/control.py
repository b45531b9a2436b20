"""The PPUCTRL register."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Control:
    """Decoded view of a PPUCTRL byte."""

    value: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", self.value & 0xFF)

    def _bit(self, n: int) -> bool:
        return bool((self.value >> n) & 1)

    @property
    def nametable(self) -> int:
        return self.value & 0b11

    @property
    def vertical_increment(self) -> bool:
        return self._bit(2)

    @property
    def sprite_table(self) -> bool:
        return self._bit(3)

    @property
    def background_table(self) -> bool:
        return self._bit(4)

    @property
    def large_sprites(self) -> bool:
        return self._bit(5)

    @property
    def slave(self) -> bool:
        return self._bit(6)

    @property
    def nmi_on_vblank(self) -> bool:
        return self._bit(7)

    def sprite_height(self) -> int:
        """Sprite height in pixels: 16 for large sprites, else 8."""
        return 16 if self.large_sprites else 8

    def sprite_tile_base(self) -> int:
        """Pattern table base used by 8x8 sprites."""
        return 0x1000 if self.sprite_table else 0

    def background_tile_base(self) -> int:
        """Pattern table base used by the background."""
        return 0x1000 if self.background_table else 0

    def increment_amount(self) -> int:
        """VRAM address step after a PPUDATA access."""
        return 32 if self.vertical_increment else 1