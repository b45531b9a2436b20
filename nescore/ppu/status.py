"""The PPUSTATUS register."""

from __future__ import annotations

from dataclasses import dataclass


def _flag(bit: int, doc: str) -> property:
    def fget(self: "Status") -> bool:
        return bool((self.value >> bit) & 1)

    def fset(self: "Status", on: bool) -> None:
        if on:
            self.value |= 1 << bit
        else:
            self.value &= ~(1 << bit) & 0xFF

    return property(fget, fset, doc=doc)


@dataclass
class Status:
    """PPUSTATUS with writable flag bits."""

    value: int = 0

    def __post_init__(self) -> None:
        self.value &= 0xFF

    sprite_overflow = _flag(5, "More than eight sprites on a scanline.")
    sprite_zero_hit = _flag(6, "Sprite 0 overlapped an opaque background pixel.")
    vblank = _flag(7, "Vertical blank has started.")