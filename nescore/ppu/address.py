"""The scroll/address register shared by PPUSCROLL and PPUADDR writes."""

from __future__ import annotations

from dataclasses import dataclass

_WORD = 0xFFFF


def _field(high: int, low: int, doc: str, *, writable: bool = True) -> property:
    mask = (1 << (high - low + 1)) - 1

    def fget(self: "Address") -> int:
        return (self.value >> low) & mask

    def fset(self: "Address", bits: int) -> None:
        self.value = (self.value & ~(mask << low)) | ((bits & mask) << low)

    return property(fget, fset if writable else None, doc=doc)


@dataclass
class Address:
    """A 16-bit VRAM address with the scroll fields packed into it."""

    value: int = 0

    def __post_init__(self) -> None:
        self.value &= _WORD

    coarse_x = _field(4, 0, "Tile column within the nametable.")
    coarse_y = _field(9, 5, "Tile row within the nametable.")
    nametable = _field(11, 10, "Selected nametable (0-3).")
    fine_y = _field(14, 12, "Pixel row within the tile.")
    high_byte = _field(13, 8, "High six bits of the PPUADDR address.")
    low_byte = _field(7, 0, "Low eight bits of the PPUADDR address.")
    address = _field(13, 0, "Full 14-bit address.", writable=False)

    def increment(self, amount: int) -> None:
        """Advance the address, wrapping at 16 bits."""
        self.value = (self.value + amount) & _WORD

    def nametable_address(self) -> int:
        """Address of the current nametable entry, without fine y."""
        return 0x2000 | (self.value & 0xFFF)

    def attribute_address(self) -> int:
        """Address of the attribute byte covering the current tile."""
        return (
            0x23C0
            | (self.nametable << 10)
            | ((self.coarse_y // 4) << 3)
            | (self.coarse_x // 4)
        )

    def tile_offset(self, tile_number: int) -> int:
        """Offset of the current row of a tile within a pattern table."""
        return (16 * tile_number) | self.fine_y

    def copy_x(self, other: Address) -> None:
        """Copy coarse x and the horizontal nametable bit from *other*."""
        self.value = (self.value & ~0x041F) | (other.value & 0x041F)

    def copy_y(self, other: Address) -> None:
        """Copy fine y, coarse y and the vertical nametable bit from *other*."""
        self.value = (self.value & ~0x7BE0) | (other.value & 0x7BE0)

    def scroll_x(self) -> None:
        """Move to the next tile column, switching nametable at the edge."""
        if self.coarse_x == 31:
            self.coarse_x = 0
            self.value ^= 0x0400
        else:
            self.coarse_x += 1

    def scroll_y(self) -> None:
        """Move to the next pixel row, carrying into coarse y."""
        if self.fine_y < 7:
            self.fine_y += 1
            return
        self.fine_y = 0
        coarse_y = self.coarse_y
        if coarse_y == 29:
            self.coarse_y = 0
            self.value ^= 0x0800
        elif coarse_y == 31:
            # Rows 30 and 31 are out of range; some games use them to scroll backwards.
            self.coarse_y = 0
        else:
            self.coarse_y = coarse_y + 1