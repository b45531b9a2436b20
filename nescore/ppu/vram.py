"""PPU memory: pattern tables on the cartridge, nametables and palettes."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol

NAMETABLE_SIZE = 0x400
PALETTE_SIZE = 0x20


class Mirroring(Enum):
    """How the two physical nametables are mapped onto four logical ones."""

    NONE = "none"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class _Cartridge(Protocol):
    def mirroring(self) -> Mirroring: ...

    def read_chr_byte(self, address: int) -> int: ...

    def write_chr_byte(self, address: int, value: int) -> None: ...


def mirror_nametable(mirroring: Mirroring, address: int) -> int:
    """Index into nametable RAM for a PPU address in 0x2000-0x3EFF."""
    if mirroring is Mirroring.NONE:
        return address - 0x2000
    if mirroring is Mirroring.HORIZONTAL:
        return ((address // 2) & NAMETABLE_SIZE) + (address % NAMETABLE_SIZE)
    return address % (2 * NAMETABLE_SIZE)


def mirror_palette(address: int) -> int:
    """Index into palette RAM; sprite backdrop entries alias the background ones."""
    index = address % PALETTE_SIZE
    if index in (0x10, 0x14, 0x18, 0x1C):
        return index - 0x10
    return index


class Vram:
    """The PPU's address space as seen through PPUDATA and the renderer."""

    def __init__(self) -> None:
        self.nametables = bytearray(2 * NAMETABLE_SIZE)
        self.palettes = bytearray(PALETTE_SIZE)
        self.read_buffer = 0
        self.cartridge: Optional[_Cartridge] = None

    def reset(self) -> None:
        """Fill nametables with 0xFF, clear palettes and detach the cartridge."""
        self.nametables = bytearray(b"\xff" * (2 * NAMETABLE_SIZE))
        self.palettes = bytearray(PALETTE_SIZE)
        self.cartridge = None

    def set_cartridge(self, cartridge: _Cartridge) -> None:
        """Attach the cartridge that supplies pattern memory and mirroring."""
        self.cartridge = cartridge

    def mirroring(self) -> Mirroring:
        """The cartridge's mirroring, or NONE without a cartridge."""
        if self.cartridge is None:
            return Mirroring.NONE
        return self.cartridge.mirroring()

    def _require_cartridge(self) -> _Cartridge:
        if self.cartridge is None:
            raise RuntimeError("no cartridge attached for pattern memory access")
        return self.cartridge

    def write_byte(self, address: int, value: int) -> None:
        """Store *value* at a PPU address; addresses past 0x3FFF are ignored."""
        if 0x0000 <= address <= 0x1FFF:
            self._require_cartridge().write_chr_byte(address, value)
        elif 0x2000 <= address <= 0x3EFF:
            self.nametables[mirror_nametable(self.mirroring(), address)] = value & 0xFF
        elif 0x3F00 <= address <= 0x3FFF:
            self.palettes[mirror_palette(address)] = value & 0xFF

    def read_byte(self, address: int) -> int:
        """Read a PPU address; addresses past 0x3FFF read as 0."""
        if 0x0000 <= address <= 0x1FFF:
            return self._require_cartridge().read_chr_byte(address)
        if 0x2000 <= address <= 0x3EFF:
            return self.nametables[mirror_nametable(self.mirroring(), address)]
        if 0x3F00 <= address <= 0x3FFF:
            return self.palettes[mirror_palette(address)]
        return 0

    def buffered_read_byte(self, address: int) -> int:
        """PPUDATA read: delayed by one below the palettes, immediate within them."""
        if address < 0x3F00:
            result = self.read_buffer
            self.read_buffer = self.read_byte(address)
            return result
        self.read_buffer = self.nametables[mirror_nametable(self.mirroring(), address)]
        return self.read_byte(address)