"""The CPU-visible PPU registers at 0x2000-0x2007."""

from __future__ import annotations

import random
from typing import Optional

from .address import Address
from .control import Control
from .mask import Mask
from .status import Status
from .vram import Vram

OAM_SIZE = 0x100


class Registers:
    """PPU register file together with OAM and VRAM."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.vram = Vram()
        self.t_address = Address(0)
        self.v_address = Address(0)
        self.fine_x = 0
        self.oam_ram = bytearray(OAM_SIZE)
        self.oam_address = 0
        self.control = Control(0)
        self.mask = Mask(0)
        self.status = Status(0)
        self.latch = False
        self.open_bus = 0
        self.force_nmi = False
        self.vblank_suppress = False
        self._rng = rng if rng is not None else random.Random()
        self.reset()

    def reset(self) -> None:
        """Clear control, mask, status and OAM, and reset VRAM."""
        self.control = Control(0)
        self.status = Status(0)
        self.mask = Mask(0)
        self.oam_ram = bytearray(OAM_SIZE)
        self.vram.reset()

    def write_register(self, address: int, value: int) -> None:
        """Handle a CPU write to a PPU register (mirrored every 8 bytes)."""
        value &= 0xFF
        self.open_bus = value
        register = address % 8
        if register == 0:
            self._write_control(value)
        elif register == 1:
            self.mask = Mask(value)
        elif register == 3:
            self.oam_address = value
        elif register == 4:
            self.write_oam_data(value)
        elif register == 5:
            self._write_scroll(value)
        elif register == 6:
            self._write_address(value)
        elif register == 7:
            self._write_data(value)

    def read_register(self, address: int) -> int:
        """Handle a CPU read of a PPU register; unreadable ones return open bus."""
        register = address % 8
        if register == 2:
            result = (self._read_status() & 0b1110_0000) | (self.open_bus & 0b0001_1111)
        elif register == 4:
            result = self._read_oam_data()
        elif register == 7:
            if 0x3F00 <= self.v_address.address <= 0x3FFF:
                result = (self._read_data() & 0b0011_1111) | (
                    self.open_bus & 0b1100_0000
                )
            else:
                result = self._read_data()
        else:
            result = self.open_bus
        self.open_bus = result
        return result

    def tick_decay(self) -> None:
        """Let each open-bus bit fade to zero with a one-in-four chance."""
        for bit in range(8):
            if self._rng.randrange(4) == 0:
                self.open_bus &= ~(1 << bit) & 0xFF

    def write_oam_data(self, value: int) -> None:
        """Store a byte at OAMADDR and advance it."""
        value &= 0xFF
        self.open_bus = value
        self.oam_ram[self.oam_address] = value
        self.oam_address = (self.oam_address + 1) & 0xFF

    def _write_control(self, value: int) -> None:
        control = Control(value)
        if not self.control.nmi_on_vblank and control.nmi_on_vblank:
            self.force_nmi = True
        self.control = control
        self.t_address.nametable = control.nametable

    def _read_oam_data(self) -> int:
        value = self.oam_ram[self.oam_address]
        if self.oam_address % 4 == 2:
            # Unused attribute bits always read back as zero.
            return value & 0b1110_0011
        return value

    def _write_scroll(self, value: int) -> None:
        if self.latch:
            self.t_address.fine_y = value
            self.t_address.coarse_y = value >> 3
        else:
            self.fine_x = value & 0b0000_0111
            self.t_address.coarse_x = value >> 3
        self.latch = not self.latch

    def _write_address(self, value: int) -> None:
        if self.latch:
            self.t_address.low_byte = value
            self.v_address = Address(self.t_address.value)
        else:
            self.t_address.high_byte = value
        self.latch = not self.latch

    def _write_data(self, value: int) -> None:
        self.vram.write_byte(self.v_address.address, value)
        self.v_address.increment(self.control.increment_amount())

    def _read_status(self) -> int:
        result = self.status.value
        self.status.vblank = False
        self.latch = False
        self.vblank_suppress = True
        return result

    def _read_data(self) -> int:
        address = self.v_address.address
        self.v_address.increment(self.control.increment_amount())
        return self.vram.buffered_read_byte(address)