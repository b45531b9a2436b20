"""The picture processing unit as a whole."""

from __future__ import annotations

import random
from typing import Optional

from .registers import Registers
from .renderer import PpuResult, Renderer


class Ppu:
    """Register file plus renderer, clocked one dot at a time."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.registers = Registers(rng)
        self.renderer = Renderer()
        self.reset()

    def tick(self) -> PpuResult:
        """Run one dot and move on to the next."""
        result = self.renderer.tick(self.registers)
        self.renderer.step()
        return result

    def tick_decay(self) -> None:
        """Let the open-bus value decay."""
        self.registers.tick_decay()

    def reset(self) -> None:
        """Reset registers and renderer."""
        self.registers.reset()
        self.renderer.reset()

    def write_register(self, address: int, value: int) -> None:
        """CPU write to a PPU register."""
        self.registers.write_register(address, value)

    def read_register(self, address: int) -> int:
        """CPU read of a PPU register."""
        return self.registers.read_register(address)