"""Scanline renderer: background fetches, sprite evaluation and pixel output."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import List, Optional, Tuple

from .registers import Registers
from .sprite import Sprite, nth_bit

SCREEN_WIDTH = 256
SCREEN_HEIGHT = 240
DOTS_PER_SCANLINE = 341
LAST_SCANLINE = 261
PRE_RENDER_SCANLINE = 261
MAX_SPRITES_PER_LINE = 8
OAM_SPRITES = 64

# fmt: off
RGB = (
    0x666666, 0x002A88, 0x1412A7, 0x3B00A4, 0x5C007E, 0x6E0040, 0x6C0600, 0x561D00,
    0x333500, 0x0B4800, 0x005200, 0x004F08, 0x00404D, 0x000000, 0x000000, 0x000000,
    0xADADAD, 0x155FD9, 0x4240FF, 0x7527FE, 0xA01ACC, 0xB71E7B, 0xB53120, 0x994E00,
    0x6B6D00, 0x388700, 0x0C9300, 0x008F32, 0x007C8D, 0x000000, 0x000000, 0x000000,
    0xFFFEFF, 0x64B0FF, 0x9290FF, 0xC676FF, 0xF36AFF, 0xFE6ECC, 0xFE8170, 0xEA9E22,
    0xBCBE00, 0x88D800, 0x5CE430, 0x45E082, 0x48CDDE, 0x4F4F4F, 0x000000, 0x000000,
    0xFFFEFF, 0xC0DFFF, 0xD3D2FF, 0xE8C8FF, 0xFBC2FF, 0xFEC4EA, 0xFECCC5, 0xF7D8A5,
    0xE4E594, 0xCFEF96, 0xBDF4AB, 0xB3F3CC, 0xB5EBF2, 0xB8B8B8, 0x000000, 0x000000,
)
# fmt: on


class PpuResult(Enum):
    """Event produced by one PPU dot."""

    NMI = auto()
    DRAW = auto()
    SCANLINE = auto()
    NONE = auto()


@dataclass
class BitPlane:
    """A pair of low/high bit planes."""

    low: int = 0
    high: int = 0


class Renderer:
    """Dot-by-dot PPU rendering state."""

    def __init__(self) -> None:
        self.background_latch = BitPlane()
        self.background_shift = BitPlane()
        self.attribute_latch = BitPlane()
        self.attribute_shift = BitPlane()
        self.scanline = 0
        self.dot = 0
        self.odd_frame = False
        self.scratch_address = 0
        self.nametable_entry = 0
        self.attribute_entry = 0
        self.primary_oam: List[Sprite] = []
        self.secondary_oam: List[Sprite] = []
        self.pixels: List[int] = []
        self.reset()

    def clear_pixels(self) -> None:
        """Set every pixel of the frame to zero."""
        self.pixels = [0] * (SCREEN_WIDTH * SCREEN_HEIGHT)

    def reset(self) -> None:
        """Return to the start of an even frame with no sprites and a blank screen."""
        self.odd_frame = False
        self.scanline = 0
        self.dot = 0
        self.primary_oam.clear()
        self.secondary_oam.clear()
        self.clear_pixels()

    def tick(self, registers: Registers) -> PpuResult:
        """Run the current dot and report what it produced."""
        scanline, dot = self.scanline, self.dot
        if scanline < SCREEN_HEIGHT or scanline == PRE_RENDER_SCANLINE:
            pre = scanline == PRE_RENDER_SCANLINE
            self._tick_sprites(pre, registers)
            self._tick_pixel(registers)
            self._tick_background(pre, registers)
            result = self._tick_result(registers)
        elif (scanline, dot) == (240, 0):
            result = PpuResult.DRAW
        elif (scanline, dot) == (241, 1):
            result = PpuResult.NONE
            if not registers.vblank_suppress:
                registers.status.vblank = True
                if registers.control.nmi_on_vblank:
                    result = PpuResult.NMI
        else:
            result = PpuResult.NONE

        if (
            registers.status.vblank
            and registers.force_nmi
            and not registers.vblank_suppress
        ):
            if result is not PpuResult.NONE:
                raise RuntimeError(f"forced NMI collided with {result.name}")
            result = PpuResult.NMI
        registers.force_nmi = False
        registers.vblank_suppress = False
        return result

    def step(self) -> None:
        """Advance to the next dot, wrapping scanlines and frames."""
        self.dot += 1
        if self.dot >= DOTS_PER_SCANLINE:
            self.dot %= DOTS_PER_SCANLINE
            self.scanline += 1
            if self.scanline > LAST_SCANLINE:
                self.scanline = 0
                self.odd_frame = not self.odd_frame

    def eval_sprites(self, registers: Registers) -> None:
        """Collect the sprites visible on the next scanline into secondary OAM."""
        self.secondary_oam.clear()
        height = registers.control.sprite_height()
        for index in range(OAM_SPRITES):
            start = index * 4
            sprite = Sprite.from_oam(index, registers.oam_ram[start : start + 4])
            # Sprite y is stored one less than the line it appears on, so the
            # current scanline selects sprites for the next one.
            if sprite.y <= self.scanline < sprite.y + height:
                if len(self.secondary_oam) == MAX_SPRITES_PER_LINE:
                    registers.status.sprite_overflow = True
                    break
                self.secondary_oam.append(sprite)

    def load_sprites(self, registers: Registers) -> None:
        """Fetch pattern data for the evaluated sprites into primary OAM."""
        loaded = []
        for sprite in self.secondary_oam:
            address = sprite.tile_address(self.scanline, registers.control)
            loaded.append(
                replace(
                    sprite,
                    data_low=registers.vram.read_byte(address),
                    data_high=registers.vram.read_byte((address + 8) & 0xFFFF),
                )
            )
        self.primary_oam = loaded

    def render_pixel(self, x: int, y: int, registers: Registers) -> Optional[int]:
        """Palette index of the pixel at (x, y), or None off screen."""
        if y >= SCREEN_HEIGHT or x >= SCREEN_WIDTH:
            return None
        background = self.render_background_pixel(x, registers)
        sprite, behind, possible_zero_hit = self.render_sprite_pixel(x, registers)

        if possible_zero_hit and background != 0:
            registers.status.sprite_zero_hit = True

        front, back = (background, sprite) if behind else (sprite, background)
        return back if front == 0 else front

    def render_background_pixel(self, x: int, registers: Registers) -> int:
        """Four-bit background palette index at column *x*."""
        if not registers.mask.rendering_background(x):
            return 0
        fine_x = registers.fine_x
        color = nth_bit(self.background_shift.high, 15 - fine_x) << 1 | nth_bit(
            self.background_shift.low, 15 - fine_x
        )
        if color:
            attribute = nth_bit(self.attribute_shift.high, 7 - fine_x) << 1 | nth_bit(
                self.attribute_shift.low, 7 - fine_x
            )
            color |= attribute << 2
        return color

    def render_sprite_pixel(
        self, x: int, registers: Registers
    ) -> Tuple[int, bool, bool]:
        """Sprite colour, behind-background flag and possible sprite-0 hit at *x*."""
        if not registers.mask.rendering_sprites(x):
            return 0, False, False

        color = 0
        behind = False
        possible_zero_hit = False
        # Walk backwards so the lowest OAM index wins.
        for sprite in reversed(self.primary_oam):
            index = sprite.color_index(x)
            if index != 0:
                if sprite.oam_index == 0 and x != 255:
                    possible_zero_hit = True
                color = 0b1_00_00 | sprite.status.palette << 2 | index
                behind = sprite.status.behind_background
        return color, behind, possible_zero_hit

    def reload_shift_registers(self) -> None:
        """Load the latched tile and attribute bits into the shifters."""
        self.background_shift.low = (
            self.background_shift.low & 0xFF00
        ) | self.background_latch.low
        self.background_shift.high = (
            self.background_shift.high & 0xFF00
        ) | self.background_latch.high
        self.attribute_latch.low = self.attribute_entry & 1
        self.attribute_latch.high = (self.attribute_entry & 2) >> 1

    def shift(self) -> None:
        """Shift the background and attribute registers by one pixel."""
        self.background_shift.low = (self.background_shift.low << 1) & 0xFFFF
        self.background_shift.high = (self.background_shift.high << 1) & 0xFFFF
        self.attribute_shift.low = (
            (self.attribute_shift.low << 1) | self.attribute_latch.low
        ) & 0xFF
        self.attribute_shift.high = (
            (self.attribute_shift.high << 1) | self.attribute_latch.high
        ) & 0xFF

    def _tick_sprites(self, pre: bool, registers: Registers) -> None:
        if self.dot == 1:
            self.secondary_oam.clear()
            if pre:
                registers.status.sprite_overflow = False
                registers.status.sprite_zero_hit = False
        elif self.dot == 257:
            self.eval_sprites(registers)
        elif self.dot == 321:
            self.load_sprites(registers)

    def _tick_pixel(self, registers: Registers) -> None:
        dot = self.dot
        if 2 <= dot <= 257 or 322 <= dot <= 337:
            x = dot - 2
            y = self.scanline
            color = self.render_pixel(x, y, registers)
            if color is not None:
                self._set_pixel(x, y, color, registers)
            self.shift()

    def _tick_background(self, pre: bool, registers: Registers) -> None:
        dot = self.dot
        vram = registers.vram
        v = registers.v_address
        rendering = registers.mask.rendering()

        if 2 <= dot <= 255 or 322 <= dot <= 337:
            phase = dot % 8
            if phase == 1:
                self.scratch_address = v.nametable_address()
                self.reload_shift_registers()
            elif phase == 2:
                self.nametable_entry = vram.read_byte(self.scratch_address)
            elif phase == 3:
                self.scratch_address = v.attribute_address()
            elif phase == 4:
                self.attribute_entry = vram.read_byte(self.scratch_address)
                if v.coarse_y & 2:
                    self.attribute_entry >>= 4
                if v.coarse_x & 2:
                    self.attribute_entry >>= 2
            elif phase == 5:
                self.scratch_address = (
                    registers.control.background_tile_base()
                    + v.tile_offset(self.nametable_entry)
                ) & 0xFFFF
            elif phase == 6:
                self.background_latch.low = vram.read_byte(self.scratch_address)
            elif phase == 7:
                self.scratch_address = (self.scratch_address + 8) & 0xFFFF
            else:
                self.background_latch.high = vram.read_byte(self.scratch_address)
                if rendering:
                    v.scroll_x()
        elif dot == 256:
            self.background_latch.high = vram.read_byte(self.scratch_address)
            if rendering:
                v.scroll_y()
        elif dot == 257:
            self.reload_shift_registers()
            if rendering:
                v.copy_x(registers.t_address)
        elif 280 <= dot <= 304:
            if pre and rendering:
                v.copy_y(registers.t_address)
        elif dot == 1:
            self.scratch_address = v.nametable_address()
            if pre:
                registers.status.vblank = False
        elif dot in (321, 339):
            self.scratch_address = v.nametable_address()
        elif dot == 338:
            self.nametable_entry = vram.read_byte(self.scratch_address)
        elif dot == 340:
            self.nametable_entry = vram.read_byte(self.scratch_address)
            if pre and rendering and self.odd_frame:
                # Odd frames skip the first dot of the next frame.
                self.dot += 1

    def _tick_result(self, registers: Registers) -> PpuResult:
        if self.dot == 260 and registers.mask.rendering():
            return PpuResult.SCANLINE
        return PpuResult.NONE

    def _set_pixel(
        self, x: int, y: int, color_index: int, registers: Registers
    ) -> None:
        palette_offset = color_index if registers.mask.rendering() else 0
        rgb_index = registers.vram.read_byte(0x3F00 + palette_offset)
        self.pixels[y * SCREEN_WIDTH + x] = RGB[rgb_index]