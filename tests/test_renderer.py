import pytest

from nescore.ppu.control import Control
from nescore.ppu.mask import Mask
from nescore.ppu.registers import Registers
from nescore.ppu.renderer import BitPlane, PpuResult, Renderer
from nescore.ppu.sprite import Sprite
from nescore.ppu.vram import Mirroring


class _ChrRam:
    def __init__(self):
        self.chr = bytearray(0x2000)

    def mirroring(self):
        return Mirroring.HORIZONTAL

    def read_chr_byte(self, address):
        return self.chr[address]

    def write_chr_byte(self, address, value):
        self.chr[address] = value


def test_evaluate_sprites():
    regs = Registers()
    renderer = Renderer()
    renderer.scanline = 10
    regs.oam_ram[0] = 10
    regs.oam_ram[4] = 10 - 7
    regs.oam_ram[8] = 10 - 8
    regs.oam_ram[12] = 11
    renderer.eval_sprites(regs)
    assert len(renderer.secondary_oam) == 2
    assert [s.oam_index for s in renderer.secondary_oam] == [0, 1]


def test_sprite_overflow():
    regs = Registers()
    renderer = Renderer()
    renderer.scanline = 10
    for i in range(8):
        regs.oam_ram[i * 4] = 10
    renderer.eval_sprites(regs)
    assert len(renderer.secondary_oam) == 8
    assert regs.status.sprite_overflow is False

    regs.oam_ram[8 * 4] = 10
    renderer.eval_sprites(regs)
    assert len(renderer.secondary_oam) == 8
    assert regs.status.sprite_overflow is True


def test_load_sprites():
    regs = Registers()
    renderer = Renderer()
    regs.vram.set_cartridge(_ChrRam())
    for i in range(256):
        regs.vram.write_byte(i, i)

    renderer.secondary_oam.append(Sprite.from_oam(0, [5, 3, 1, 2]))
    renderer.scanline = 6
    renderer.load_sprites(regs)

    secondary = renderer.secondary_oam[0]
    primary = renderer.primary_oam[0]
    assert secondary.x == primary.x
    assert secondary.y == primary.y
    assert secondary.status == primary.status
    assert secondary.tile_index == primary.tile_index

    address = primary.tile_address(renderer.scanline, regs.control)
    assert primary.data_low == address & 0xFF
    assert primary.data_high == (address + 8) & 0xFF
    assert secondary.data_low == 0


def test_step():
    renderer = Renderer()
    renderer.dot = 0
    renderer.scanline = 0
    renderer.step()
    assert (renderer.dot, renderer.scanline) == (1, 0)

    renderer.dot = 340
    renderer.scanline = 0
    renderer.step()
    assert (renderer.dot, renderer.scanline) == (0, 1)

    renderer.dot = 340
    renderer.scanline = 261
    renderer.step()
    assert (renderer.dot, renderer.scanline) == (0, 0)
    assert renderer.odd_frame is True


def test_render_background_pixel():
    regs = Registers()
    renderer = Renderer()
    regs.mask = Mask(0b0001_1110)
    renderer.background_shift.high = 0b1010_0000_0000_0000
    renderer.background_shift.low = 0b1100_0000_0000_0000
    renderer.attribute_shift.high = 0b1010_0000
    renderer.attribute_shift.low = 0b1100_0000
    regs.fine_x = 0
    assert renderer.render_background_pixel(0, regs) == 0b1111
    regs.mask = Mask(0b0001_1100)
    assert renderer.render_background_pixel(0, regs) == 0
    assert renderer.render_background_pixel(8, regs) == 0b1111
    regs.mask = Mask(0b0001_0110)
    assert renderer.render_background_pixel(0, regs) == 0


def test_render_sprite_pixel():
    regs = Registers()
    renderer = Renderer()

    s = Sprite.from_oam(0, [0, 0, 0, 0])
    s.data_low = 0b0100_0000
    s.data_high = 0b0100_0000
    renderer.primary_oam.append(s)

    s = Sprite.from_oam(1, [0, 0, 0b0010_0011, 0])
    s.data_low = 0b0000_0000
    s.data_high = 0b0001_0000
    renderer.primary_oam.append(s)

    s = Sprite.from_oam(2, [0, 0, 0, 0])
    s.data_low = 0b0100_0000
    s.data_high = 0b0000_0000
    renderer.primary_oam.append(s)

    regs.mask = Mask(0b0000_1110)
    assert renderer.render_sprite_pixel(0, regs) == (0, False, False)

    regs.mask = Mask(0b0001_1010)
    assert renderer.render_sprite_pixel(0, regs) == (0, False, False)

    regs.mask = Mask(0b0001_1110)
    assert renderer.render_sprite_pixel(1, regs) == (0b1_00_11, False, True)
    assert renderer.render_sprite_pixel(3, regs) == (0b1_11_10, True, False)


def test_reload_shift():
    renderer = Renderer()
    renderer.background_shift.low = 0b1010_1010_1010_1010
    renderer.background_shift.high = 0b0101_0101_0101_0101
    renderer.background_latch.low = 0b0000_0001
    renderer.background_latch.high = 0b0000_0010
    renderer.attribute_entry = 0b11

    renderer.reload_shift_registers()
    assert renderer.background_shift.low == 0b1010_1010_0000_0001
    assert renderer.background_shift.high == 0b0101_0101_0000_0010
    assert renderer.attribute_latch == BitPlane(low=1, high=1)


def test_shift():
    renderer = Renderer()
    renderer.background_shift.low = 0b1010_1010_1010_1010
    renderer.background_shift.high = 0b0101_0101_0101_0101
    renderer.attribute_latch.low = 0
    renderer.attribute_latch.high = 1
    renderer.shift()
    assert renderer.background_shift.low == 0b0101_0101_0101_0100
    assert renderer.background_shift.high == 0b1010_1010_1010_1010
    assert renderer.attribute_shift.low == 0
    assert renderer.attribute_shift.high == 1


def test_shift_stays_within_register_width():
    renderer = Renderer()
    renderer.background_shift = BitPlane(0xFFFF, 0xFFFF)
    renderer.attribute_shift = BitPlane(0xFF, 0xFF)
    renderer.attribute_latch = BitPlane(1, 1)
    for _ in range(20):
        renderer.shift()
    assert renderer.background_shift == BitPlane(0, 0)
    assert renderer.attribute_shift == BitPlane(0xFF, 0xFF)


def test_render_pixel_transparent_sprite_front():
    regs = Registers()
    renderer = Renderer()
    regs.mask = Mask(0b0001_1110)
    renderer.background_shift.high = 0b1111_0000_0000_0000
    renderer.background_shift.low = 0b1111_0000_0000_0000
    assert renderer.render_background_pixel(0, regs) == 0b11

    s = Sprite.from_oam(0, [0, 0, 0, 0])
    s.data_low = 0b0100_0000
    s.data_high = 0b0100_0000
    renderer.primary_oam.append(s)
    assert renderer.render_sprite_pixel(0, regs) == (0, False, False)
    assert renderer.render_pixel(0, 0, regs) == 0b11
    assert regs.status.sprite_zero_hit is False


def test_render_pixel_opaque_sprite_front():
    regs = Registers()
    renderer = Renderer()
    regs.mask = Mask(0b0001_1110)
    renderer.background_shift.high = 0b1111_0000_0000_0000
    renderer.background_shift.low = 0b1111_0000_0000_0000
    assert renderer.render_background_pixel(0, regs) == 0b11

    s = Sprite.from_oam(0, [0, 0, 0, 0])
    s.data_low = 0b1000_0000
    s.data_high = 0b0000_0000
    renderer.primary_oam.append(s)
    assert renderer.render_sprite_pixel(0, regs) == (0b1_00_01, False, True)
    assert renderer.render_pixel(0, 0, regs) == 0b1_00_01
    assert regs.status.sprite_zero_hit is True


def test_render_pixel_opaque_sprite_behind():
    regs = Registers()
    renderer = Renderer()
    regs.mask = Mask(0b0001_1110)
    renderer.background_shift.high = 0b1111_0000_0000_0000
    renderer.background_shift.low = 0b1111_0000_0000_0000
    assert renderer.render_background_pixel(0, regs) == 0b11

    s = Sprite.from_oam(0, [0, 0, 0b0010_0000, 0])
    s.data_low = 0b1000_0000
    s.data_high = 0b0000_0000
    renderer.primary_oam.append(s)
    assert renderer.render_sprite_pixel(0, regs) == (0b1_00_01, True, True)
    assert renderer.render_pixel(0, 0, regs) == 0b11
    assert regs.status.sprite_zero_hit is True


def test_render_pixel_off_screen_is_none():
    regs = Registers()
    renderer = Renderer()
    assert renderer.render_pixel(0, 240, regs) is None
    assert renderer.render_pixel(256, 0, regs) is None


def test_reset_clears_state():
    renderer = Renderer()
    renderer.scanline = 100
    renderer.dot = 50
    renderer.odd_frame = True
    renderer.pixels[5] = 123
    renderer.primary_oam.append(Sprite.from_oam(0, [0, 0, 0, 0]))
    renderer.reset()
    assert (renderer.scanline, renderer.dot, renderer.odd_frame) == (0, 0, False)
    assert renderer.primary_oam == []
    assert len(renderer.pixels) == 256 * 240
    assert set(renderer.pixels) == {0}


def test_tick_draw_at_start_of_post_render_line():
    regs = Registers()
    renderer = Renderer()
    renderer.scanline = 240
    renderer.dot = 0
    assert renderer.tick(regs) is PpuResult.DRAW


def test_tick_vblank_with_nmi():
    regs = Registers()
    regs.control = Control(0x80)
    renderer = Renderer()
    renderer.scanline = 241
    renderer.dot = 1
    assert renderer.tick(regs) is PpuResult.NMI
    assert regs.status.vblank is True


def test_tick_vblank_without_nmi():
    regs = Registers()
    renderer = Renderer()
    renderer.scanline = 241
    renderer.dot = 1
    assert renderer.tick(regs) is PpuResult.NONE
    assert regs.status.vblank is True


def test_tick_vblank_suppressed():
    regs = Registers()
    regs.control = Control(0x80)
    regs.vblank_suppress = True
    renderer = Renderer()
    renderer.scanline = 241
    renderer.dot = 1
    assert renderer.tick(regs) is PpuResult.NONE
    assert regs.status.vblank is False
    assert regs.vblank_suppress is False


def test_tick_forced_nmi_during_vblank():
    regs = Registers()
    regs.status.vblank = True
    regs.force_nmi = True
    renderer = Renderer()
    renderer.scanline = 250
    renderer.dot = 5
    assert renderer.tick(regs) is PpuResult.NMI
    assert regs.force_nmi is False


def test_tick_forced_nmi_colliding_with_draw_raises():
    regs = Registers()
    regs.status.vblank = True
    regs.force_nmi = True
    renderer = Renderer()
    renderer.scanline = 240
    renderer.dot = 0
    with pytest.raises(RuntimeError):
        renderer.tick(regs)


def test_pre_render_line_clears_flags():
    regs = Registers()
    regs.status.vblank = True
    regs.status.sprite_overflow = True
    regs.status.sprite_zero_hit = True
    renderer = Renderer()
    renderer.scanline = 261
    renderer.dot = 1
    assert renderer.tick(regs) is PpuResult.NONE
    assert regs.status.vblank is False
    assert regs.status.sprite_overflow is False
    assert regs.status.sprite_zero_hit is False


def test_scanline_result_only_while_rendering():
    regs = Registers()
    renderer = Renderer()
    renderer.scanline = 0
    renderer.dot = 260
    assert renderer.tick(regs) is PpuResult.NONE

    regs.mask = Mask(0b0000_1000)
    renderer.dot = 260
    assert renderer.tick(regs) is PpuResult.SCANLINE


@pytest.mark.parametrize(
    "palette_entry, rgb",
    [(0x00, 0x666666), (0x16, 0xB53120), (0x30, 0xFFFEFF)],
)
def test_tick_writes_backdrop_colour_when_not_rendering(palette_entry, rgb):
    regs = Registers()
    regs.vram.write_byte(0x3F00, palette_entry)
    renderer = Renderer()
    renderer.scanline = 0
    renderer.dot = 2
    renderer.scratch_address = 0x2000
    assert renderer.tick(regs) is PpuResult.NONE
    assert renderer.pixels[0] == rgb