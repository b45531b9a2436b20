# nescore

The core of an NES emulator: a 6502 CPU and the picture processing unit
(PPU), both stepped one clock at a time. It has no dependencies outside the
standard library.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install .[test]
pytest
```

## The CPU

- `nescore.cpu.cpu.Cpu` runs the 6502 instruction set, the undocumented
  opcodes included. `execute_next_instruction()` first services a pending
  NMI (or an IRQ when interrupts are enabled), then fetches the opcode at
  the program counter and runs it with `execute_instruction(opcode)`.
  Opcodes with no behaviour of their own do nothing. Build it with
  `Cpu(bus, trace=True)` to print a trace line before each instruction.
- `nescore.cpu.operations.Operations` has one method per instruction
  (`lda`, `adc`, `jsr`, `slo`, ...), each doing its own memory accesses and
  calling `bus.tick()` for every cycle it spends.
- `nescore.cpu.state.CpuState` holds the registers `pc`, `sp`, `a`, `x`,
  `y` and `p`, the status flags (`Flag`), the addressing modes (`Mode`) and
  interrupt entry (`interrupt(Interrupt.NMI)` and so on). `reset()` runs the
  reset sequence and jumps through the reset vector.
  `format_next_instruction()` returns a trace line for the instruction at PC.
- `nescore.cpu.opcodes` gives the mnemonic and listed size of each opcode
  through `instruction_name(opcode)` and `instruction_size(opcode)`.

The CPU works through a bus object that you supply. It must provide what
`nescore.cpu.state.Bus` and `nescore.cpu.cpu.SystemBus` describe:
`tick()`, `read_byte()`, `write_byte()`, `unclocked_read_byte()`,
`dummy_read()`, `read_noncontinuous_word()`, `read_word()`, an
`address_not_in_bus` attribute, an `nmi` object with `ready()` and
`acknowledge()`, and `irq()`.

## The PPU

- `nescore.ppu.core.Ppu` brings together the register file
  (`nescore.ppu.registers.Registers`) and the scanline renderer
  (`nescore.ppu.renderer.Renderer`). Each `Ppu.tick()` runs one dot and
  returns a `PpuResult`: `NMI`, `DRAW` at the end of the visible frame,
  `SCANLINE` once per rendered line, or `NONE`. `write_register()` and
  `read_register()` are the CPU's view of 0x2000-0x2007.
- `nescore.ppu.vram.Vram` maps the PPU address space: pattern memory comes
  from an attached cartridge, nametables follow its `Mirroring`, and palette
  entries are mirrored as on the hardware. PPUDATA reads are buffered.
- `Renderer.pixels` holds the finished frame as 256 x 240 RGB values.

## Example

The renderer fetches pattern data on every visible scanline, so a
cartridge must be attached first. Any object with `mirroring()`,
`read_chr_byte()` and `write_chr_byte()` will do:

```python
from nescore.ppu.core import Ppu
from nescore.ppu.renderer import PpuResult
from nescore.ppu.vram import Mirroring


class ChrRam:
    def __init__(self):
        self.data = bytearray(0x2000)

    def mirroring(self):
        return Mirroring.VERTICAL

    def read_chr_byte(self, address):
        return self.data[address]

    def write_chr_byte(self, address, value):
        self.data[address] = value


ppu = Ppu()
ppu.registers.vram.set_cartridge(ChrRam())
ppu.write_register(0x2001, 0b0001_1110)  # show background and sprites

while ppu.tick() is not PpuResult.DRAW:
    pass

pixels = ppu.renderer.pixels  # 256 * 240 RGB values
```

`Ppu.reset()` detaches the cartridge, so attach it again after a reset.

## What this package does not do

It is only the CPU and the PPU. There is no system bus or memory map, no
cartridge or ROM-file loading, no mappers, no audio unit, no controller
input and no window or sound output. A program that plays games has to
supply these and drive `Cpu` and `Ppu` from them.