"""The complete 6502 core: interrupt polling and opcode dispatch."""

from __future__ import annotations

from functools import partial
from typing import Callable, Dict, Protocol

from .operations import Operations
from .state import Bus, Flag, Interrupt, Mode


class _NmiLine(Protocol):
    def ready(self) -> bool: ...

    def acknowledge(self) -> None: ...


class SystemBus(Bus, Protocol):
    """The bus plus the interrupt lines the CPU polls between instructions."""

    nmi: _NmiLine

    def irq(self) -> bool: ...


def _standard(imm, zp, zpx, abs_, abx, aby, izx, izy) -> Dict[int, Mode]:
    return {
        imm: Mode.IMMEDIATE,
        zp: Mode.ZERO_PAGE,
        zpx: Mode.ZERO_PAGE_X,
        abs_: Mode.ABSOLUTE,
        abx: Mode.ABSOLUTE_X,
        aby: Mode.ABSOLUTE_Y,
        izx: Mode.INDIRECT_X,
        izy: Mode.INDIRECT_Y,
    }


def _read_modify_write(zp, zpx, abs_, abx) -> Dict[int, Mode]:
    return {
        zp: Mode.ZERO_PAGE,
        zpx: Mode.ZERO_PAGE_X,
        abs_: Mode.ABSOLUTE,
        abx: Mode.ABSOLUTE_X_FORCE_TICK,
    }


def _combined(zp, zpx, izx, izy, abs_, abx, aby) -> Dict[int, Mode]:
    return {
        zp: Mode.ZERO_PAGE,
        zpx: Mode.ZERO_PAGE_X,
        izx: Mode.INDIRECT_X,
        izy: Mode.INDIRECT_Y,
        abs_: Mode.ABSOLUTE,
        abx: Mode.ABSOLUTE_X,
        aby: Mode.ABSOLUTE_Y,
    }


_NOP_READ_MODES: Dict[int, Mode] = {
    0x0C: Mode.ABSOLUTE,
    **dict.fromkeys((0x1C, 0x3C, 0x5C, 0x7C, 0xDC, 0xFC), Mode.ABSOLUTE_X),
    **dict.fromkeys((0x04, 0x44, 0x64), Mode.ZERO_PAGE),
    **dict.fromkeys((0x14, 0x34, 0x54, 0x74, 0xD4, 0xF4), Mode.ZERO_PAGE_X),
    **dict.fromkeys((0x80, 0x82, 0x89, 0xC2, 0xE2), Mode.IMMEDIATE),
}

_WITH_MODE = (
    (Operations.lda, _standard(0xA9, 0xA5, 0xB5, 0xAD, 0xBD, 0xB9, 0xA1, 0xB1)),
    (
        Operations.ldx,
        {
            0xA2: Mode.IMMEDIATE,
            0xA6: Mode.ZERO_PAGE,
            0xB6: Mode.ZERO_PAGE_Y,
            0xAE: Mode.ABSOLUTE,
            0xBE: Mode.ABSOLUTE_Y,
        },
    ),
    (
        Operations.ldy,
        {
            0xA0: Mode.IMMEDIATE,
            0xA4: Mode.ZERO_PAGE,
            0xB4: Mode.ZERO_PAGE_X,
            0xAC: Mode.ABSOLUTE,
            0xBC: Mode.ABSOLUTE_X,
        },
    ),
    (
        Operations.sta,
        {
            0x85: Mode.ZERO_PAGE,
            0x95: Mode.ZERO_PAGE_X,
            0x8D: Mode.ABSOLUTE,
            0x9D: Mode.ABSOLUTE_X_FORCE_TICK,
            0x99: Mode.ABSOLUTE_Y_FORCE_TICK,
            0x81: Mode.INDIRECT_X,
            0x91: Mode.INDIRECT_Y_FORCE_TICK,
        },
    ),
    (Operations.stx, {0x86: Mode.ZERO_PAGE, 0x96: Mode.ZERO_PAGE_Y, 0x8E: Mode.ABSOLUTE}),
    (Operations.sty, {0x84: Mode.ZERO_PAGE, 0x94: Mode.ZERO_PAGE_X, 0x8C: Mode.ABSOLUTE}),
    (Operations.adc, _standard(0x69, 0x65, 0x75, 0x6D, 0x7D, 0x79, 0x61, 0x71)),
    (Operations.sbc, _standard(0xE9, 0xE5, 0xF5, 0xED, 0xFD, 0xF9, 0xE1, 0xF1)),
    (Operations.cmp, _standard(0xC9, 0xC5, 0xD5, 0xCD, 0xDD, 0xD9, 0xC1, 0xD1)),
    (Operations.cpx, {0xE0: Mode.IMMEDIATE, 0xE4: Mode.ZERO_PAGE, 0xEC: Mode.ABSOLUTE}),
    (Operations.cpy, {0xC0: Mode.IMMEDIATE, 0xC4: Mode.ZERO_PAGE, 0xCC: Mode.ABSOLUTE}),
    (Operations.and_, _standard(0x29, 0x25, 0x35, 0x2D, 0x3D, 0x39, 0x21, 0x31)),
    (Operations.ora, _standard(0x09, 0x05, 0x15, 0x0D, 0x1D, 0x19, 0x01, 0x11)),
    (Operations.eor, _standard(0x49, 0x45, 0x55, 0x4D, 0x5D, 0x59, 0x41, 0x51)),
    (Operations.bit, {0x24: Mode.ZERO_PAGE, 0x2C: Mode.ABSOLUTE}),
    (Operations.rol, _read_modify_write(0x26, 0x36, 0x2E, 0x3E)),
    (Operations.ror, _read_modify_write(0x66, 0x76, 0x6E, 0x7E)),
    (Operations.asl, _read_modify_write(0x06, 0x16, 0x0E, 0x1E)),
    (Operations.lsr, _read_modify_write(0x46, 0x56, 0x4E, 0x5E)),
    (Operations.inc, _read_modify_write(0xE6, 0xF6, 0xEE, 0xFE)),
    (Operations.dec, _read_modify_write(0xC6, 0xD6, 0xCE, 0xDE)),
    (Operations.jmp, {0x4C: Mode.ABSOLUTE, 0x6C: Mode.INDIRECT}),
    (Operations.nop_read, _NOP_READ_MODES),
    (Operations.slo, _combined(0x07, 0x17, 0x03, 0x13, 0x0F, 0x1F, 0x1B)),
    (Operations.rla, _combined(0x27, 0x37, 0x23, 0x33, 0x2F, 0x3F, 0x3B)),
    (Operations.sre, _combined(0x47, 0x57, 0x43, 0x53, 0x4F, 0x5F, 0x5B)),
    (Operations.rra, _combined(0x67, 0x77, 0x63, 0x73, 0x6F, 0x7F, 0x7B)),
    (Operations.dcp, _combined(0xC7, 0xD7, 0xC3, 0xD3, 0xCF, 0xDF, 0xDB)),
    (Operations.isc, _combined(0xE7, 0xF7, 0xE3, 0xF3, 0xEF, 0xFF, 0xFB)),
    (
        Operations.sax,
        {
            0x87: Mode.ZERO_PAGE,
            0x97: Mode.ZERO_PAGE_Y,
            0x83: Mode.INDIRECT_X,
            0x8F: Mode.ABSOLUTE,
        },
    ),
    (
        Operations.lax,
        {
            0xA7: Mode.ZERO_PAGE,
            0xB7: Mode.ZERO_PAGE_Y,
            0xA3: Mode.INDIRECT_X,
            0xB3: Mode.INDIRECT_Y,
            0xAF: Mode.ABSOLUTE,
            0xBF: Mode.ABSOLUTE_Y,
        },
    ),
    (Operations.ahx, {0x93: Mode.INDIRECT_Y, 0x9F: Mode.ABSOLUTE_Y}),
    (Operations.tas, {0x9B: Mode.ABSOLUTE_Y}),
    (Operations.las, {0xBB: Mode.ABSOLUTE_Y}),
)

_IMPLIED: Dict[int, Callable[[Operations], None]] = {
    0x2A: Operations.rol_a,
    0x6A: Operations.ror_a,
    0x0A: Operations.asl_a,
    0x4A: Operations.lsr_a,
    0xE8: Operations.inx,
    0xCA: Operations.dex,
    0xC8: Operations.iny,
    0x88: Operations.dey,
    0xAA: Operations.tax,
    0xA8: Operations.tay,
    0x8A: Operations.txa,
    0x98: Operations.tya,
    0x9A: Operations.txs,
    0xBA: Operations.tsx,
    0x18: Operations.clc,
    0x38: Operations.sec,
    0x58: Operations.cli,
    0x78: Operations.sei,
    0xB8: Operations.clv,
    0xD8: Operations.cld,
    0xF8: Operations.sed,
    0x10: Operations.bpl,
    0x30: Operations.bmi,
    0x50: Operations.bvc,
    0x70: Operations.bvs,
    0x90: Operations.bcc,
    0xB0: Operations.bcs,
    0xD0: Operations.bne,
    0xF0: Operations.beq,
    0x20: Operations.jsr,
    0x60: Operations.rts,
    0x00: Operations.brk,
    0x40: Operations.rti,
    0x48: Operations.pha,
    0x68: Operations.pla,
    0x08: Operations.php,
    0x28: Operations.plp,
    0xEA: Operations.nop,
    **dict.fromkeys((0x1A, 0x3A, 0x5A, 0x7A, 0xDA, 0xFA), Operations.nop),
    0x0B: Operations.anc,
    0x2B: Operations.anc,
    0x4B: Operations.alr,
    0x6B: Operations.arr,
    0x8B: Operations.xaa,
    0xAB: Operations.lxa,
    0xCB: Operations.axs,
    0xEB: Operations.sbc_nop,
    0x9C: Operations.shy,
    0x9E: Operations.shx,
}


def _ping(_cpu: Operations) -> None:
    print("----------------PING----------------------")


def _build_dispatch() -> Dict[int, Callable[[Operations], None]]:
    table: Dict[int, Callable[[Operations], None]] = dict(_IMPLIED)
    for method, modes in _WITH_MODE:
        for opcode, mode in modes.items():
            table[opcode] = partial(method, mode=mode)
    table[0x02] = _ping
    return table


_DISPATCH = _build_dispatch()


class Cpu(Operations):
    """A 6502 that polls interrupts and runs one instruction at a time."""

    def __init__(self, bus: SystemBus, *, trace: bool = False) -> None:
        super().__init__(bus)
        self.trace = trace

    def execute_next_instruction(self) -> None:
        """Service a pending interrupt, then fetch and run the next instruction."""
        bus = self.bus
        if bus.nmi.ready():
            bus.nmi.acknowledge()
            self.interrupt(Interrupt.NMI)
        elif bus.irq() and not self.get_flag(Flag.IRQ_DISABLE):
            self.interrupt(Interrupt.IRQ)

        if self.trace:
            print(self.format_next_instruction())

        self.execute_instruction(self.next_byte())

    def execute_instruction(self, opcode: int) -> None:
        """Run *opcode*; operands are fetched from the program counter.

        Opcodes with no behaviour of their own (the jams) do nothing.
        """
        handler = _DISPATCH.get(opcode)
        if handler is not None:
            handler(self)