"""CPU registers, stack, flags, addressing modes and interrupts."""

from __future__ import annotations

from enum import Enum, IntFlag, auto
from typing import Protocol

from .opcodes import INSTRUCTION_NAMES, INSTRUCTION_SIZES


class Flag(IntFlag):
    """Bits of the processor status register."""

    CARRY = 0b0000_0001
    ZERO = 0b0000_0010
    IRQ_DISABLE = 0b0000_0100
    DECIMAL = 0b0000_1000
    BREAK = 0b0001_0000
    PUSH = 0b0010_0000
    OVERFLOW = 0b0100_0000
    NEGATIVE = 0b1000_0000


class Mode(Enum):
    """Addressing modes; the *_FORCE_TICK variants always spend the extra cycle."""

    IMMEDIATE = auto()
    ZERO_PAGE = auto()
    ZERO_PAGE_X = auto()
    ZERO_PAGE_Y = auto()
    ABSOLUTE = auto()
    ABSOLUTE_X = auto()
    ABSOLUTE_X_FORCE_TICK = auto()
    ABSOLUTE_Y_FORCE_TICK = auto()
    ABSOLUTE_Y = auto()
    INDIRECT = auto()
    INDIRECT_X = auto()
    INDIRECT_Y = auto()
    INDIRECT_Y_FORCE_TICK = auto()
    NO_MODE = auto()


class Interrupt(Enum):
    """Kinds of interrupt sequence."""

    NMI = auto()
    RESET = auto()
    IRQ = auto()
    BREAK = auto()


# kind -> (idle ticks, pushes state, vector address)
_INTERRUPTS = {
    Interrupt.NMI: (2, True, 0xFFFA),
    Interrupt.RESET: (5, False, 0xFFFC),
    Interrupt.IRQ: (2, True, 0xFFFE),
    Interrupt.BREAK: (1, True, 0xFFFE),
}


class Bus(Protocol):
    """What the CPU needs from the system bus."""

    address_not_in_bus: bool

    def tick(self) -> None: ...

    def read_byte(self, address: int) -> int: ...

    def write_byte(self, address: int, value: int) -> None: ...

    def unclocked_read_byte(self, address: int) -> int: ...

    def dummy_read(self, base: int, address: int) -> None: ...

    def read_noncontinuous_word(self, low_address: int, high_address: int) -> int: ...

    def read_word(self, address: int) -> int: ...


def high_byte(value: int) -> int:
    """The high byte of a word, left in place."""
    return value & 0xFF00


def low_byte(value: int) -> int:
    """The low byte of a word."""
    return value & 0xFF


def offset(base: int, amount: int) -> int:
    """*base* plus an 8-bit index, as a 16-bit address."""
    return (base + amount) & 0xFFFF


def cross(base: int, amount: int) -> bool:
    """True when indexing *base* by *amount* lands on another page."""
    return high_byte(offset(base, amount)) != high_byte(base)


class CpuState:
    """Registers of the 6502 and the primitives every instruction is built from."""

    def __init__(self, bus: Bus) -> None:
        self.bus = bus
        self.pc = 0
        self.sp = 0
        self.a = 0
        self.x = 0
        self.y = 0
        self.p = 0

    def reset(self) -> None:
        """Run the reset sequence and jump through the reset vector."""
        self.sp = 0xFF
        self.p = 0x34
        self.interrupt(Interrupt.RESET)

    def push_byte(self, value: int) -> None:
        """Push a byte onto the stack page."""
        self.bus.write_byte(0x100 + self.sp, value & 0xFF)
        self.sp = (self.sp - 1) & 0xFF

    def pop_byte(self) -> int:
        """Pop a byte from the stack page."""
        self.sp = (self.sp + 1) & 0xFF
        return self.bus.read_byte(0x100 + self.sp)

    def push_word(self, value: int) -> None:
        """Push a word, high byte first."""
        self.push_byte((value >> 8) & 0xFF)
        self.push_byte(value & 0xFF)

    def pop_word(self) -> int:
        """Pop a word pushed by push_word."""
        low = self.pop_byte()
        high = self.pop_byte()
        return low | (high << 8)

    def _increment_pc(self) -> None:
        self.pc = (self.pc + 1) & 0xFFFF

    def next_byte(self) -> int:
        """Fetch the byte at the program counter and advance past it."""
        self.bus.address_not_in_bus = True
        value = self.bus.read_byte(self.pc)
        self._increment_pc()
        return value

    def next_word(self) -> int:
        """Fetch a little-endian word at the program counter."""
        low = self.next_byte()
        high = self.next_byte()
        return low | (high << 8)

    def get_flag(self, flag: Flag) -> bool:
        """Whether *flag* is set in P."""
        return bool(self.p & flag)

    def set_flag(self, flag: Flag, value: bool) -> None:
        """Set or clear *flag* in P."""
        if value:
            self.p |= flag
        else:
            self.p &= ~flag & 0xFF
        self.p = int(self.p)

    def set_flags_zero_negative(self, value: int) -> None:
        """Update Z and N from an 8-bit result."""
        value &= 0xFF
        self.set_flag(Flag.ZERO, value == 0)
        self.set_flag(Flag.NEGATIVE, bool(value & 0x80))

    def set_flags_carry_overflow(self, m: int, n: int, result: int) -> None:
        """Update C and V from the 9-bit sum of *m* and *n*."""
        self.set_flag(Flag.CARRY, result > 0xFF)
        r = result & 0xFF
        self.set_flag(Flag.OVERFLOW, bool((m ^ r) & (n ^ r) & 0x80))

    def carry(self) -> int:
        """The carry flag as 0 or 1."""
        return self.p & Flag.CARRY

    def operand_address(self, mode: Mode) -> int:
        """Effective address of the operand; PC must be just past the opcode."""
        bus = self.bus
        if mode is Mode.IMMEDIATE:
            address = self.pc
            self._increment_pc()
            return address
        if mode is Mode.ZERO_PAGE:
            return self.next_byte()
        if mode is Mode.ZERO_PAGE_X:
            bus.tick()
            return low_byte(self.next_byte() + self.x)
        if mode is Mode.ZERO_PAGE_Y:
            bus.tick()
            return low_byte(self.next_byte() + self.y)
        if mode is Mode.ABSOLUTE:
            return self.next_word()
        if mode in (Mode.ABSOLUTE_X, Mode.ABSOLUTE_X_FORCE_TICK):
            return self._indexed(self.next_word(), self.x, mode is Mode.ABSOLUTE_X_FORCE_TICK)
        if mode in (Mode.ABSOLUTE_Y, Mode.ABSOLUTE_Y_FORCE_TICK):
            return self._indexed(self.next_word(), self.y, mode is Mode.ABSOLUTE_Y_FORCE_TICK)
        if mode is Mode.INDIRECT:
            pointer = self.next_word()
            # The high byte is fetched without carrying into the next page.
            return bus.read_noncontinuous_word(
                pointer, high_byte(pointer) | low_byte(pointer + 1)
            )
        if mode is Mode.INDIRECT_X:
            bus.tick()
            pointer = self.next_byte() + self.x
            return bus.read_noncontinuous_word(low_byte(pointer), low_byte(pointer + 1))
        if mode in (Mode.INDIRECT_Y, Mode.INDIRECT_Y_FORCE_TICK):
            pointer = self.next_byte()
            base = bus.read_noncontinuous_word(pointer, low_byte(pointer + 1))
            return self._indexed(base, self.y, mode is Mode.INDIRECT_Y_FORCE_TICK)
        raise ValueError(f"{mode.name} cannot be used to address memory")

    def _indexed(self, base: int, index: int, force_tick: bool) -> int:
        address = offset(base, index)
        if force_tick or cross(base, index):
            self.bus.dummy_read(base, address)
        return address

    def read_operand(self, mode: Mode) -> int:
        """Read the operand byte for *mode*."""
        return self.bus.read_byte(self.operand_address(mode))

    def interrupt(self, kind: Interrupt) -> None:
        """Run an interrupt sequence and jump through its vector."""
        ticks, push, vector = _INTERRUPTS[kind]
        for _ in range(ticks):
            self.bus.tick()

        if push:
            # Break and Push exist only in the copy of P on the stack.
            pushed = self.p | Flag.PUSH
            if kind is Interrupt.BREAK:
                pushed |= Flag.BREAK
            else:
                pushed &= ~Flag.BREAK
            self.push_word(self.pc)
            self.push_byte(int(pushed) & 0xFF)

        if kind is not Interrupt.RESET:
            self.set_flag(Flag.IRQ_DISABLE, True)

        self.pc = self.bus.read_word(vector)

    def format_next_instruction(self) -> str:
        """One trace line describing the registers and the instruction at PC."""
        pc = self.pc
        bus = self.bus
        opcode = bus.unclocked_read_byte(pc)
        args = "".join(
            f"{bus.unclocked_read_byte((pc + i) & 0xFFFF):02X} "
            for i in range(1, INSTRUCTION_SIZES[opcode])
        )
        rom_offset = 15 + (pc % 0x4000)
        return (
            f"OFFSET:{rom_offset:06x}\tPC:{pc:04x}\tA:{self.a:02x}\tX:{self.x:02x}"
            f"\tY:{self.y:02x}\tP:{self.p:08b}\tTEST:{bus.unclocked_read_byte(0x6000):02x}"
            f"\t[{opcode:02x}] {INSTRUCTION_NAMES[opcode]}\t{args}"
        )