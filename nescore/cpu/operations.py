"""The 6502 instruction set, documented and undocumented, on top of the CPU state."""

from __future__ import annotations

from typing import Callable

from .state import CpuState, Flag, Interrupt, Mode, cross, high_byte

_STACK_ONLY_FLAGS = int(Flag.PUSH | Flag.BREAK)


class Operations(CpuState):
    """One method per instruction; each does its own memory accesses and ticks."""

    # Helpers shared by several instructions

    def _load(self, mode: Mode) -> int:
        value = self.read_operand(mode)
        self.set_flags_zero_negative(value)
        return value

    def _store(self, mode: Mode, value: int) -> None:
        address = self.operand_address(mode)
        self.bus.write_byte(address, value & 0xFF)

    def _add(self, operand: int) -> None:
        a = self.a
        result = a + operand + self.carry()
        self.set_flags_carry_overflow(a, operand, result)
        self.set_flags_zero_negative(result)
        self.a = result & 0xFF

    def _compare(self, register: int, mode: Mode) -> None:
        operand = self.read_operand(mode)
        self.set_flags_zero_negative((register - operand) & 0xFF)
        self.set_flag(Flag.CARRY, register >= operand)

    def _logic(self, result: int) -> None:
        result &= 0xFF
        self.set_flags_zero_negative(result)
        self.a = result

    def _read_modify_write(self, mode: Mode, operation: Callable[[int], int]) -> int:
        address = self.operand_address(mode)
        operand = self.bus.read_byte(address)
        result = operation(operand) & 0xFF
        self.bus.tick()
        self.set_flags_zero_negative(result)
        self.bus.write_byte(address, result)
        return result

    def _modify_accumulator(self, operation: Callable[[int], int]) -> None:
        result = operation(self.a) & 0xFF
        self.set_flags_zero_negative(result)
        self.a = result
        self.bus.tick()

    def _rol_value(self, operand: int) -> int:
        result = ((operand << 1) | self.carry()) & 0xFF
        self.set_flag(Flag.CARRY, bool(operand & 0x80))
        return result

    def _ror_value(self, operand: int) -> int:
        result = (operand >> 1) | (self.carry() << 7)
        self.set_flag(Flag.CARRY, bool(operand & 1))
        return result

    def _asl_value(self, operand: int) -> int:
        self.set_flag(Flag.CARRY, bool(operand & 0x80))
        return (operand << 1) & 0xFF

    def _lsr_value(self, operand: int) -> int:
        self.set_flag(Flag.CARRY, bool(operand & 1))
        return operand >> 1

    def _transfer(self, value: int) -> int:
        self.bus.tick()
        self.set_flags_zero_negative(value)
        return value & 0xFF

    def _flag_op(self, flag: Flag, value: bool) -> None:
        self.set_flag(flag, value)
        self.bus.tick()

    # Loads

    def lda(self, mode: Mode) -> None:
        """Load A."""
        self.a = self._load(mode)

    def ldx(self, mode: Mode) -> None:
        """Load X."""
        self.x = self._load(mode)

    def ldy(self, mode: Mode) -> None:
        """Load Y."""
        self.y = self._load(mode)

    # Stores

    def sta(self, mode: Mode) -> None:
        """Store A."""
        self._store(mode, self.a)

    def stx(self, mode: Mode) -> None:
        """Store X."""
        self._store(mode, self.x)

    def sty(self, mode: Mode) -> None:
        """Store Y."""
        self._store(mode, self.y)

    # Arithmetic and comparisons

    def adc(self, mode: Mode) -> None:
        """Add with carry."""
        self._add(self.read_operand(mode))

    def sbc(self, mode: Mode) -> None:
        """Subtract with borrow."""
        self._add(~self.read_operand(mode) & 0xFF)

    def cmp(self, mode: Mode) -> None:
        """Compare A."""
        self._compare(self.a, mode)

    def cpx(self, mode: Mode) -> None:
        """Compare X."""
        self._compare(self.x, mode)

    def cpy(self, mode: Mode) -> None:
        """Compare Y."""
        self._compare(self.y, mode)

    # Bitwise operations

    def and_(self, mode: Mode) -> None:
        """A &= operand."""
        self._logic(self.a & self.read_operand(mode))

    def ora(self, mode: Mode) -> None:
        """A |= operand."""
        self._logic(self.a | self.read_operand(mode))

    def eor(self, mode: Mode) -> None:
        """A ^= operand."""
        self._logic(self.a ^ self.read_operand(mode))

    def bit(self, mode: Mode) -> None:
        """Test bits of memory against A."""
        operand = self.read_operand(mode)
        self.set_flag(Flag.ZERO, (self.a & operand) == 0)
        self.set_flag(Flag.OVERFLOW, bool(operand & 0x40))
        self.set_flag(Flag.NEGATIVE, bool(operand & 0x80))

    # Shifts and rotates

    def rol(self, mode: Mode) -> None:
        """Rotate memory left through carry."""
        self._read_modify_write(mode, self._rol_value)

    def rol_a(self) -> None:
        """Rotate A left through carry."""
        self._modify_accumulator(self._rol_value)

    def ror(self, mode: Mode) -> None:
        """Rotate memory right through carry."""
        self._read_modify_write(mode, self._ror_value)

    def ror_a(self) -> None:
        """Rotate A right through carry."""
        self._modify_accumulator(self._ror_value)

    def asl(self, mode: Mode) -> None:
        """Shift memory left."""
        self._read_modify_write(mode, self._asl_value)

    def asl_a(self) -> None:
        """Shift A left."""
        self._modify_accumulator(self._asl_value)

    def lsr(self, mode: Mode) -> None:
        """Shift memory right."""
        self._read_modify_write(mode, self._lsr_value)

    def lsr_a(self) -> None:
        """Shift A right."""
        self._modify_accumulator(self._lsr_value)

    # Increments and decrements

    def inc(self, mode: Mode) -> None:
        """Increment memory."""
        self._read_modify_write(mode, lambda v: v + 1)

    def dec(self, mode: Mode) -> None:
        """Decrement memory."""
        self._read_modify_write(mode, lambda v: v - 1)

    def inx(self) -> None:
        """Increment X."""
        self.x = self._transfer((self.x + 1) & 0xFF)

    def dex(self) -> None:
        """Decrement X."""
        self.x = self._transfer((self.x - 1) & 0xFF)

    def iny(self) -> None:
        """Increment Y."""
        self.y = self._transfer((self.y + 1) & 0xFF)

    def dey(self) -> None:
        """Decrement Y."""
        self.y = self._transfer((self.y - 1) & 0xFF)

    # Register moves

    def tax(self) -> None:
        """X = A."""
        self.x = self._transfer(self.a)

    def tay(self) -> None:
        """Y = A."""
        self.y = self._transfer(self.a)

    def txa(self) -> None:
        """A = X."""
        self.a = self._transfer(self.x)

    def tya(self) -> None:
        """A = Y."""
        self.a = self._transfer(self.y)

    def txs(self) -> None:
        """SP = X, without touching flags."""
        self.bus.tick()
        self.sp = self.x

    def tsx(self) -> None:
        """X = SP."""
        self.x = self._transfer(self.sp)

    # Flag operations

    def clc(self) -> None:
        """Clear carry."""
        self._flag_op(Flag.CARRY, False)

    def sec(self) -> None:
        """Set carry."""
        self._flag_op(Flag.CARRY, True)

    def cli(self) -> None:
        """Enable interrupts."""
        self._flag_op(Flag.IRQ_DISABLE, False)

    def sei(self) -> None:
        """Disable interrupts."""
        self._flag_op(Flag.IRQ_DISABLE, True)

    def clv(self) -> None:
        """Clear overflow."""
        self._flag_op(Flag.OVERFLOW, False)

    def cld(self) -> None:
        """Clear decimal mode."""
        self._flag_op(Flag.DECIMAL, False)

    def sed(self) -> None:
        """Set decimal mode."""
        self._flag_op(Flag.DECIMAL, True)

    # Branches

    def branch(self, condition: bool) -> None:
        """Read a signed displacement and take it when *condition* holds."""
        displacement = self.read_operand(Mode.IMMEDIATE)
        if displacement >= 0x80:
            displacement -= 0x100
        if not condition:
            return
        self.bus.tick()
        new_pc = (self.pc + displacement) & 0xFFFF
        if high_byte(self.pc) != high_byte(new_pc):
            self.bus.dummy_read(self.pc, new_pc)
        self.pc = new_pc

    def bpl(self) -> None:
        """Branch if positive."""
        self.branch(not self.get_flag(Flag.NEGATIVE))

    def bmi(self) -> None:
        """Branch if negative."""
        self.branch(self.get_flag(Flag.NEGATIVE))

    def bvc(self) -> None:
        """Branch if overflow clear."""
        self.branch(not self.get_flag(Flag.OVERFLOW))

    def bvs(self) -> None:
        """Branch if overflow set."""
        self.branch(self.get_flag(Flag.OVERFLOW))

    def bcc(self) -> None:
        """Branch if carry clear."""
        self.branch(not self.get_flag(Flag.CARRY))

    def bcs(self) -> None:
        """Branch if carry set."""
        self.branch(self.get_flag(Flag.CARRY))

    def bne(self) -> None:
        """Branch if not zero."""
        self.branch(not self.get_flag(Flag.ZERO))

    def beq(self) -> None:
        """Branch if zero."""
        self.branch(self.get_flag(Flag.ZERO))

    # Jumps and procedure calls

    def jmp(self, mode: Mode) -> None:
        """Jump to the operand address."""
        self.pc = self.operand_address(mode)

    def jsr(self) -> None:
        """Push the return address minus one and jump."""
        self.push_word((self.pc + 1) & 0xFFFF)
        target = self.operand_address(Mode.ABSOLUTE)
        self.bus.tick()
        self.pc = target

    def rts(self) -> None:
        """Return from a subroutine."""
        self.bus.tick()
        self.bus.tick()
        self.pc = (self.pop_word() + 1) & 0xFFFF
        self.bus.tick()

    def brk(self) -> None:
        """Software interrupt."""
        self.pc = (self.pc + 1) & 0xFFFF
        self.interrupt(Interrupt.BREAK)

    def rti(self) -> None:
        """Return from an interrupt."""
        self.p = self.pop_byte()
        self.pc = self.pop_word()

    # Stack operations

    def pha(self) -> None:
        """Push A."""
        self.bus.tick()
        self.push_byte(self.a)

    def pla(self) -> None:
        """Pull A."""
        self.bus.tick()
        self.bus.tick()
        self.a = self._load_value(self.pop_byte())

    def _load_value(self, value: int) -> int:
        self.set_flags_zero_negative(value)
        return value & 0xFF

    def php(self) -> None:
        """Push P with the Break and Push bits set."""
        self.bus.tick()
        self.push_byte(int(self.p) | _STACK_ONLY_FLAGS)

    def plp(self) -> None:
        """Pull P; the Break and Push bits never reach the register."""
        self.bus.tick()
        self.bus.tick()
        self.p = self.pop_byte() & ~_STACK_ONLY_FLAGS & 0xFF

    def nop(self) -> None:
        """Do nothing for one cycle."""
        self.bus.tick()

    # Undocumented operations

    def slo(self, mode: Mode) -> None:
        """ASL memory, then ORA."""
        self._logic(self.a | self._read_modify_write(mode, self._asl_value))

    def rla(self, mode: Mode) -> None:
        """ROL memory, then AND."""
        self._logic(self.a & self._read_modify_write(mode, self._rol_value))

    def sre(self, mode: Mode) -> None:
        """LSR memory, then EOR."""
        self._logic(self.a ^ self._read_modify_write(mode, self._lsr_value))

    def rra(self, mode: Mode) -> None:
        """ROR memory, then ADC."""
        self._add(self._read_modify_write(mode, self._ror_value))

    def sax(self, mode: Mode) -> None:
        """Store A & X."""
        self._store(mode, self.a & self.x)

    def lax(self, mode: Mode) -> None:
        """Load A and X."""
        self.lda(mode)
        self.x = self.a

    def dcp(self, mode: Mode) -> None:
        """DEC memory, then CMP."""
        result = self._read_modify_write(mode, lambda v: v - 1)
        a = self.a
        self.set_flags_zero_negative((a - result) & 0xFF)
        self.set_flag(Flag.CARRY, a >= result)

    def isc(self, mode: Mode) -> None:
        """INC memory, then SBC."""
        self._add(~self._read_modify_write(mode, lambda v: v + 1) & 0xFF)

    def anc(self) -> None:
        """AND immediate, copying N into C."""
        result = self.a & self.read_operand(Mode.IMMEDIATE)
        self.set_flags_zero_negative(result)
        self.set_flag(Flag.CARRY, bool(result & 0x80))
        self.a = result

    def alr(self) -> None:
        """AND immediate, then LSR A."""
        result = self.a & self.read_operand(Mode.IMMEDIATE)
        self.set_flag(Flag.CARRY, bool(result & 1))
        result >>= 1
        self.set_flags_zero_negative(result)
        self.a = result

    def arr(self) -> None:
        """AND immediate, then ROR A with odd flag rules."""
        operand = self.read_operand(Mode.IMMEDIATE)
        result = ((self.a & operand) >> 1) | (self.carry() << 7)
        bit_6 = (result >> 6) & 1
        bit_5 = (result >> 5) & 1
        self.set_flag(Flag.CARRY, bit_6 == 1)
        self.set_flag(Flag.OVERFLOW, (bit_6 ^ bit_5) == 1)
        self.set_flags_zero_negative(result)
        self.a = result

    def xaa(self) -> None:
        """TXA, then AND immediate."""
        self.txa()
        self.and_(Mode.IMMEDIATE)

    def lxa(self) -> None:
        """LDA immediate, then TAX."""
        self.lda(Mode.IMMEDIATE)
        self.tax()

    def axs(self) -> None:
        """X = (A & X) - immediate, without borrow."""
        masked = self.a & self.x
        operand = self.read_operand(Mode.IMMEDIATE)
        result = (masked - operand) & 0xFF
        self.set_flag(Flag.CARRY, masked >= operand)
        self.set_flags_zero_negative(result)
        self.x = result

    def sbc_nop(self) -> None:
        """SBC immediate followed by an idle cycle."""
        self.sbc(Mode.IMMEDIATE)
        self.nop()

    def ahx(self, mode: Mode) -> None:
        """Store A & X & (high byte of address + 1)."""
        address = self.operand_address(mode)
        result = self.a & self.x & (((address >> 8) + 1) & 0xFF)
        self.bus.write_byte(address, result)

    def shx(self) -> None:
        """Store X & (high byte of address + 1), absolute Y."""
        address = self.operand_address(Mode.ABSOLUTE_Y)
        if cross((address - self.y) & 0xFFFF, self.y):
            address &= self.x << 8
        result = self.x & (((address >> 8) + 1) & 0xFF)
        self.bus.write_byte(address, result)

    def shy(self) -> None:
        """Store Y & (high byte of address + 1), absolute X."""
        address = self.operand_address(Mode.ABSOLUTE_X)
        if cross((address - self.x) & 0xFFFF, self.x):
            address &= self.y << 8
        result = self.y & (((address >> 8) + 1) & 0xFF)
        self.bus.write_byte(address, result)

    def tas(self, mode: Mode) -> None:
        """SP = A & X, then store SP & (high byte of address + 1)."""
        address = self.operand_address(mode)
        self.sp = self.x & self.a
        result = self.sp & (((address >> 8) + 1) & 0xFF)
        self.bus.write_byte(address, result)

    def las(self, mode: Mode) -> None:
        """A = X = SP = memory & SP."""
        result = self.read_operand(mode) & self.sp
        self.a = result
        self.x = result
        self.sp = result
        self.set_flags_zero_negative(result)

    def nop_read(self, mode: Mode) -> None:
        """Read the operand and discard it."""
        self.read_operand(mode)