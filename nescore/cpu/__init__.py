"""The 6502 CPU: registers, addressing modes, opcode tables and execution."""