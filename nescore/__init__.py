"""A cycle-stepped NES emulator core: 6502 CPU and picture processing unit."""

__version__ = "0.1.0"