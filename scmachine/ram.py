#!/usr/bin/env python3

"""
RAM Emulator

A fixed-size block of bytes, used both for the machine's 4K main memory and as
the pixel store behind the framebuffer (one byte per pixel).

Writes past the end of the block are refused rather than silently truncated.
Reads are left to the caller to mask, as the CPU already masks every address it
generates to 12 bits.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class RAMError(Exception):
    pass


class RAM:
    def __init__(self, mem_size=0):
        self.resize(mem_size)

    def resize(self, mem_size):
        # Reallocating is the quickest way to both resize and clear
        self.mem = memoryview(bytearray(mem_size))
        self.mem_top = mem_size - 1
        self.mem_size = mem_size

    def read(self, location):
        return self.mem[location]

    def read_block(self, location, size=1):
        return self.mem[location:location + size]

    def write(self, location, byte):
        self.check_overflow(location)
        self.mem[location] = byte

    def write_block(self, location, block):
        block_top = location + len(block)
        self.check_overflow(block_top - 1)
        self.mem[location:block_top] = block

    def check_overflow(self, location):
        if location > self.mem_top:
            raise RAMError("Memory overflow at 0x{:04x} (size 0x{:04x})".format(location, self.mem_size))

    def move_mem(self, offset):
        # Slice-based shift of the whole bank.  Negative offsets move data towards the start.  Leaves the original data
        # behind in the vacated area, so callers zero it afterwards.
        if offset == 0 or abs(offset) >= self.mem_size:
            return

        if offset < 0:
            self.mem[:offset] = self.mem[-offset:]
        else:
            self.mem[offset:] = self.mem[:-offset]

    def zero_block(self, offset, size):
        block_top = offset + size
        self.check_overflow(block_top - 1)
        self.mem[offset:block_top] = bytes(size)

    def clear(self):
        self.mem[:] = bytes(self.mem_size)

    def snapshot(self):
        # Immutable copy, safe to hand to another thread
        return self.mem.tobytes()
