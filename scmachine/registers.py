#!/usr/bin/env python3

"""
Register File

Holds the CPU's visible state: sixteen 8-bit V registers (VF doubling as the
carry, borrow and collision flag), the index register I, the program counter
and the call stack.  Also holds the Super-CHIP 'user flags' (RPL) store, which
survives resets.

The call stack is kept out of system RAM.  There is no specified location for
it, and no stack pointer is exposed to programs, so a bounded list is enough.
Overflowing or underflowing it means the guest program is broken, and this is
raised to whoever is running the machine.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import PROGRAM_START, STACK_SIZE

ADDR_MASK = 0xFFF


class StackError(Exception):
    pass


class RegisterFile:
    def __init__(self, stack_size=STACK_SIZE):
        self.stack_size = stack_size
        self.rpl = memoryview(bytearray(16))  # User flags, one per V register
        self.v = memoryview(bytearray(16))
        self.reset()

    def reset(self):
        # User flags survive a reset
        self.v[:] = bytes(16)
        self.i = 0
        self.pc = PROGRAM_START
        self.stack = []

    def advance(self):
        self.pc = (self.pc + 2) & ADDR_MASK

    def rewind(self):
        # Only used to re-run an instruction (waiting for a keypress)
        self.pc = (self.pc - 2) & ADDR_MASK

    def jump(self, address):
        self.pc = address & ADDR_MASK

    def call(self, address):
        # Fetching the stack size with 'len' should be immediate, so no slow loop
        if len(self.stack) >= self.stack_size:
            raise StackError("Stack overflow calling 0x{:03x} from 0x{:03x}".format(address, self.pc))

        self.stack.append(self.pc)
        self.jump(address)

    def ret(self):
        try:
            address = self.stack.pop()
        except IndexError:
            raise StackError("Stack underflow returning from 0x{:03x}".format(self.pc)) from None

        self.jump(address)

    def get_stack(self):
        # For debugging
        return list(self.stack)
