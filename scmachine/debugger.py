#!/usr/bin/env python3

"""
CPU Debugger

If live output is enabled, this will print information before each
instruction is executed:
    * All 16 of the [V] registers, starting with most significant (Vf) and
      reducing to least significant (V0)
    * I  - Index register
    * DT - Delay timer
    * ST - Sound timer
    * PC - Program counter
    * OP - OpCode number
    * IN - Decoded instruction

Verbose output (used when something goes wrong) adds:
    * RPL   - User flag registers
    * Stack - Stack contents

Instructions the CPU doesn't recognise are reported here whether or not live
output is enabled.  They are written to stderr once per address, and every
occurrence is kept in 'unsupported' for inspection.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import sys
from .opcodes import Op

# Formatted against an Instruction's fields
MNEMONICS = {
    Op.UNKNOWN:   "???",
    Op.CLS:       "CLS",
    Op.RET:       "RET",
    Op.JP:        "JP 0x{nnn:03x}",
    Op.CALL:      "CALL 0x{nnn:03x}",
    Op.SE_BYTE:   "SE V{x:01x}, 0x{nn:02x}",
    Op.SNE_BYTE:  "SNE V{x:01x}, 0x{nn:02x}",
    Op.SE_REG:    "SE V{x:01x}, V{y:01x}",
    Op.LD_BYTE:   "LD V{x:01x}, 0x{nn:02x}",
    Op.ADD_BYTE:  "ADD V{x:01x}, 0x{nn:02x}",
    Op.LD_REG:    "LD V{x:01x}, V{y:01x}",
    Op.OR:        "OR V{x:01x}, V{y:01x}",
    Op.AND:       "AND V{x:01x}, V{y:01x}",
    Op.XOR:       "XOR V{x:01x}, V{y:01x}",
    Op.ADD_REG:   "ADD V{x:01x}, V{y:01x}",
    Op.SUB:       "SUB V{x:01x}, V{y:01x}",
    Op.SHR:       "SHR V{x:01x}, V{y:01x}",
    Op.SUBN:      "SUBN V{x:01x}, V{y:01x}",
    Op.SHL:       "SHL V{x:01x}, V{y:01x}",
    Op.SNE_REG:   "SNE V{x:01x}, V{y:01x}",
    Op.LD_I:      "LD I, 0x{nnn:03x}",
    Op.JP_V0:     "JP V0, 0x{nnn:03x}",
    Op.RND:       "RND V{x:01x}, 0x{nn:02x}",
    Op.DRW:       "DRW V{x:01x}, V{y:01x}, 0x{n:01x}",
    Op.SKP:       "SKP V{x:01x}",
    Op.SKNP:      "SKNP V{x:01x}",
    Op.LD_VX_DT:  "LD V{x:01x}, DT",
    Op.LD_VX_K:   "LD V{x:01x}, K",
    Op.LD_DT_VX:  "LD DT, V{x:01x}",
    Op.LD_ST_VX:  "LD ST, V{x:01x}",
    Op.ADD_I:     "ADD I, V{x:01x}",
    Op.LD_F:      "LD F, V{x:01x}",
    Op.LD_B:      "LD B, V{x:01x}",
    Op.LD_MEM_VX: "LD [I], V{x:01x}",
    Op.LD_VX_MEM: "LD V{x:01x}, [I]",
    Op.SCD:       "SCD {n:01x}",
    Op.SCR:       "SCR",
    Op.SCL:       "SCL",
    Op.EXIT:      "EXIT",
    Op.LOW:       "LOW",
    Op.HIGH:      "HIGH",
    Op.LD_HF:     "LD HF, V{x:01x}",
    Op.LD_R_VX:   "LD R, V{x:01x}",
    Op.LD_VX_R:   "LD V{x:01x}, R"
}


class Debugger:
    def __init__(self, stream=None, report_stream=None):
        self.live = False
        self.stream = stream
        self.report_stream = report_stream
        self.unsupported = []
        self.reported_addresses = set()

    @staticmethod
    def disassemble(instruction):
        return MNEMONICS[instruction.op].format(**instruction._asdict())

    def debug(self, machine, instruction, verbose=False):
        registers = machine.registers
        debug_str = (
            "V: 0x" + ("{:02x}" * 16) + " I: 0x{:04x} DT: 0x{:02x} ST: 0x{:02x} PC: 0x{:03x} OP: 0x{:04x} IN: {}"
        ).format(
            *[registers.v[reg_num] for reg_num in range(15, -1, -1)] +
            [registers.i, machine.dt, machine.st, machine.debug_pc, instruction.opcode, self.disassemble(instruction)]
        )

        if verbose:
            debug_str += ("\nRPL: 0x" + "{:02x}" * 16).format(*[registers.rpl[reg_num] for reg_num in range(15, -1, -1)])
            stack_items = registers.get_stack()
            stack_str = (" 0x{:03x}" * len(stack_items)).format(*stack_items)
            debug_str += "\nStack:{}".format(stack_str or " (Empty)")

        return debug_str

    def set_live(self, enabled):
        self.live = enabled

    def is_live(self):
        return self.live

    def output(self, machine, instruction):
        print(self.debug(machine, instruction), file=self.stream or sys.stdout)

    def report_unsupported(self, machine, instruction):
        address = machine.debug_pc
        self.unsupported.append((address, instruction.opcode))

        # A program looping over the same bad instruction would otherwise flood the terminal
        if address in self.reported_addresses:
            return

        self.reported_addresses.add(address)
        print(
            "Opcode 0x{:04x} at address 0x{:03x} is not emulated, skipping.\n{}".format(
                instruction.opcode, address, self.debug(machine, instruction, verbose=True)
            ),
            file=self.report_stream or sys.stderr
        )
