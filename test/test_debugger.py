#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import io
import unittest
from scmachine.debugger import Debugger, MNEMONICS
from scmachine.machine import Machine
from scmachine.opcodes import Op, decode


class TestDebugger(unittest.TestCase):
    def setUp(self):
        self.stream = io.StringIO()
        self.report_stream = io.StringIO()
        self.debugger = Debugger(stream=self.stream, report_stream=self.report_stream)
        self.machine = Machine(debugger=self.debugger)

    def test_debugger_covers_every_op(self):
        self.assertEqual(set(Op), set(MNEMONICS))

    def test_debugger_disassemble(self):
        self.assertEqual("CLS", Debugger.disassemble(decode(0x00E0)))
        self.assertEqual("JP 0x2ab", Debugger.disassemble(decode(0x12AB)))
        self.assertEqual("SE V3, 0x4f", Debugger.disassemble(decode(0x334F)))
        self.assertEqual("DRW V1, V2, 0x5", Debugger.disassemble(decode(0xD125)))
        self.assertEqual("LD [I], Va", Debugger.disassemble(decode(0xFA55)))
        self.assertEqual("SCD 3", Debugger.disassemble(decode(0x00C3)))
        self.assertEqual("???", Debugger.disassemble(decode(0x8008)))

    def test_debugger_state_line(self):
        self.machine.registers.v[0xF] = 0xAB
        self.machine.registers.v[0x0] = 0x01
        self.machine.registers.i = 0x123
        self.machine.dt = 0x10
        line = self.debugger.debug(self.machine, decode(0x6005))
        self.assertTrue(line.startswith("V: 0xab"))
        self.assertIn("01 I: 0x0123 DT: 0x10 ST: 0x00 PC: 0x200 OP: 0x6005 IN: LD V0, 0x05", line)
        self.assertNotIn("Stack", line)

    def test_debugger_verbose(self):
        self.machine.registers.call(0x300)
        self.machine.registers.rpl[0] = 0x7
        text = self.debugger.debug(self.machine, decode(0x00EE), verbose=True)
        self.assertIn("RPL: 0x" + "00" * 15 + "07", text)
        self.assertIn("Stack: 0x200", text)

    def test_debugger_live_output(self):
        self.debugger.set_live(True)
        self.assertTrue(self.debugger.is_live())
        self.machine.load_program(b"\x60\x05")
        self.machine.step()
        self.assertIn("IN: LD V0, 0x05", self.stream.getvalue())

    def test_debugger_report_unsupported_once_per_address(self):
        self.machine.load_program(b"\x80\x08\x12\x00")

        for _ in range(3):
            self.machine.step()  # 8008 then jump back to it
            self.machine.step()

        self.assertEqual([(0x200, 0x8008)] * 3, self.debugger.unsupported)
        self.assertEqual(1, self.report_stream.getvalue().count("Opcode 0x8008 at address 0x200 is not emulated"))
