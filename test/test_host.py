#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import contextlib
import io
import os
import tempfile
import time
import unittest
from scmachine import main, run_machine
from scmachine.audio.a_null import Audio
from scmachine.constants import DEFAULT_KEYMAP
from scmachine.debugger import Debugger
from scmachine.inputs.i_null import Inputs, InputsError
from scmachine.inputs import i_curses
from scmachine.machine import Machine
from scmachine.registers import StackError
from scmachine.renderers.r_null import Renderer
from superchocmachine import parse_args


class QuittingInputs(Inputs):
    def process_messages(self, machine):
        return True


class TestRenderer(unittest.TestCase):
    def setUp(self):
        self.renderer = Renderer()

    def test_renderer_nothing_queued(self):
        self.assertFalse(self.renderer.refresh_display())
        self.assertEqual(0, self.renderer.frames_shown)

    def test_renderer_latest_frame_wins(self):
        self.renderer.draw_frame(b"\x00" * 2048, 64, 32)
        self.renderer.draw_frame(b"\xFF" * 8192, 128, 64)
        self.assertTrue(self.renderer.refresh_display())
        self.assertEqual((128, 64), (self.renderer.width, self.renderer.height))
        self.assertFalse(self.renderer.refresh_display())  # The older frame was dropped
        self.assertEqual(1, self.renderer.frames_shown)

    def test_renderer_resolution_changed(self):
        self.renderer.resolution_changed(True)
        self.assertTrue(self.renderer.high_res)


class TestInputs(unittest.TestCase):
    def setUp(self):
        self.machine = Machine(clock_speed=1000)
        self.inputs = Inputs(DEFAULT_KEYMAP, Renderer())

    def test_inputs_keymap(self):
        self.assertEqual(0x0, self.inputs.keymap_dict[120])  # X
        self.assertEqual(0xF, self.inputs.keymap_dict[118])  # V

    def test_inputs_keymap_lowercase(self):
        inputs = Inputs("88" + DEFAULT_KEYMAP[3:], Renderer(), force_lowercase=True)
        self.assertEqual(0x0, inputs.keymap_dict[120])

    def test_inputs_keymap_errors(self):
        self.assertRaises(InputsError, Inputs, "1,2,3", Renderer())
        self.assertRaises(InputsError, Inputs, "a" + DEFAULT_KEYMAP[3:], Renderer())
        self.assertRaises(InputsError, Inputs, "49" + DEFAULT_KEYMAP[3:], Renderer())  # 49 is also key 1

    def test_inputs_change_speed(self):
        self.inputs.change_speed(self.machine, True)
        self.assertEqual(1101, self.machine.get_clock_speed())
        self.inputs.restore_speed(self.machine)
        self.inputs.change_speed(self.machine, False)
        self.assertEqual(909, self.machine.get_clock_speed())

    def test_inputs_change_speed_limits(self):
        self.machine.set_clock_speed(1)
        self.inputs.change_speed(self.machine, False)
        self.assertEqual(1, self.machine.get_clock_speed())
        self.machine.set_clock_speed(0)
        self.inputs.change_speed(self.machine, True)
        self.assertEqual(0, self.machine.get_clock_speed())

    def test_inputs_reset_machine(self):
        self.inputs.reset_machine(self.machine)
        self.assertTrue(self.machine.reset_requested)


class IdleScreen:
    def getch(self):
        time.sleep(0.01)
        return -1  # Nothing typed


class IdleScreenRenderer(Renderer):
    def get_curses_screen(self):
        return IdleScreen()


class TestCursesInputs(unittest.TestCase):
    def setUp(self):
        self.machine = Machine()
        self.inputs = i_curses.Inputs(DEFAULT_KEYMAP, IdleScreenRenderer())

    def tearDown(self):
        self.inputs.shutdown()

    def test_curses_inputs_key_reported(self):
        self.inputs.input_queue.put(0x5)
        self.inputs.process_messages(self.machine)
        self.assertTrue(self.machine.keys[0x5])

    def test_curses_inputs_held_key_survives_reset(self):
        self.inputs.input_queue.put(0x5)
        self.inputs.process_messages(self.machine)
        self.inputs.input_queue.put(i_curses.CONTROL_RESET)
        self.inputs.process_messages(self.machine)
        self.assertTrue(self.machine.reset_requested)

        self.machine.reset()  # Applied by the machine thread between the two polls
        self.assertFalse(self.machine.keys[0x5])
        self.inputs.process_messages(self.machine)
        self.assertTrue(self.machine.keys[0x5])  # Still inside the fake key-down window

    def test_curses_inputs_quit(self):
        self.inputs.input_queue.put(i_curses.CONTROL_QUIT)
        self.assertTrue(self.inputs.process_messages(self.machine))


class TestRunMachine(unittest.TestCase):
    def setUp(self):
        self.renderer = Renderer()
        self.inputs = Inputs(DEFAULT_KEYMAP, self.renderer)
        self.machine = Machine(
            redraw=self.renderer.draw_frame,
            resolution_changed=self.renderer.resolution_changed,
            audio=Audio(),
            debugger=Debugger(report_stream=io.StringIO()),
            clock_speed=0
        )

    def test_run_machine_until_exit(self):
        self.machine.load_program(b"\x00\xFF\x60\x05\x00\xFD")
        run_machine(self.machine, self.inputs, self.renderer, host_interval=0.001)
        self.assertTrue(self.machine.halted)
        self.assertEqual(0x5, self.machine.registers.v[0x0])
        self.assertTrue(self.renderer.high_res)
        self.assertEqual((128, 64), (self.renderer.width, self.renderer.height))

    def test_run_machine_quit(self):
        self.machine.load_program(b"\x12\x00")  # Loops forever
        run_machine(self.machine, QuittingInputs(DEFAULT_KEYMAP, self.renderer), self.renderer, host_interval=0.001)
        self.assertFalse(self.machine.halted)

    def test_run_machine_error(self):
        self.machine.load_program(b"\x00\xEE")
        self.assertRaises(StackError, run_machine, self.machine, self.inputs, self.renderer, 0.001)


class TestStartup(unittest.TestCase):
    def test_parse_args_defaults(self):
        args = vars(parse_args(["Game.ch8"]))
        self.assertEqual("Game.ch8", args["filename"])
        self.assertIsNone(args["clock_speed"])
        self.assertIsNone(args["renderer"])
        self.assertEqual(DEFAULT_KEYMAP, args["keymap"])
        self.assertEqual(0, args["smoothing"])
        self.assertFalse(args["debug"])

    def test_parse_args_options(self):
        args = vars(parse_args(["-r", "null", "-c", "500", "--seed", "3", "-d", "Game.sc8"]))
        self.assertEqual("null", args["renderer"])
        self.assertEqual(500, args["clock_speed"])
        self.assertEqual(3, args["seed"])
        self.assertTrue(args["debug"])

    def test_main_null_renderer(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            filename = os.path.join(temp_dir, "Exit.sc8")

            with open(filename, "wb") as f:
                f.write(b"\x60\x05\x00\xFD")

            args = vars(parse_args(["-r", "null", "-c", "0", filename]))
            stdout = io.StringIO()

            with contextlib.redirect_stdout(stdout):
                main(args)

            self.assertIn("SuperChocMachine", stdout.getvalue())

    def test_main_missing_file(self):
        args = vars(parse_args(["-r", "null", "NoFile.ch8"]))

        with contextlib.redirect_stdout(io.StringIO()):
            self.assertRaises(FileNotFoundError, main, args)
