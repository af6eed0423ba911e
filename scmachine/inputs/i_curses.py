#!/usr/bin/env python3

"""
Curses TTY Terminal Input Plugin

Uses a thread to trap Terminal inputs and redirects them to the machine.  Note
that standard TTY Terminals only understand characters, they do not know when
an actual key is 'pressed' or 'released'.

What we can do (for this plugin) is assume a key is held for a very short time,
and then take advantage of keyboard repeats to fake a 'press' and 'release'.

To do this, I've stored the last time a character corresponding to a key has
been 'seen'.  If it was last seen a long time ago (when checked), then it has
almost certainly been released, and the machine is told so.

We will quit if ESC (char 27) or CTRL+C (char 3) is detected.  F5 resets the
machine, and +/- change its speed.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import curses
import queue
from threading import Thread
from time import time
from .i_null import Inputs as InputsBase
from ..constants import NUM_KEYS

# Terminals don't have separate key press/release, so we have to pause after a character is seen.
KEYBOARD_FAKE_KEYDOWN_TIME = 0.2

# Host controls, queued as negative numbers so they can't clash with hex keys
CONTROL_QUIT = -1
CONTROL_RESET = -2
CONTROL_SPEED_UP = -3
CONTROL_SLOW_DOWN = -4

CONTROL_CHARS = {
    27: CONTROL_QUIT,           # ESC
    3: CONTROL_QUIT,            # CTRL+C
    curses.KEY_F5: CONTROL_RESET,
    ord("+"): CONTROL_SPEED_UP,
    ord("="): CONTROL_SPEED_UP,
    ord("-"): CONTROL_SLOW_DOWN
}


# For thread safety, use proper queues to exchange information, avoiding shared variables.
def input_thread(thread_quitter_queue, input_queue, keymap_dict, curses_screen):
    while thread_quitter_queue.empty():
        # This blocks the thread from proceeding, so it won't get the quit message until at least one key is pressed.
        # However, as a daemon thread, it will be terminated when the main thread shuts down.
        char = curses_screen.getch()

        if char < 0:
            continue

        if char < 0x80:
            char = ord(chr(char).lower())  # Special keys such as F5 are above the ASCII range

        control = CONTROL_CHARS.get(char)

        if control is not None:
            input_queue.put(control, block=True)

            if control == CONTROL_QUIT:
                break

            continue

        keymap_char = keymap_dict.get(char)

        if keymap_char is not None:
            try:
                input_queue.put(keymap_char, block=False)
            except queue.Full:
                pass


class Inputs(InputsBase):
    def __init__(self, keymap, renderer):
        self.key_timers = [0.0] * NUM_KEYS
        self.keys_reported = [False] * NUM_KEYS
        super().__init__(keymap, renderer, force_lowercase=True)

        self.thread_quitter_queue = queue.Queue(1)  # Used to inform the thread it should quit
        self.input_queue = queue.Queue(16)
        self.thread = Thread(
            target=input_thread,
            args=(
                self.thread_quitter_queue,
                self.input_queue,
                self.keymap_dict,
                renderer.get_curses_screen()
            )
        )
        # Terminate the thread when the main program quits (even if currently waiting for a keypress)
        self.thread.daemon = True
        self.thread.start()

    def process_messages(self, machine):
        target_time = None
        reset_sent = False

        while True:
            try:
                # Blocking here would lock up the main thread if nothing was pressed
                key_pressed = self.input_queue.get(block=False)
            except queue.Empty:
                break

            if key_pressed == CONTROL_QUIT:
                return True

            if key_pressed == CONTROL_RESET:
                self.restore_speed(machine)
                self.reset_machine(machine)
                reset_sent = True
            elif key_pressed == CONTROL_SPEED_UP:
                self.change_speed(machine, True)
            elif key_pressed == CONTROL_SLOW_DOWN:
                self.change_speed(machine, False)
            else:
                if target_time is None:
                    target_time = time() + KEYBOARD_FAKE_KEYDOWN_TIME

                self.key_timers[key_pressed] = target_time

        if reset_sent:
            # The reset will release every key in the machine, so held keys are sent again on the next call, once
            # the reset has been applied
            self.keys_reported = [False] * NUM_KEYS
            return False

        # Only tell the machine about keys that have changed
        now = time()

        for key in range(NUM_KEYS):
            key_down = self.key_timers[key] > now

            if key_down != self.keys_reported[key]:
                self.keys_reported[key] = key_down
                machine.set_key(key, key_down)

        return False

    def shutdown(self):
        try:
            self.thread_quitter_queue.put(None, block=False)
        except queue.Full:
            # Something else has already requested the thread quits
            pass

        # Don't wait for the thread to quit (because this is likely to happen after a keypress)
        super().shutdown()
