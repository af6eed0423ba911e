#!/usr/bin/env python3

"""
Null Input Plugin

Serves as a base class for other Input plugins.  Can be used on its own if zero
input functionality is required.

process_messages() is called from the main thread, at around 60Hz.  It pushes
key transitions into the machine with set_key(), which only ever overwrites a
single flag, so it is safe while the machine runs on another thread.  Host-only
controls are handled here too:
    * Reset      - queues a machine reset
    * Speed up   - multiplies the CPU clock speed
    * Slow down  - divides the CPU clock speed
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from ..constants import CLOCK_SPEED_STEP, DEFAULT_CLOCK_SPEED, NUM_KEYS


class InputsError(Exception):
    pass


class Inputs:
    def __init__(self, keymap, renderer, force_lowercase=False):
        self.keymap_dict = {}
        self.renderer = renderer
        keymap_split = keymap.split(",")

        if len(keymap_split) != NUM_KEYS:
            raise InputsError("Incorrect number of keys defined -- 16 required.  Use commas to split numbers")

        for key_num, key_defined in enumerate(keymap_split):
            try:
                key_defined_ord = int(key_defined)
            except ValueError:
                raise InputsError("Defined keys are not all integer values") from None

            if force_lowercase:
                # If we are working with characters rather than keyscan codes, we should convert to lowercase
                key_defined_ord = ord(chr(key_defined_ord).lower())

            if key_defined_ord in self.keymap_dict:
                raise InputsError("Duplicate keys defined")

            self.keymap_dict[key_defined_ord] = key_num

    def process_messages(self, machine):  # pylint: disable=unused-argument
        return False  # Don't exit the program

    # Host controls, shared by all plugins

    def reset_machine(self, machine):
        machine.request_reset()

    def change_speed(self, machine, faster):
        clock_speed = machine.get_clock_speed()

        if clock_speed <= 0:
            # Uncapped, so there's nothing to scale from
            return

        if faster:
            clock_speed = int(clock_speed * CLOCK_SPEED_STEP) + 1
        else:
            clock_speed = max(1, int(clock_speed / CLOCK_SPEED_STEP))

        machine.set_clock_speed(clock_speed)

    def restore_speed(self, machine):
        machine.set_clock_speed(DEFAULT_CLOCK_SPEED)

    def shutdown(self):
        pass
