#!/usr/bin/env python3

"""
PyGame Input Plugin

Unlike the Curses plugin, this scans the keyboard and properly detects key
'press' and 'release' events, passing each one straight to the machine.  Note
that the check should not be called more often than 60Hz, as constantly
checking the queue is time consuming.

Escape or closing the window quits.  F5 resets the machine (and its speed),
and +/- change the CPU speed.

If the application is quit, then this will control shutting PyGame down too, so
any linked Renderer must be able to handle that.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .i_null import Inputs as InputsBase

SPEED_UP_KEYS = (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS)
SLOW_DOWN_KEYS = (pygame.K_MINUS, pygame.K_KP_MINUS)


class Inputs(InputsBase):
    def __init__(self, keymap, renderer):
        self.pygame_methods = {
            pygame.QUIT:    self._pygame_quit,
            pygame.KEYDOWN: self._pygame_keydown,
            pygame.KEYUP:   self._pygame_keyup
        }

        super().__init__(keymap, renderer)

    def process_messages(self, machine):
        # Call PyGame method based on fast dictionary lookup of event
        quit_program = False

        for event in pygame.event.get():
            pygame_method = self.pygame_methods.get(event.type)

            if pygame_method and pygame_method(machine, event):  # Check via short circuit that we don't have 'None'
                quit_program = True  # Process more events, even if planning to quit

        return quit_program

    def _pygame_quit(self, machine, event):  # pylint: disable=unused-argument
        return True

    def _pygame_keydown(self, machine, event):
        key = event.key

        if key == pygame.K_F5:
            self.restore_speed(machine)
            self.reset_machine(machine)
        elif key in SPEED_UP_KEYS:
            self.change_speed(machine, True)
        elif key in SLOW_DOWN_KEYS:
            self.change_speed(machine, False)

        hex_key = self.keymap_dict.get(key)

        if hex_key is not None:
            machine.set_key(hex_key, True)

        return False

    def _pygame_keyup(self, machine, event):
        if event.key == pygame.K_ESCAPE:
            return True

        hex_key = self.keymap_dict.get(event.key)

        if hex_key is not None:
            machine.set_key(hex_key, False)

        return False
