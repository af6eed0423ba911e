#!/usr/bin/env python3

"""
Curses Audio Plugin

Allows beeps to be played in the Terminal window (no sampled sound)!

Beeps cannot be shaped or stopped, since they are effectively just a CTRL+G
(character 7 - BEL), which suits the machine's single fixed alert tone.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import curses
from .a_null import Audio as AudioBase


class Audio(AudioBase):
    def play_tone(self):
        curses.beep()
        super().play_tone()
