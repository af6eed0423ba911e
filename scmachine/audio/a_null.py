#!/usr/bin/env python3

"""
Null Audio Plugin

Serves as a base class for other Audio plugins.  Can be used on its own if no
sound is required.

The machine calls play_tone() once each time the sound timer runs down to
zero, from whichever thread is running the machine.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class Audio:
    def __init__(self):
        self.tones_played = 0

    def play_tone(self):
        # Emit the standard alert tone
        self.tones_played += 1

    def shutdown(self):
        pass
