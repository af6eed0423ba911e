#!/usr/bin/env python3

"""
PyGame Audio Plugin

Plays the machine's alert tone within PyGame / SDL.

The tone is a short square wave, built once at startup into an 8-bit mono
sample, and replayed (restarting if it is still sounding) each time the sound
timer runs out.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .a_null import Audio as AudioBase

PLAYBACK_FREQUENCY = 44100
TONE_FREQUENCY = 800.0
TONE_LENGTH = 0.05  # Seconds
DEFAULT_VOLUME = 0.1


def build_square_wave(frequency, length, playback_frequency=PLAYBACK_FREQUENCY):
    # Unsigned 8-bit samples, alternating between the extremes every half cycle
    num_samples = int(playback_frequency * length)
    half_cycle = playback_frequency / (frequency * 2.0)
    return bytes(0xFF if int(sample / half_cycle) % 2 == 0 else 0x00 for sample in range(num_samples))


class Audio(AudioBase):
    def __init__(self, frequency=TONE_FREQUENCY, length=TONE_LENGTH, volume=DEFAULT_VOLUME):
        pygame.mixer.pre_init(PLAYBACK_FREQUENCY, size=8, channels=1, buffer=512, allowedchanges=0)
        pygame.mixer.init()
        self.sound = pygame.mixer.Sound(buffer=build_square_wave(frequency, length))
        self.sound.set_volume(volume)
        super().__init__()

    def play_tone(self):
        self.sound.stop()
        self.sound.play()
        super().play_tone()

    def shutdown(self):
        self.sound.stop()
        pygame.mixer.quit()
        super().shutdown()
