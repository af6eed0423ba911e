#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

# App identification
APP_NAME = "SuperChocMachine"
APP_VERSION = "1.0.0"
APP_COPYRIGHT = "Copyright (C) 2022 Gregory Maynard-Hoare, licensed under GNU Affero General Public License v3.0"
APP_INTRO = "{} V{} -- ".format(APP_NAME, APP_VERSION)

# Memory map
MEM_SIZE = 0x1000
PROGRAM_START = 0x200
FONT_SM_LOC = 0x000  # 16 glyphs, 5 bytes each
FONT_BG_LOC = 0x050  # 16 glyphs, 10 bytes each, directly after the small font
STACK_SIZE = 16
NUM_KEYS = 0x10

# Display modes
LO_RES_SIZE = (64, 32)
HI_RES_SIZE = (128, 64)

# Timing
IO_FREQ = 60.0             # Timers and display, fixed
DEFAULT_CLOCK_SPEED = 1000  # Instructions per second, 0 = uncapped
CLOCK_SPEED_STEP = 1.1      # Multiplier used by the front-end's speed keys

# Default mappings for keys 0-F.  Keyscans (on a UK QWERTY keyboard) and ASCII characters for these are the same code:
# X 1 2 3 Q W E A S D Z C 4 R F V
DEFAULT_KEYMAP = "120,49,50,51,113,119,101,97,115,100,122,99,52,114,102,118"
