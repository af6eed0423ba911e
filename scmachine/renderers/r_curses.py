#!/usr/bin/env python3

"""
Curses Renderer Plugin

Draws frames in a standard Linux-style TTY Terminal, the Windows Command
Prompt, or PowerShell.  Each lit pixel is drawn as inverted spaces, stretched
horizontally by the scale so the screen keeps roughly the right aspect ratio.

The title is shown in the top row.  If the screen mode is changed, a different
sized pad is used to draw the characters.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import curses
import _curses
from .r_null import Renderer as RendererBase


class Renderer(RendererBase):
    def __init__(self, scale=None, curses_cursor_mode=0, **kwargs):
        if scale is None:
            scale = 2  # Default horizontal stretch

        self.pixel_char = " " * scale
        self.pad = None
        self.title = ""
        self.last_screen_height = -1
        self.last_screen_width = -1
        self.cursor_mode = curses_cursor_mode
        self.screen = curses.initscr()
        curses.noecho()
        curses.cbreak()
        self.screen.keypad(True)  # Report function keys (F5 resets) as single codes

        try:
            curses.curs_set(self.cursor_mode)
        except _curses.error:
            pass  # Not every terminal can hide the cursor

        super().__init__(scale)

    def set_resolution(self, width, height):
        super().set_resolution(width, height)

        if not width or not height:
            return

        # We have to allow one extra character, presumably for the cursor, otherwise we can't write the furthest
        # bottom-right pixel.  The extra row at the top holds the title.
        self.pad = curses.newpad(height + 2, width * self.scale + 1)
        self._draw_title()

    def render(self, pixels):
        if self.pad is None:
            return

        width = self.width
        pixel_char = self.pixel_char
        scale = self.scale

        for loc, pixel in enumerate(pixels):
            y, x = divmod(loc, width)
            self.pad.addstr(y + 1, x * scale, pixel_char, curses.A_REVERSE if pixel else curses.A_NORMAL)

        self._refresh_pad()

    def _refresh_pad(self):
        screen_height, screen_width = self.screen.getmaxyx()

        if screen_height != self.last_screen_height or screen_width != self.last_screen_width:
            # Terminal resized, redraw everything
            self.screen.clear()

            if hasattr(curses, "resizeterm"):
                # This doesn't work on Windows
                curses.resizeterm(screen_height, screen_width)

            self.screen.refresh()
            self.last_screen_height = screen_height
            self.last_screen_width = screen_width

        self.pad.refresh(0, 0, 0, 0, screen_height - 1, screen_width - 1)

    def _draw_title(self):
        if self.pad is None:
            return

        line_width = self.width * self.scale
        self.pad.addstr(0, 0, self.title[:line_width].ljust(line_width), curses.A_REVERSE)

    def set_title(self, title):
        self.title = title
        self._draw_title()

    def shutdown(self):
        self.pad = None
        curses.nocbreak()
        curses.echo()

        if self.cursor_mode != 1:
            try:
                curses.curs_set(1)
            except _curses.error:
                pass

        curses.endwin()
        super().shutdown()

    # No Superclass for this Curses-specific method

    def get_curses_screen(self):
        return self.screen
