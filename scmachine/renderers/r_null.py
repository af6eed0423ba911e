#!/usr/bin/env python3

"""
Null Renderer Plugin

This serves as a base class for other rendering plugins, and can be used on its
own if you only want to see debug output.

The machine runs on its own thread, so frames arrive here (via draw_frame) from
that thread, while refresh_display is called from the main thread.  Frames are
passed across in a single-slot queue where the newest frame always wins; a
frame the main thread never got round to showing is simply replaced.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import queue


class RendererError(Exception):
    pass


class Renderer:
    def __init__(self, scale=None, **kwargs):  # pylint: disable=unused-argument
        self.scale = 1 if scale is None else scale
        self.frame_queue = queue.Queue(1)
        self.high_res = False
        self.frames_shown = 0
        self.set_resolution(0, 0)

    def set_resolution(self, width, height):
        self.width = width
        self.height = height

    # Called from the machine's thread

    def draw_frame(self, pixels, width, height):
        frame = (pixels, width, height)

        while True:
            try:
                self.frame_queue.put(frame, block=False)
                return
            except queue.Full:
                pass

            # Drop the stale frame and try again
            try:
                self.frame_queue.get(block=False)
            except queue.Empty:
                pass

    def resolution_changed(self, high_res):
        self.high_res = high_res

    # Called from the main thread

    def refresh_display(self):
        # Returns whether a new frame was shown
        try:
            pixels, width, height = self.frame_queue.get(block=False)
        except queue.Empty:
            return False

        if (width, height) != (self.width, self.height):
            self.set_resolution(width, height)

        self.render(pixels)
        self.frames_shown += 1
        return True

    def render(self, pixels):  # pylint: disable=unused-argument
        pass

    def set_title(self, title):
        pass

    def shutdown(self):
        pass
