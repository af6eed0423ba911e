#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here, and are only handed to the host rendering system when
flushed, normally at 60Hz.  A burst of drawing between two flushes therefore
only produces one redraw, and nothing is sent at all if the screen hasn't
changed.

Programs for this system cannot write directly into video RAM.  Instead, sprites
are drawn by toggling pixels with XOR, and collisions (a set pixel being unset
by the XOR) are reported back to the CPU.

The pixel store is row-major with one byte per pixel, 0x00 for off and 0xFF for
on.  Coordinates always wrap around both edges of the screen.

Two collaborators can be attached, both plain callables:
    * redraw(pixels, width, height)  - receives an immutable copy of the pixels
    * resolution_changed(high_res)   - called only when the mode really changes
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import LO_RES_SIZE, HI_RES_SIZE
from .ram import RAM

PIXEL_ON = 0xFF


class FramebufferError(Exception):
    pass


class Framebuffer:
    def __init__(self, redraw=None, resolution_changed=None):
        self.redraw = redraw
        self.resolution_changed = resolution_changed
        self.vram = RAM()
        self.high_res = False
        self._resize_vid(*LO_RES_SIZE)

    def _resize_vid(self, vid_width, vid_height):
        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.vram.resize(self.vid_size)  # New allocations are already blank
        self.dirty = True

    def set_resolution(self, high_res):
        high_res = bool(high_res)

        if high_res == self.high_res:
            return

        self.high_res = high_res
        self._resize_vid(*(HI_RES_SIZE if high_res else LO_RES_SIZE))

        if self.resolution_changed is not None:
            self.resolution_changed(high_res)

    def is_high_res(self):
        return self.high_res

    def get_size(self):
        return self.vid_width, self.vid_height

    def clear(self):
        self.vram.clear()
        self.dirty = True

    def _vram_loc(self, x, y):
        return (y % self.vid_height) * self.vid_width + (x % self.vid_width)

    def get(self, x, y):
        return self.vram.read(self._vram_loc(x, y)) != 0

    def toggle(self, x, y):
        # Returns the pixel's new state.  False means it was erased, i.e. a collision.
        vram_loc = self._vram_loc(x, y)
        new_pixel = self.vram.read(vram_loc) ^ PIXEL_ON
        self.vram.write(vram_loc, new_pixel)
        self.dirty = True
        return new_pixel != 0

    @staticmethod
    def _check_distance(distance):
        if distance < 0:
            raise FramebufferError("Cannot scroll by a negative distance ({})".format(distance))

        return distance != 0

    def scroll_up(self, rows):
        if not self._check_distance(rows):
            return

        if rows >= self.vid_height:
            self.clear()
            return

        mem_offset = rows * self.vid_width
        self.vram.move_mem(-mem_offset)
        self.vram.zero_block(self.vid_size - mem_offset, mem_offset)  # Erase the bottom strip
        self.dirty = True

    def scroll_down(self, rows):
        if not self._check_distance(rows):
            return

        if rows >= self.vid_height:
            self.clear()
            return

        mem_offset = rows * self.vid_width
        self.vram.move_mem(mem_offset)
        self.vram.zero_block(0, mem_offset)  # Erase the top strip
        self.dirty = True

    def scroll_left(self, cols):
        if not self._check_distance(cols):
            return

        vid_width = self.vid_width

        if cols >= vid_width:
            self.clear()
            return

        # Each row's left edge spills into the end of the row above, which is then erased
        self.vram.move_mem(-cols)

        for y in range(1, self.vid_height + 1):
            self.vram.zero_block(vid_width * y - cols, cols)

        self.dirty = True

    def scroll_right(self, cols):
        if not self._check_distance(cols):
            return

        vid_width = self.vid_width

        if cols >= vid_width:
            self.clear()
            return

        self.vram.move_mem(cols)

        for y in range(self.vid_height):
            self.vram.zero_block(vid_width * y, cols)

        self.dirty = True

    def flush(self):
        if not self.dirty:
            return False

        self.dirty = False

        if self.redraw is not None:
            self.redraw(self.vram.snapshot(), self.vid_width, self.vid_height)

        return True
