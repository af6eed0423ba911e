#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from scmachine.framebuffer import Framebuffer, FramebufferError


class TestFrameBuffer(unittest.TestCase):
    def setUp(self):
        self.frames = []
        self.mode_changes = []
        self.fb = Framebuffer(
            redraw=lambda pixels, width, height: self.frames.append((pixels, width, height)),
            resolution_changed=self.mode_changes.append
        )

    def _lit_pixels(self):
        width, height = self.fb.get_size()
        return [(x, y) for y in range(height) for x in range(width) if self.fb.get(x, y)]

    def test_framebuffer_init(self):
        self.assertEqual((64, 32), self.fb.get_size())
        self.assertFalse(self.fb.is_high_res())
        self.assertEqual([], self._lit_pixels())

    def test_framebuffer_toggle(self):
        self.assertTrue(self.fb.toggle(3, 4))
        self.assertTrue(self.fb.get(3, 4))
        self.assertFalse(self.fb.toggle(3, 4))  # Erased
        self.assertFalse(self.fb.get(3, 4))

    def test_framebuffer_wrapping(self):
        self.fb.toggle(64 + 5, 32 + 6)
        self.assertEqual([(5, 6)], self._lit_pixels())
        self.fb.toggle(-1, -1)
        self.assertTrue(self.fb.get(63, 31))

    def test_framebuffer_clear(self):
        self.fb.toggle(0, 0)
        self.fb.toggle(63, 31)
        self.fb.clear()
        self.assertEqual([], self._lit_pixels())

    def test_framebuffer_flush_only_when_dirty(self):
        self.assertTrue(self.fb.flush())  # A fresh screen needs showing once
        self.assertFalse(self.fb.flush())
        self.assertEqual(1, len(self.frames))

        self.fb.toggle(1, 0)
        self.fb.toggle(2, 0)
        self.fb.toggle(3, 0)
        self.assertTrue(self.fb.flush())
        self.assertEqual(2, len(self.frames))

        pixels, width, height = self.frames[-1]
        self.assertEqual((64, 32), (width, height))
        self.assertEqual(64 * 32, len(pixels))
        self.assertEqual(b"\x00\xFF\xFF\xFF\x00", pixels[:5])

    def test_framebuffer_flush_snapshot_is_detached(self):
        self.fb.toggle(0, 0)
        self.fb.flush()
        self.fb.toggle(0, 0)
        self.assertEqual(0xFF, self.frames[-1][0][0])

    def test_framebuffer_flush_without_collaborator(self):
        fb = Framebuffer()
        fb.toggle(0, 0)
        self.assertTrue(fb.flush())
        self.assertFalse(fb.flush())

    def test_framebuffer_resolution_switch(self):
        self.fb.toggle(10, 10)
        self.fb.set_resolution(True)
        self.assertEqual((128, 64), self.fb.get_size())
        self.assertTrue(self.fb.is_high_res())
        self.assertEqual([True], self.mode_changes)
        self.assertEqual([], self._lit_pixels())

        # No-op when already in the requested mode
        self.fb.toggle(100, 50)
        self.fb.set_resolution(True)
        self.assertEqual([True], self.mode_changes)
        self.assertTrue(self.fb.get(100, 50))

        self.fb.set_resolution(False)
        self.assertEqual((64, 32), self.fb.get_size())
        self.assertEqual([True, False], self.mode_changes)
        self.assertEqual([], self._lit_pixels())

    def test_framebuffer_resolution_switch_redraws(self):
        self.fb.flush()
        self.fb.set_resolution(True)
        self.assertTrue(self.fb.flush())
        self.assertEqual((128, 64), self.frames[-1][1:])

    def test_framebuffer_scroll_down(self):
        self.fb.toggle(5, 3)
        self.fb.toggle(6, 31)  # Scrolled off the bottom
        self.fb.scroll_down(2)
        self.assertEqual([(5, 5)], self._lit_pixels())

    def test_framebuffer_scroll_up(self):
        self.fb.toggle(5, 3)
        self.fb.toggle(6, 0)  # Scrolled off the top
        self.fb.scroll_up(1)
        self.assertEqual([(5, 2)], self._lit_pixels())

    def test_framebuffer_scroll_left(self):
        self.fb.toggle(10, 0)
        self.fb.toggle(2, 1)  # Scrolled off the left, must not reappear on row 0
        self.fb.toggle(63, 5)
        self.fb.scroll_left(4)
        self.assertEqual([(6, 0), (59, 5)], self._lit_pixels())

    def test_framebuffer_scroll_right(self):
        self.fb.toggle(62, 0)  # Scrolled off the right, must not reappear on row 1
        self.fb.toggle(0, 1)
        self.fb.toggle(63, 31)
        self.fb.scroll_right(4)
        self.assertEqual([(4, 1)], self._lit_pixels())

    def test_framebuffer_scroll_high_res(self):
        self.fb.set_resolution(True)
        self.fb.toggle(120, 60)
        self.fb.scroll_right(4)
        self.fb.scroll_down(3)
        self.assertEqual([(124, 63)], self._lit_pixels())

    def test_framebuffer_scroll_zero_is_noop(self):
        self.fb.toggle(5, 5)
        self.fb.flush()

        for scroll in self.fb.scroll_up, self.fb.scroll_down, self.fb.scroll_left, self.fb.scroll_right:
            scroll(0)

        self.assertEqual([(5, 5)], self._lit_pixels())
        self.assertFalse(self.fb.flush())

    def test_framebuffer_scroll_everything_away(self):
        self.fb.toggle(5, 5)
        self.fb.scroll_down(32)
        self.assertEqual([], self._lit_pixels())
        self.fb.toggle(5, 5)
        self.fb.scroll_left(100)
        self.assertEqual([], self._lit_pixels())

    def test_framebuffer_scroll_negative(self):
        self.assertRaises(FramebufferError, self.fb.scroll_up, -1)
