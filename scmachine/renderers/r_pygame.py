#!/usr/bin/env python3

"""
PyGame Renderer Plugin

Draws frames onto an SDL window surface via PyGame.  Each frame is converted to
an RGB buffer matching the current screen mode, and then stretched (in the
correct aspect ratio using 'Nearest Neighbour' translation) to fit the window
itself.  This means we don't have to draw the same pixel multiple times.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .r_null import RendererError, Renderer as RendererBase
from ..constants import APP_NAME

DEFAULT_PALETTE = (0x222222, 0xDDDDDD)  # Background, foreground


def parse_palette(pygame_palette):
    colour_map = list(DEFAULT_PALETTE)

    if pygame_palette is None:
        return colour_map

    pygame_palette_split = pygame_palette.split(",")

    if len(pygame_palette_split) > len(colour_map):
        raise RendererError("Too many palette colours defined.  Supply a background and a foreground colour.")

    for pygame_colour_num, pygame_colour in enumerate(pygame_palette_split):
        if len(pygame_colour) != 6:
            raise RendererError("Palette colours must all be 6 hex digits long.")

        try:
            colour_map[pygame_colour_num] = int(pygame_colour, 16)
        except ValueError:
            raise RendererError("Invalid palette colour defined.") from None

    return colour_map


class Renderer(RendererBase):
    def __init__(self, scale=None, pygame_palette=None, smoothing=0, **kwargs):
        if scale is None:
            scale = 512  # Default window width

        background, foreground = (bytes((i >> 16, (i >> 8) & 0xFF, i & 0xFF)) for i in parse_palette(pygame_palette))
        # Any non-zero pixel is lit, so map every byte value straight to its RGB triple
        self.rgb_map = [background] + [foreground] * 0xFF
        self.smoothing = smoothing
        self.scaled_size = (scale, scale // 2)
        pygame.display.init()
        self.display_surface = pygame.display.set_mode(self.scaled_size)
        self.set_title(APP_NAME)
        super().__init__(scale)

    def render(self, pixels):
        if not self.width or not self.height:
            return

        # Blit the RGB buffer straight to a surface, rather than plotting pixels one by one
        rgb_map = self.rgb_map
        rgb_buffer = b"".join(rgb_map[pixel] for pixel in pixels)
        render_surface = pygame.image.frombuffer(rgb_buffer, (self.width, self.height), "RGB")

        # Apply Scale2x rendering passes if requested
        for _ in range(self.smoothing):
            render_surface = pygame.transform.scale2x(render_surface)

        scaled_win = pygame.transform.scale(render_surface, self.scaled_size)
        self.display_surface.blit(scaled_win, (0, 0))
        pygame.display.flip()

    def set_title(self, title):
        pygame.display.set_caption(title)

    def shutdown(self):
        # PyGame currently segfaults if display.quit is called via __del__
        pygame.display.quit()
        super().shutdown()
