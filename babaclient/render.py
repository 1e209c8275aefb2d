from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import pygame

from .assets import EMPTY, ENTITY_PREFIX, AssetCatalog, asset_key_of
from .net.protocol import Grid
from .status import StatusReporter

_logger = logging.getLogger(__name__)

BLOCK_SIZE = 24

BOARD_BG = (0, 0, 0)
FALLBACK_FILL = (200, 40, 160)
FALLBACK_TEXT = (255, 255, 255)
FALLBACK_LABEL_LEN = 3
FALLBACK_FONT_SIZE = 14


def fallback_label(symbol: str) -> str:
    if symbol.startswith(ENTITY_PREFIX):
        symbol = symbol[len(ENTITY_PREFIX):]
    return symbol[:FALLBACK_LABEL_LEN]


class Renderer:
    """Paints decoded grids onto the board surface.

    The board surface belongs to the renderer and is recreated whenever the
    level dimensions change. Every frame starts from a cleared surface.
    """

    def __init__(self, catalog: AssetCatalog, status: StatusReporter) -> None:
        self.catalog = catalog
        self.status = status
        self.surface: Optional[pygame.Surface] = None
        self.frames = 0
        self._scaled: Dict[str, pygame.Surface] = {}
        self._font: Optional[pygame.font.Font] = None

    @property
    def size(self) -> Tuple[int, int]:
        return self.surface.get_size() if self.surface is not None else (0, 0)

    def render(self, grid: Optional[Grid]) -> bool:
        if not grid:
            self.status.render_error("level has no rows")
            return False

        rows = len(grid)
        cols = len(grid[0])
        self._resize(cols * BLOCK_SIZE, rows * BLOCK_SIZE)
        self.surface.fill(BOARD_BG)

        for r in range(rows):
            for c in range(cols):
                x, y = c * BLOCK_SIZE, r * BLOCK_SIZE
                for symbol in grid[r][c].elements:
                    self.draw_symbol(symbol, x, y)
        self.frames += 1
        return True

    def draw_symbol(self, symbol: str, x: int, y: int) -> None:
        key = asset_key_of(symbol)
        image = self.catalog.lookup(key)
        if image is not None:
            self.draw_sprite(key, image, x, y)
        elif symbol != EMPTY:
            self.draw_fallback(symbol, x, y)

    def draw_sprite(self, key: str, image: Any, x: int, y: int) -> None:
        sprite = self._scaled.get(key)
        if sprite is None:
            sprite = pygame.transform.scale(image, (BLOCK_SIZE, BLOCK_SIZE))
            self._scaled[key] = sprite
        self.surface.blit(sprite, (x, y))

    def draw_fallback(self, symbol: str, x: int, y: int) -> None:
        pygame.draw.rect(self.surface, FALLBACK_FILL, pygame.Rect(x, y, BLOCK_SIZE, BLOCK_SIZE))
        label = self._label_font().render(fallback_label(symbol), True, FALLBACK_TEXT)
        self.surface.blit(label, (x + (BLOCK_SIZE - label.get_width()) // 2,
                                  y + (BLOCK_SIZE - label.get_height()) // 2))

    def _resize(self, width: int, height: int) -> None:
        if self.surface is not None and self.surface.get_size() == (width, height):
            return
        _logger.debug("board resized to %dx%d", width, height)
        self.surface = pygame.Surface((width, height))

    def _label_font(self) -> pygame.font.Font:
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font = pygame.font.Font(None, FALLBACK_FONT_SIZE)
        return self._font
