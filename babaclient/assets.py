from __future__ import annotations

import io
import logging
import os
import threading
import urllib.error
import urllib.request
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

import pygame

from .errors import AssetLoadError
from .events import AssetFailed, AssetLoaded

_logger = logging.getLogger(__name__)

ENTITY_PREFIX = "ENTITY_"
EMPTY = "EMPTY"

WORDS = [
    "BABA", "FLAG", "WALL", "WATER", "SKULL", "LAVA", "ROCK", "FLOWER", "GRASS", "TILE",
    "IS",
    "SMILEY",
    "YOU", "WIN", "STOP", "PUSH", "MELT", "HOT", "DEFEAT", "SINK", "JUMP",
]
ENTITIES = [ENTITY_PREFIX + name for name in
            ("BABA", "FLAG", "WALL", "WATER", "SKULL", "LAVA", "ROCK", "FLOWER", "GRASS", "TILE", "SMILEY")]
VOCABULARY: List[str] = WORDS + ENTITIES + [EMPTY]

SPRITE_EXT = ".gif"


def asset_key_of(symbol: str) -> str:
    """Sprite name for a symbol: ENTITY_BABA -> babaEntity, PUSH -> pushWord."""
    if symbol.startswith(ENTITY_PREFIX):
        return symbol[len(ENTITY_PREFIX):].lower() + "Entity"
    return symbol.lower() + "Word"


DEFAULT_ASSET_KEYS: List[str] = [asset_key_of(s) for s in VOCABULARY if s != EMPTY]


# --------------------------- Sprite sources ---------------------------

Loader = Callable[[str], Any]


def directory_loader(path: str) -> Loader:
    def load(name: str) -> Any:
        filename = os.path.join(path, name + SPRITE_EXT)
        try:
            return pygame.image.load(filename)
        except (OSError, pygame.error) as exc:
            raise AssetLoadError(name, str(exc)) from exc
    return load


def http_loader(base_url: str) -> Loader:
    """Fetch sprites from ``<base_url>/images/<name>.gif`` like the web page does."""
    base = base_url.rstrip("/")

    def load(name: str) -> Any:
        url = f"{base}/images/{name}{SPRITE_EXT}"
        try:
            with urllib.request.urlopen(url) as resp:
                data = resp.read()
        except (urllib.error.URLError, OSError) as exc:
            raise AssetLoadError(name, f"{url}: {exc}") from exc
        try:
            return pygame.image.load(io.BytesIO(data), name + SPRITE_EXT)
        except pygame.error as exc:
            raise AssetLoadError(name, str(exc)) from exc
    return load


# --------------------------- Catalog ---------------------------

class AssetCatalog:
    """Preloads sprites and tells the caller once every request has finished.

    Loading happens on background threads; their outcomes come back as
    AssetLoaded / AssetFailed events and are tallied on the main loop through
    ``complete`` and ``fail``. Failures count toward readiness the same way
    successes do, so a few missing files only cost those sprites.
    """

    def __init__(self, names: Sequence[str], on_ready: Callable[["AssetCatalog"], None]) -> None:
        self.names: List[str] = list(dict.fromkeys(names))
        self.on_ready = on_ready
        self.images: Dict[str, Any] = {}
        self.failed: Set[str] = set()
        self.ready = False
        self.started = False

    @property
    def total(self) -> int:
        return len(self.names)

    @property
    def loaded_count(self) -> int:
        return len(self.images)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    def start(self, loader: Loader, post: Callable[[Any], None]) -> None:
        """Issue one load request per name; results are handed to ``post``."""
        if self.started:
            return
        self.started = True
        _logger.info("requesting %d sprites", self.total)
        for name in self.names:
            threading.Thread(target=self._load_one, args=(loader, name, post), daemon=True).start()
        self._check_ready()

    @staticmethod
    def _load_one(loader: Loader, name: str, post: Callable[[Any], None]) -> None:
        try:
            image = loader(name)
        except Exception as exc:
            post(AssetFailed(name, exc))
            return
        post(AssetLoaded(name, image))

    def complete(self, name: str, image: Any) -> None:
        if not self._pending(name):
            return
        self.images[name] = image
        self._check_ready()

    def fail(self, name: str, error: BaseException) -> None:
        if not self._pending(name):
            return
        _logger.warning("sprite %s unavailable: %s", name, error)
        self.failed.add(name)
        self._check_ready()

    def lookup(self, key: str) -> Optional[Any]:
        return self.images.get(key)

    def _pending(self, name: str) -> bool:
        if name not in self.names:
            _logger.debug("ignoring result for undeclared sprite %s", name)
            return False
        return name not in self.images and name not in self.failed

    def _check_ready(self) -> None:
        if self.ready or self.loaded_count + self.failed_count != self.total:
            return
        self.ready = True
        _logger.info("sprites ready: %d loaded, %d failed", self.loaded_count, self.failed_count)
        self.on_ready(self)
