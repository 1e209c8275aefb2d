from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import pygame

from .assets import DEFAULT_ASSET_KEYS, AssetCatalog, Loader, directory_loader, http_loader
from .controls import InputMapper
from .events import AssetFailed, AssetLoaded, Event, drain, make_channel
from .net.connection import ConnectionManager, build_endpoint
from .render import Renderer
from .status import Severity, StatusReporter

_logger = logging.getLogger(__name__)

# --------------------------- Pygame rendering ---------------------------

WINDOW_BG = (15, 18, 25)
STATUS_COLORS = {
    Severity.INFO: (155, 165, 185),
    Severity.SUCCESS: (90, 200, 120),
    Severity.WARNING: (240, 190, 90),
    Severity.FATAL: (220, 60, 80),
}

MIN_WIDTH = 480
MIN_BOARD_HEIGHT = 240
STATUS_BAR = 36
STATUS_PADDING = 10
FPS = 60


@dataclass
class ClientContext:
    """Everything one client session owns, built once at startup."""

    channel: "queue.Queue[Event]"
    status: StatusReporter
    catalog: AssetCatalog
    renderer: Renderer
    connection: ConnectionManager
    controls: InputMapper
    loader: Loader

    def start(self) -> None:
        self.status.loading_assets(self.catalog.total)
        self.catalog.start(self.loader, self.channel.put)

    def dispatch(self, event: Event) -> None:
        if isinstance(event, AssetLoaded):
            self.catalog.complete(event.name, event.image)
        elif isinstance(event, AssetFailed):
            self.catalog.fail(event.name, event.error)
        else:
            self.connection.dispatch(event)

    def pump(self) -> int:
        events = drain(self.channel)
        for event in events:
            self.dispatch(event)
        return len(events)


def build_context(
    server_url: str,
    assets_dir: Optional[str] = None,
    names: Sequence[str] = DEFAULT_ASSET_KEYS,
    connector: Optional[Callable] = None,
    loader: Optional[Loader] = None,
) -> ClientContext:
    channel = make_channel()
    status = StatusReporter()

    def on_ready(catalog: AssetCatalog) -> None:
        status.assets_ready(catalog.loaded_count, catalog.failed_count)
        connection.connect()

    catalog = AssetCatalog(names, on_ready)
    renderer = Renderer(catalog, status)
    connection = ConnectionManager(build_endpoint(server_url), channel.put, renderer, status, connector)
    if loader is None:
        loader = directory_loader(assets_dir) if assets_dir else http_loader(server_url)
    return ClientContext(
        channel=channel,
        status=status,
        catalog=catalog,
        renderer=renderer,
        connection=connection,
        controls=InputMapper(connection),
        loader=loader,
    )


class GameWindow:
    def __init__(self, context: ClientContext) -> None:
        pygame.init()
        pygame.display.set_caption("Baba Is You")
        self.context = context
        self.window_size: Tuple[int, int] = (0, 0)
        self.screen = self._fit_window((0, 0))
        self.clock = pygame.time.Clock()
        self.font_small = pygame.font.SysFont("Arial", 16)
        self.running = True

    def _fit_window(self, board_size: Tuple[int, int]) -> pygame.Surface:
        width = max(MIN_WIDTH, board_size[0])
        height = max(MIN_BOARD_HEIGHT, board_size[1]) + STATUS_BAR
        if (width, height) != self.window_size:
            self.window_size = (width, height)
            self.screen = pygame.display.set_mode(self.window_size)
        return self.screen

    # --------------------------- Draw ---------------------------
    def draw(self) -> None:
        board = self.context.renderer.surface
        self._fit_window(self.context.renderer.size)
        self.screen.fill(WINDOW_BG)
        if board is not None:
            board_h = max(MIN_BOARD_HEIGHT, board.get_height())
            self.screen.blit(board, ((self.screen.get_width() - board.get_width()) // 2,
                                     (board_h - board.get_height()) // 2))
        self.draw_status_bar()
        pygame.display.flip()

    def draw_status_bar(self) -> None:
        line = self.context.status.current
        if line is None:
            return
        surf = self.font_small.render(line.text, True, STATUS_COLORS[line.severity])
        y = self.screen.get_height() - STATUS_BAR + (STATUS_BAR - surf.get_height()) // 2
        self.screen.blit(surf, (STATUS_PADDING, y))

    # --------------------------- Loop ---------------------------
    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.running = False
                return
            self.context.controls.handle_key(event.key)

    def run(self) -> None:
        self.context.start()
        try:
            while self.running:
                for event in pygame.event.get():
                    self.handle_event(event)
                self.context.pump()
                self.draw()
                self.clock.tick(FPS)
        finally:
            self.context.connection.close()
            pygame.quit()


# --------------------------- Entrypoints ---------------------------

def run_client_gui(server_url: str, assets_dir: Optional[str] = None) -> None:
    context = build_context(server_url, assets_dir)
    _logger.info("starting client for %s", context.connection.endpoint)
    GameWindow(context).run()
