from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Callable, Optional, Union
from urllib.parse import urlsplit, urlunsplit

from websockets.exceptions import ConnectionClosed as WebSocketClosed
from websockets.exceptions import WebSocketException
from websockets.sync.client import connect as ws_connect

from ..errors import DecodeError
from ..events import ConnectionClosed, ConnectionErrored, ConnectionOpened, MessageReceived
from ..render import Renderer
from ..status import StatusReporter
from .protocol import GAME_PATH, Command, ErrorFrame, Frame, decode, encode_command

_logger = logging.getLogger(__name__)

ABNORMAL_CLOSURE = 1006


class ConnectionState(enum.Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    ERRORED = "errored"


# Closed and Errored are terminal; nothing ever goes back to Open.
_TRANSITIONS = {
    None: {ConnectionState.CONNECTING},
    ConnectionState.CONNECTING: {ConnectionState.OPEN, ConnectionState.CLOSED, ConnectionState.ERRORED},
    ConnectionState.OPEN: {ConnectionState.CLOSED, ConnectionState.ERRORED},
}


def build_endpoint(server_url: str, path: str = GAME_PATH) -> str:
    """Websocket URL for the game channel; https servers get wss."""
    if "://" not in server_url:
        server_url = "http://" + server_url
    parts = urlsplit(server_url)
    scheme = "wss" if parts.scheme in ("https", "wss") else "ws"
    return urlunsplit((scheme, parts.netloc, path, "", ""))


def _default_connector(endpoint: str) -> Any:
    # No open timeout: a server that never answers leaves the status on "Connecting".
    return ws_connect(endpoint, open_timeout=None)


class ConnectionManager:
    """Owns the websocket to the game server.

    A daemon thread performs the handshake and reads frames, posting every
    lifecycle step as an event. The main loop feeds those events back through
    ``dispatch`` so that state changes, decoding and rendering all run on one
    thread in arrival order. A closed or failed connection is never reopened.
    """

    def __init__(
        self,
        endpoint: str,
        post: Callable[[Any], None],
        renderer: Renderer,
        status: StatusReporter,
        connector: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self.endpoint = endpoint
        self.post = post
        self.renderer = renderer
        self.status = status
        self.connector = connector or _default_connector
        self.state: Optional[ConnectionState] = None
        self.ws: Any = None
        self.thread: Optional[threading.Thread] = None

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    # --------------------------- Transport thread ---------------------------

    def connect(self) -> None:
        if not self._transition(ConnectionState.CONNECTING):
            return
        self.status.connecting(self.endpoint)
        self.thread = threading.Thread(target=self._run, name="game-ws", daemon=True)
        self.thread.start()

    def _run(self) -> None:
        try:
            ws = self.connector(self.endpoint)
        except Exception as exc:
            self.post(ConnectionErrored(exc))
            return
        self.ws = ws
        self.post(ConnectionOpened())
        try:
            while True:
                self.post(MessageReceived(ws.recv()))
        except WebSocketClosed as exc:
            if exc.rcvd is not None:
                self.post(ConnectionClosed(exc.rcvd.code, exc.rcvd.reason))
            else:
                self.post(ConnectionClosed(ABNORMAL_CLOSURE, ""))
        except Exception as exc:
            # Anything else still ends the connection; the main loop reports it.
            self.post(ConnectionErrored(exc))

    # --------------------------- Main loop side ---------------------------

    def dispatch(self, event: Any) -> None:
        if isinstance(event, ConnectionOpened):
            self.on_open()
        elif isinstance(event, MessageReceived):
            self.on_message(event.raw)
        elif isinstance(event, ConnectionErrored):
            self.on_error(event.error)
        elif isinstance(event, ConnectionClosed):
            self.on_close(event.code, event.reason)

    def on_open(self) -> None:
        if self._transition(ConnectionState.OPEN):
            self.status.connected()

    def on_message(self, raw: Union[str, bytes]) -> Optional[Frame]:
        if not self.is_open:
            _logger.debug("dropping frame received while %s", self.state)
            return None
        try:
            frame = decode(raw)
        except DecodeError as exc:
            _logger.warning("dropping undecodable frame: %s", exc)
            self.status.decode_error(exc)
            return None
        if isinstance(frame, ErrorFrame):
            self.status.server_error(frame.message)
        else:
            _logger.debug("grid frame %dx%d", frame.cols, frame.rows)
            self.renderer.render(frame.grid)
        return frame

    def on_error(self, error: BaseException) -> None:
        self._transition(ConnectionState.ERRORED)
        self.status.connection_error(error)
        self._close_transport()

    def on_close(self, code: Optional[int], reason: str) -> None:
        self._transition(ConnectionState.CLOSED)
        self.status.disconnected(code, reason)

    def send(self, command: Command) -> bool:
        if not self.is_open or self.ws is None:
            _logger.debug("not sending %s while %s", command, self.state)
            return False
        payload = encode_command(command)
        try:
            self.ws.send(payload)
        except (OSError, WebSocketException) as exc:
            # The reader thread reports the broken connection.
            _logger.warning("could not send %s: %s", payload, exc)
            return False
        return True

    def close(self) -> None:
        self._close_transport()

    def _close_transport(self) -> None:
        ws, self.ws = self.ws, None
        if ws is None:
            return
        try:
            ws.close()
        except (OSError, WebSocketException) as exc:
            _logger.debug("error while closing websocket: %s", exc)

    def _transition(self, new: ConnectionState) -> bool:
        if new not in _TRANSITIONS.get(self.state, ()):
            _logger.debug("ignoring transition %s -> %s", self.state, new)
            return False
        _logger.info("connection %s -> %s", self.state.value if self.state else "idle", new.value)
        self.state = new
        return True
