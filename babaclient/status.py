from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

_logger = logging.getLogger(__name__)


class Severity(enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    FATAL = "fatal"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.FATAL: logging.ERROR,
}


@dataclass(frozen=True)
class StatusLine:
    text: str
    severity: Severity


class StatusReporter:
    """Keeps the one status line shown under the board.

    Every report replaces the previous line. Nothing is queued or merged, so
    the window always shows whatever happened last.
    """

    def __init__(self) -> None:
        self.current: Optional[StatusLine] = None

    def report(self, text: str, severity: Severity = Severity.INFO) -> StatusLine:
        line = StatusLine(text, severity)
        self.current = line
        _logger.log(_LOG_LEVELS[severity], "status: %s", text)
        return line

    def loading_assets(self, total: int) -> StatusLine:
        return self.report(f"Loading {total} sprites...")

    def assets_ready(self, loaded: int, failed: int) -> StatusLine:
        if failed:
            return self.report(f"{failed} sprite(s) missing, connecting anyway...", Severity.WARNING)
        return self.report(f"Loaded {loaded} sprites, connecting...")

    def connecting(self, endpoint: str) -> StatusLine:
        return self.report(f"Connecting to {endpoint}...")

    def connected(self) -> StatusLine:
        return self.report("Connected. Use Arrow Keys to Move. R to Restart. Z to Undo.", Severity.SUCCESS)

    def server_error(self, message: str) -> StatusLine:
        return self.report(f"Server error: {message}", Severity.WARNING)

    def decode_error(self, error: BaseException) -> StatusLine:
        return self.report(f"Bad frame from server: {error}", Severity.WARNING)

    def render_error(self, reason: str) -> StatusLine:
        return self.report(f"Cannot draw level: {reason}", Severity.WARNING)

    def connection_error(self, error: BaseException) -> StatusLine:
        return self.report(f"Connection error: {error}", Severity.FATAL)

    def disconnected(self, code: Optional[int], reason: str) -> StatusLine:
        text = "Disconnected"
        if code is not None:
            text += f" ({code}{': ' + reason if reason else ''})"
        return self.report(text + ". Restart the client to play again.", Severity.FATAL)
