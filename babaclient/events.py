from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import Any, Optional, Union

# Background threads (sprite loaders, the websocket reader) never touch client
# state directly. They post one of these onto the channel and the main loop
# applies them in order.

CHANNEL_SIZE = 256


@dataclass(frozen=True)
class AssetLoaded:
    name: str
    image: Any


@dataclass(frozen=True)
class AssetFailed:
    name: str
    error: BaseException


@dataclass(frozen=True)
class ConnectionOpened:
    pass


@dataclass(frozen=True)
class MessageReceived:
    raw: Union[str, bytes]


@dataclass(frozen=True)
class ConnectionErrored:
    error: BaseException


@dataclass(frozen=True)
class ConnectionClosed:
    code: Optional[int]
    reason: str = ""


Event = Union[AssetLoaded, AssetFailed, ConnectionOpened, MessageReceived, ConnectionErrored, ConnectionClosed]


def make_channel(maxsize: int = CHANNEL_SIZE) -> "queue.Queue[Event]":
    return queue.Queue(maxsize=maxsize)


def drain(channel: "queue.Queue[Event]", limit: int = CHANNEL_SIZE) -> list:
    """Pop up to ``limit`` pending events without blocking."""
    events = []
    while len(events) < limit:
        try:
            events.append(channel.get_nowait())
        except queue.Empty:
            break
    return events
