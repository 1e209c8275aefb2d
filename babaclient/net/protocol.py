from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, List, Tuple, Union

from ..errors import DecodeError

# Frames exchanged with the game server over the /game-ws channel.
# Inbound (server -> client), one JSON document per text frame:
# - grid:  [[{ elements: [symbol, ...] }, ...], ...]   rows of cells, rectangular
# - error: { error: str }
# Outbound (client -> server), plain text, no envelope:
# - one of UP | DOWN | LEFT | RIGHT | RESTART | UNDO

GAME_PATH = "/game-ws"


class Command(str, enum.Enum):
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    RESTART = "RESTART"
    UNDO = "UNDO"


@dataclass(frozen=True)
class Cell:
    elements: Tuple[str, ...]


Grid = List[List[Cell]]


@dataclass(frozen=True)
class GridFrame:
    grid: Grid

    @property
    def rows(self) -> int:
        return len(self.grid)

    @property
    def cols(self) -> int:
        return len(self.grid[0]) if self.grid else 0


@dataclass(frozen=True)
class ErrorFrame:
    message: str


Frame = Union[GridFrame, ErrorFrame]


def encode_command(command: Command) -> str:
    return Command(command).value


def decode(raw: Union[str, bytes]) -> Frame:
    """Turn one inbound text frame into a Frame.

    Raises DecodeError when the payload is not JSON, or is JSON that is
    neither an error report nor a rectangular grid of cells.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"frame is not UTF-8: {exc}") from exc
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise DecodeError(f"invalid JSON: {exc}") from exc

    if isinstance(data, dict) and "error" in data:
        return ErrorFrame(str(data["error"]))
    return GridFrame(_parse_grid(data))


def _parse_grid(data: Any) -> Grid:
    if not isinstance(data, list):
        raise DecodeError(f"expected a list of rows, got {type(data).__name__}")
    grid: Grid = []
    width = None
    for r, row in enumerate(data):
        if not isinstance(row, list):
            raise DecodeError(f"row {r} is not a list")
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise DecodeError(f"row {r} has {len(row)} cells, expected {width}")
        grid.append([_parse_cell(r, c, cell) for c, cell in enumerate(row)])
    return grid


def _parse_cell(r: int, c: int, cell: Any) -> Cell:
    if not isinstance(cell, dict):
        raise DecodeError(f"cell ({r}, {c}) is not an object")
    elements = cell.get("elements")
    if not isinstance(elements, list):
        raise DecodeError(f"cell ({r}, {c}) has no elements list")
    for el in elements:
        if not isinstance(el, str):
            raise DecodeError(f"cell ({r}, {c}) holds a non-string element: {el!r}")
    return Cell(tuple(elements))
