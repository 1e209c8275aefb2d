from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional

import pygame

from .net.protocol import Command

if TYPE_CHECKING:
    from .net.connection import ConnectionManager

_logger = logging.getLogger(__name__)

KEY_COMMANDS: Mapping[int, Command] = MappingProxyType({
    pygame.K_UP: Command.UP,
    pygame.K_DOWN: Command.DOWN,
    pygame.K_LEFT: Command.LEFT,
    pygame.K_RIGHT: Command.RIGHT,
    pygame.K_r: Command.RESTART,
    pygame.K_z: Command.UNDO,
})


class InputMapper:
    def __init__(self, connection: "ConnectionManager") -> None:
        self.connection = connection

    @staticmethod
    def command_for(key: int) -> Optional[Command]:
        return KEY_COMMANDS.get(key)

    def handle_key(self, key: int) -> bool:
        """Forward a key press; returns True if a command was handed to the connection."""
        command = self.command_for(key)
        if command is None:
            return False
        _logger.debug("key %d -> %s", key, command.value)
        return self.connection.send(command)
