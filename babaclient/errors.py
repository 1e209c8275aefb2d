from __future__ import annotations


class ClientError(Exception):
    """Base class for errors raised inside the client."""


class AssetLoadError(ClientError):
    def __init__(self, name: str, detail: str) -> None:
        super().__init__(f"could not load sprite {name!r}: {detail}")
        self.name = name


class DecodeError(ClientError):
    """Inbound frame could not be turned into a grid or an error report."""
