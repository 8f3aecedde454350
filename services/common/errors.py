from __future__ import annotations


class InspectorError(Exception):
    exit_code = 1

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class TransportError(InspectorError):
    """An RPC call, log query or reply decoding failed."""

    exit_code = 2


class NotFoundError(InspectorError):
    exit_code = 3


class ShapeError(InspectorError):
    """A 256-bit topic value does not fit the narrower type it encodes."""

    exit_code = 4


class PreconditionError(InspectorError):
    exit_code = 5


class ConfigError(InspectorError):
    exit_code = 6
