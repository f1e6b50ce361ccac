"""Central error types used across the toolkit."""

from __future__ import annotations


class OpenLRError(RuntimeError):
    """Base error for every failure raised by the toolkit."""


class MalformedInputError(OpenLRError):
    """Raised when bytes, header or reserved fields are structurally invalid."""


class OutOfRangeError(OpenLRError):
    """Raised when a value does not fit its quantized field or decodes to an invalid value."""


class UnrepresentableError(OpenLRError):
    """Raised when a reference or path cannot be expressed under the format constraints."""


class InvalidOffsetError(OpenLRError):
    """Raised when an offset reaches past the edge or path it trims."""


class MapMatchFailedError(OpenLRError):
    """Raised when no candidate route satisfies the tolerances for an LRP pair.

    This is the only error worth retrying, e.g. with a relaxed DecoderConfig.
    """

    def __init__(self, message: str, lrp_index: int) -> None:
        super().__init__(message)
        self.lrp_index = lrp_index


class EncodingError(OpenLRError):
    """Raised when the Base64 transport text cannot be decoded."""


class GraphError(OpenLRError):
    """Raised when the host graph fails; the original exception is chained as __cause__."""


__all__ = [
    "OpenLRError",
    "MalformedInputError",
    "OutOfRangeError",
    "UnrepresentableError",
    "InvalidOffsetError",
    "MapMatchFailedError",
    "EncodingError",
    "GraphError",
]
