"""KNXnet/IP tunnelling request/ACK codecs."""

from .errors import (
    DecodeError,
    HeaderError,
    LengthMismatchError,
    MessageCodeError,
    ShortInputError,
    UnknownServiceError,
)
from .frames import pack_frame, unpack_frame
from .tunnel import TunnelRequest, TunnelResponse, TunnelStatus

__all__ = [
    "DecodeError",
    "HeaderError",
    "LengthMismatchError",
    "MessageCodeError",
    "ShortInputError",
    "UnknownServiceError",
    "TunnelRequest",
    "TunnelResponse",
    "TunnelStatus",
    "pack_frame",
    "unpack_frame",
]
