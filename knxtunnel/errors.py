"""Decode errors for KNXnet/IP tunnelling frames.

Every decode failure carries ``consumed``: the number of input bytes read
before the failure, so callers can report offsets or resynchronize.
"""


class DecodeError(ValueError):
    """Base class for all frame decoding failures."""

    def __init__(self, message: str, consumed: int = 0):
        super().__init__(message)
        self.consumed = consumed


class ShortInputError(DecodeError):
    """Fewer bytes available than the frame requires."""


class LengthMismatchError(DecodeError):
    """Structure length byte of a connection header is not 4."""


class HeaderError(DecodeError):
    """Malformed 6-byte KNXnet/IP header."""


class UnknownServiceError(DecodeError):
    """Service type has no registered body codec."""

    def __init__(self, service_type: int, consumed: int = 0):
        super().__init__(f"Unknown service type: {service_type:#06x}", consumed)
        self.service_type = service_type


class MessageCodeError(DecodeError):
    """cEMI message code does not match the message type being decoded."""
