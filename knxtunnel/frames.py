"""KNXnet/IP frame encoding and decoding.

All frames share a common 6-byte header:
  [header_len=0x06] [protocol=0x10] [service_type: 2B] [total_len: 2B]

After the header, the body is decoded by the codec registered for the
service type in SERVICES.
"""

import logging
import struct

from . import constants as C
from .errors import DecodeError, HeaderError, ShortInputError, UnknownServiceError
from .tunnel import TunnelRequest, TunnelResponse
from .util import unpack_some

logger = logging.getLogger("knxtunnel.frames")

# Service type → body codec
SERVICES = {
    TunnelRequest.service_type: TunnelRequest,
    TunnelResponse.service_type: TunnelResponse,
}

# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------


def encode_header(service_type: int, body_len: int) -> bytes:
    """Encode the 6-byte KNXnet/IP header."""
    total = C.HEADER_SIZE + body_len
    return struct.pack("!BBHH", C.HEADER_SIZE, C.PROTOCOL_VERSION, service_type, total)


def decode_header(data: bytes):
    """Decode header → (service_type, total_length). Raises DecodeError on bad header."""
    (hlen, version, service_type, total_len), n = unpack_some(data, "B", "B", "H", "H")
    if hlen != C.HEADER_SIZE:
        raise HeaderError(f"Bad header length: {hlen}", consumed=n)
    if version != C.PROTOCOL_VERSION:
        raise HeaderError(f"Bad protocol version: {version:#x}", consumed=n)
    if total_len < C.HEADER_SIZE:
        raise HeaderError(f"Bad total length: {total_len}", consumed=n)
    return service_type, total_len


# ---------------------------------------------------------------------------
# Whole frames
# ---------------------------------------------------------------------------


def pack_frame(message) -> bytes:
    """Encode header + body for a TunnelRequest or TunnelResponse."""
    body = bytearray(message.size())
    message.pack(body)
    return encode_header(message.service_type, len(body)) + bytes(body)


def unpack_frame(data: bytes):
    """Decode a full frame → (message, bytes_consumed).

    The body codec only sees the bytes covered by the header's total length.
    """
    service_type, total_len = decode_header(data)

    codec = SERVICES.get(service_type)
    if codec is None:
        logger.debug("Ignoring unknown service type %#06x", service_type)
        raise UnknownServiceError(service_type, consumed=C.HEADER_SIZE)

    if len(data) < total_len:
        raise ShortInputError(
            f"Frame too short: header says {total_len} bytes, have {len(data)}",
            consumed=C.HEADER_SIZE,
        )

    try:
        message, n = codec.unpack(data[C.HEADER_SIZE : total_len])
    except DecodeError as exc:
        exc.consumed += C.HEADER_SIZE
        logger.debug("Bad %s body: %s", codec.__name__, exc)
        raise

    return message, C.HEADER_SIZE + n
