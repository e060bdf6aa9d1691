"""TUNNELLING_REQUEST / TUNNELLING_ACK body codecs.

Both bodies start with the 4-byte connection header:
  [length=0x04] [channel_id] [sequence_counter] [reserved or status]

TUNNELLING_REQUEST carries a cEMI frame after the header; its fourth byte is
reserved (sent as 0x00, ignored on receive). TUNNELLING_ACK has no payload;
its fourth byte is the status code.
"""

from enum import IntEnum
from typing import Annotated, ClassVar

from pydantic import AfterValidator, BaseModel, Field

from . import cemi
from . import constants as C
from .errors import DecodeError, LengthMismatchError
from .util import unpack_some

LENGTH_MISMATCH = "length header is not 4"


class TunnelStatus(IntEnum):
    """Status code of a tunnelling ACK.

    Every byte value is a legal status; values without a name are kept as
    pseudo-members so they survive a decode/encode round trip.
    """

    OK = C.E_NO_ERROR
    UNSUPPORTED = C.E_TUNNELLING_LAYER

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, int) or not 0 <= value <= 0xFF:
            return None
        member = int.__new__(cls, value)
        member._name_ = f"{value:#04x}"
        member._value_ = value
        return member

    def __str__(self) -> str:
        return _STATUS_LABELS.get(self._value_, f"{self._value_:#04x}")

    def __format__(self, format_spec: str) -> str:
        if not format_spec:
            return str(self)
        return int.__format__(int(self), format_spec)


_STATUS_LABELS = {
    TunnelStatus.OK.value: "Ok",
    TunnelStatus.UNSUPPORTED.value: "Unsupported",
}

# Any byte is a valid status; unnamed codes become TunnelStatus pseudo-members
StatusCode = Annotated[int, Field(ge=0, le=0xFF), AfterValidator(TunnelStatus)]


class TunnelRequest(BaseModel):
    """A TUNNELLING_REQUEST body: asks the gateway to transmit a cEMI frame."""

    service_type: ClassVar[int] = C.TUNNELLING_REQUEST

    channel: int = Field(..., ge=0, le=0xFF, description="Communication channel")
    seq_number: int = Field(
        ..., ge=0, le=0xFF, description="Sequence counter, used to track acknowledgements"
    )
    payload: cemi.CemiMessage = Field(..., description="cEMI frame to be tunnelled")

    def size(self) -> int:
        return C.CONN_HEADER_SIZE + cemi.size(self.payload)

    def pack(self, buffer) -> None:
        """Write the body into ``buffer`` (at least ``size()`` bytes)."""
        buffer[0] = C.CONN_HEADER_SIZE
        buffer[1] = self.channel
        buffer[2] = self.seq_number
        buffer[3] = 0x00
        cemi.pack(memoryview(buffer)[C.CONN_HEADER_SIZE :], self.payload)

    def to_bytes(self) -> bytes:
        buffer = bytearray(self.size())
        self.pack(buffer)
        return bytes(buffer)

    @classmethod
    def unpack(cls, data: bytes) -> tuple["TunnelRequest", int]:
        """Decode a body → (request, bytes_consumed).

        Raises ShortInputError, LengthMismatchError, or whatever DecodeError
        the cEMI codec raised (with ``consumed`` covering the header too).
        """
        (length, channel, seq_number, _reserved), n = unpack_some(
            data, "B", "B", "B", "B"
        )
        if length != C.CONN_HEADER_SIZE:
            raise LengthMismatchError(LENGTH_MISMATCH, consumed=n)

        try:
            payload, m = cemi.unpack(data[n:])
        except DecodeError as exc:
            exc.consumed += n
            raise

        return cls(channel=channel, seq_number=seq_number, payload=payload), n + m


class TunnelResponse(BaseModel):
    """A TUNNELLING_ACK body: acknowledges the request with the same sequence number."""

    service_type: ClassVar[int] = C.TUNNELLING_ACK

    channel: int = Field(..., ge=0, le=0xFF, description="Communication channel")
    seq_number: int = Field(
        ..., ge=0, le=0xFF, description="Identifies the request being acknowledged"
    )
    status: StatusCode = Field(default=TunnelStatus.OK, description="Tunnelling result")

    def size(self) -> int:
        return C.CONN_HEADER_SIZE

    def pack(self, buffer) -> None:
        buffer[0] = C.CONN_HEADER_SIZE
        buffer[1] = self.channel
        buffer[2] = self.seq_number
        buffer[3] = int(self.status)

    def to_bytes(self) -> bytes:
        buffer = bytearray(self.size())
        self.pack(buffer)
        return bytes(buffer)

    @classmethod
    def unpack(cls, data: bytes) -> tuple["TunnelResponse", int]:
        """Decode a body → (response, 4). Trailing bytes are left untouched."""
        (length, channel, seq_number, status), n = unpack_some(
            data, "B", "B", "B", "B"
        )
        if length != C.CONN_HEADER_SIZE:
            raise LengthMismatchError(LENGTH_MISMATCH, consumed=n)

        return cls(channel=channel, seq_number=seq_number, status=status), n
