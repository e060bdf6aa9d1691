"""cEMI (Common External Message Interface) codec.

The cEMI frame is the payload of a TUNNELLING_REQUEST. This module exposes
the three operations the tunnel codec delegates to:

    size(message)            → packed length in bytes
    pack(buffer, message)    → write the frame to the start of buffer
    unpack(data)             → (message, bytes_consumed)

L_Data layout:
  [msg_code: 1B] [add_info_len: 1B] [add_info: variable]
  [ctrl1: 1B] [ctrl2: 1B] [src: 2B] [dst: 2B]
  [npdu_len: 1B] [TPCI+APCI+data: npdu_len + 1 bytes]

Any other message code decodes to UnsupportedMessage, which keeps the raw
bytes so the frame can still be forwarded or re-encoded.
"""

import logging
import struct
from typing import ClassVar

from pydantic import BaseModel, Field

from . import constants as C
from .errors import MessageCodeError, ShortInputError
from .util import unpack_some

logger = logging.getLogger("knxtunnel.cemi")

# ---------------------------------------------------------------------------
# Address helpers
# ---------------------------------------------------------------------------


def parse_individual_address(text: str) -> int:
    """Parse "1.0.0" → 0x1000 (area.line.device as 4.4.8 bits)."""
    parts = text.split(".")
    area, line, device = int(parts[0]), int(parts[1]), int(parts[2])
    return (area << 12) | (line << 8) | device


def format_individual_address(addr: int) -> str:
    """Format 0x1000 → "1.0.0"."""
    return f"{(addr >> 12) & 0x0F}.{(addr >> 8) & 0x0F}.{addr & 0xFF}"


def parse_group_address(text: str) -> int:
    """Parse "1/1/0" → 0x0900 (main/middle/sub as 5.3.8 bits)."""
    parts = text.split("/")
    main, middle, sub = int(parts[0]), int(parts[1]), int(parts[2])
    return (main << 11) | (middle << 8) | sub


def format_group_address(addr: int) -> str:
    """Format 0x0900 → "1/1/0"."""
    return f"{(addr >> 11) & 0x1F}/{(addr >> 8) & 0x07}/{addr & 0xFF}"


# ---------------------------------------------------------------------------
# L_Data messages
# ---------------------------------------------------------------------------


class LData(BaseModel):
    """Link-layer data frame shared by L_Data.req/.con/.ind."""

    message_code: ClassVar[int]

    additional_info: bytes = Field(default=b"", max_length=0xFF)
    control1: int = Field(default=C.CTRL1_STANDARD, ge=0, le=0xFF)
    control2: int = Field(default=C.CTRL2_GROUP_HOP6, ge=0, le=0xFF)
    source: int = Field(default=0, ge=0, le=0xFFFF)
    destination: int = Field(default=0, ge=0, le=0xFFFF)
    tpdu: bytes = Field(default=b"\x00\x00", min_length=1, max_length=0x100)

    @classmethod
    def group_value(
        cls,
        source: int,
        destination: int,
        apci: int,
        payload: bytes = b"",
        is_group: bool = True,
    ) -> "LData":
        """Build a group telegram.

        For short payloads (1 byte, value ≤ 0x3F): uses compact 6-bit encoding.
        For longer payloads: uses extended format.
        """
        if len(payload) <= 1 and (not payload or payload[0] <= 0x3F):
            # Short frame: [TPCI] [APCI | value]
            val = payload[0] if payload else 0
            tpdu = bytes([0x00, apci | val])
        else:
            # Long frame: [TPCI] [APCI] [data...]
            tpdu = bytes([0x00, apci]) + bytes(payload)
        return cls(
            control2=C.CTRL2_GROUP_HOP6 if is_group else C.CTRL2_INDIVIDUAL_HOP6,
            source=source,
            destination=destination,
            tpdu=tpdu,
        )

    @property
    def is_group(self) -> bool:
        return bool(self.control2 & 0x80)

    @property
    def apci(self) -> int:
        """APCI read/response/write bits (upper 2 bits of the second TPDU byte)."""
        if len(self.tpdu) < 2:
            return C.APCI_GROUP_READ
        return self.tpdu[1] & 0xC0

    @property
    def value(self) -> bytes:
        """Application data carried by the telegram."""
        if len(self.tpdu) < 2:
            return b""
        if len(self.tpdu) == 2:
            return bytes([self.tpdu[1] & 0x3F])
        return self.tpdu[2:]

    def size(self) -> int:
        return 2 + len(self.additional_info) + 7 + len(self.tpdu)

    def pack(self, buffer) -> None:
        info_len = len(self.additional_info)
        with memoryview(buffer) as view:
            struct.pack_into("!BB", view, 0, self.message_code, info_len)
            view[2 : 2 + info_len] = self.additional_info
            offset = 2 + info_len
            struct.pack_into(
                "!BBHHB",
                view,
                offset,
                self.control1,
                self.control2,
                self.source,
                self.destination,
                len(self.tpdu) - 1,
            )
            offset += 7
            view[offset : offset + len(self.tpdu)] = self.tpdu

    @classmethod
    def unpack(cls, data: bytes) -> tuple["LData", int]:
        (code, info_len), n = unpack_some(data, "B", "B")
        if code != cls.message_code:
            raise MessageCodeError(
                f"{cls.__name__} expects message code {cls.message_code:#04x}, got {code:#04x}",
                consumed=n,
            )

        if len(data) - n < info_len:
            raise ShortInputError(
                f"Short input: additional info needs {info_len} byte(s), "
                f"have {len(data) - n}",
                consumed=n,
            )
        additional_info = bytes(data[n : n + info_len])
        n += info_len

        try:
            (ctrl1, ctrl2, src, dst, npdu_len), m = unpack_some(
                data[n:], "B", "B", "H", "H", "B"
            )
        except ShortInputError as exc:
            exc.consumed += n
            raise
        n += m

        # The TPCI octet is not counted by npdu_len
        tpdu_len = npdu_len + 1
        if len(data) - n < tpdu_len:
            raise ShortInputError(
                f"Short input: TPDU needs {tpdu_len} byte(s), have {len(data) - n}",
                consumed=n,
            )
        tpdu = bytes(data[n : n + tpdu_len])
        n += tpdu_len

        message = cls(
            additional_info=additional_info,
            control1=ctrl1,
            control2=ctrl2,
            source=src,
            destination=dst,
            tpdu=tpdu,
        )
        return message, n


class LDataReq(LData):
    """L_Data.req — client asks the gateway to send a telegram."""

    message_code: ClassVar[int] = C.L_DATA_REQ


class LDataCon(LData):
    """L_Data.con — gateway confirms a telegram was sent."""

    message_code: ClassVar[int] = C.L_DATA_CON


class LDataInd(LData):
    """L_Data.ind — telegram received from the bus."""

    message_code: ClassVar[int] = C.L_DATA_IND


class UnsupportedMessage(BaseModel):
    """Any cEMI message this codec does not model. Body kept verbatim."""

    code: int = Field(..., ge=0, le=0xFF)
    data: bytes = b""

    def size(self) -> int:
        return 1 + len(self.data)

    def pack(self, buffer) -> None:
        with memoryview(buffer) as view:
            view[0] = self.code
            view[1 : 1 + len(self.data)] = self.data

    @classmethod
    def unpack(cls, data: bytes) -> tuple["UnsupportedMessage", int]:
        (code,), n = unpack_some(data, "B")
        return cls(code=code, data=bytes(data[n:])), len(data)


CemiMessage = LDataReq | LDataCon | LDataInd | UnsupportedMessage

_MESSAGE_TYPES: dict[int, type[LData]] = {
    C.L_DATA_REQ: LDataReq,
    C.L_DATA_CON: LDataCon,
    C.L_DATA_IND: LDataInd,
}

# ---------------------------------------------------------------------------
# Codec entry points
# ---------------------------------------------------------------------------


def size(message: CemiMessage) -> int:
    """Number of bytes ``message`` occupies when packed."""
    return message.size()


def pack(buffer, message: CemiMessage) -> None:
    """Write exactly ``size(message)`` bytes to the start of ``buffer``."""
    message.pack(buffer)


def encode(message: CemiMessage) -> bytes:
    """Pack ``message`` into a new bytes object."""
    buffer = bytearray(message.size())
    message.pack(buffer)
    return bytes(buffer)


def unpack(data: bytes) -> tuple[CemiMessage, int]:
    """Decode a cEMI frame → (message, bytes_consumed).

    Raises ShortInputError on truncated frames. Unknown message codes are
    not an error; they decode to UnsupportedMessage.
    """
    (code,), _ = unpack_some(data, "B")
    message_type = _MESSAGE_TYPES.get(code)
    if message_type is None:
        logger.debug("Unsupported cEMI message code %#04x", code)
        return UnsupportedMessage.unpack(data)
    return message_type.unpack(data)
