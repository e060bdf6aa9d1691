"""Tests for the cEMI codec used as the tunnelling request payload."""

from __future__ import annotations

import pytest

from knxtunnel import cemi
from knxtunnel import constants as C
from knxtunnel.cemi import (
    format_group_address,
    format_individual_address,
    parse_group_address,
    parse_individual_address,
)
from knxtunnel.errors import DecodeError, MessageCodeError, ShortInputError


def test_cemi_golden_frame_decode(golden_cemi):
    """Decode a known cEMI frame to guard against silent regressions."""
    message, consumed = cemi.unpack(golden_cemi)

    assert consumed == 11
    assert isinstance(message, cemi.LDataInd)
    assert message.source == parse_individual_address("1.1.10")
    assert message.destination == parse_group_address("1/2/3")
    assert message.is_group
    assert message.apci == C.APCI_GROUP_WRITE
    assert message.value == bytes([0x01])
    assert cemi.size(message) == 11


def test_cemi_golden_frame_encode(golden_cemi):
    message = cemi.LDataInd.group_value(
        source=parse_individual_address("1.1.10"),
        destination=parse_group_address("1/2/3"),
        apci=C.APCI_GROUP_WRITE,
        payload=bytes([0x01]),
    )
    assert cemi.encode(message) == golden_cemi


def test_cemi_roundtrip_group_read():
    """GroupRead encodes as a short frame and decodes back cleanly."""
    message = cemi.LDataReq.group_value(
        source=parse_individual_address("1.1.10"),
        destination=parse_group_address("1/2/3"),
        apci=C.APCI_GROUP_READ,
    )
    decoded, consumed = cemi.unpack(cemi.encode(message))

    assert consumed == cemi.size(message)
    assert isinstance(decoded, cemi.LDataReq)
    assert decoded.apci == C.APCI_GROUP_READ
    # Short frame GroupRead yields a zero data byte
    assert decoded.value == bytes([0x00])


def test_cemi_roundtrip_group_response_long_payload():
    """GroupResponse with multi-byte payload uses the extended format."""
    message = cemi.LDataCon.group_value(
        source=parse_individual_address("1.1.10"),
        destination=parse_group_address("1/2/3"),
        apci=C.APCI_GROUP_RESPONSE,
        payload=bytes([0x12, 0x34]),
    )
    encoded = cemi.encode(message)
    # npdu_len does not count the TPCI octet
    assert encoded[8] == 3

    decoded, _ = cemi.unpack(encoded)
    assert decoded.apci == C.APCI_GROUP_RESPONSE
    assert decoded.value == bytes([0x12, 0x34])


def test_cemi_additional_info_is_preserved():
    message = cemi.LDataInd(
        additional_info=bytes([0x03, 0x01, 0x02]),
        source=0x1101,
        destination=0x0001,
        tpdu=bytes([0x00, 0x80]),
    )
    encoded = cemi.encode(message)
    assert encoded[:5] == bytes([C.L_DATA_IND, 0x03, 0x03, 0x01, 0x02])

    decoded, consumed = cemi.unpack(encoded)
    assert consumed == len(encoded) == 14
    assert decoded.additional_info == bytes([0x03, 0x01, 0x02])
    assert decoded.tpdu == bytes([0x00, 0x80])


def test_cemi_individual_destination():
    message = cemi.LDataReq.group_value(
        source=0x1001, destination=0x1102, apci=C.APCI_GROUP_READ, is_group=False
    )
    assert message.control2 == C.CTRL2_INDIVIDUAL_HOP6
    assert not message.is_group


def test_cemi_unknown_message_code_is_passed_through():
    data = bytes([0xFC, 0x00, 0x00, 0x01, 0x31, 0x10, 0x01])
    message, consumed = cemi.unpack(data)

    assert isinstance(message, cemi.UnsupportedMessage)
    assert message.code == 0xFC
    assert consumed == len(data)
    assert cemi.encode(message) == data


def test_cemi_pack_into_offset_buffer(golden_cemi, golden_message):
    buffer = bytearray(16)
    cemi.pack(memoryview(buffer)[5:], golden_message)
    assert bytes(buffer[5:]) == golden_cemi
    assert bytes(buffer[:5]) == bytes(5)


@pytest.mark.parametrize(
    ("length", "expected_consumed"),
    [
        (0, 0),  # nothing at all
        (1, 1),  # msg_code without add_info_len
        (5, 4),  # ctrl1/ctrl2 read, source address cut short
        (9, 9),  # header complete, TPDU missing
        (10, 9),  # TPDU cut short
    ],
)
def test_decode_cemi_short_buffer_raises(golden_cemi, length: int, expected_consumed: int):
    with pytest.raises(ShortInputError) as excinfo:
        cemi.unpack(golden_cemi[:length])
    assert excinfo.value.consumed == expected_consumed


def test_decode_cemi_truncated_additional_info():
    with pytest.raises(ShortInputError) as excinfo:
        cemi.unpack(bytes([C.L_DATA_IND, 0x04, 0x01]))
    assert excinfo.value.consumed == 2


def test_decode_cemi_ignores_trailing_bytes(golden_cemi):
    _, consumed = cemi.unpack(golden_cemi + b"\xff\xff")
    assert consumed == 11


@pytest.mark.parametrize(
    "address",
    ["0.0.0", "1.0.0", "15.15.255"],
)
def test_individual_address_roundtrip(address: str):
    """Individual address parse/format should roundtrip."""
    encoded = parse_individual_address(address)
    assert format_individual_address(encoded) == address


@pytest.mark.parametrize(
    "address",
    ["0/0/0", "1/2/3", "31/7/255"],
)
def test_group_address_roundtrip(address: str):
    """Group address parse/format should roundtrip for 3-level addresses."""
    encoded = parse_group_address(address)
    assert format_group_address(encoded) == address


def test_ldata_unpack_rejects_other_message_code(golden_cemi):
    """Decoding an L_Data.ind frame as L_Data.req is a decode error."""
    with pytest.raises(MessageCodeError, match="expects message code 0x11") as excinfo:
        cemi.LDataReq.unpack(golden_cemi)
    assert isinstance(excinfo.value, DecodeError)
    assert excinfo.value.consumed == 2
