"""Pytest configuration and shared fixtures for knxtunnel tests."""

from __future__ import annotations

import os
import sys

import pytest

_TESTS_DIR = os.path.dirname(__file__)
_PROJECT_ROOT = os.path.abspath(os.path.join(_TESTS_DIR, ".."))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

# L_Data.ind, src=1.1.10, dst=1/2/3, GroupWrite, payload=0x01
GOLDEN_CEMI = bytes([0x29, 0x00, 0xBC, 0xE0, 0x11, 0x0A, 0x0A, 0x03, 0x01, 0x00, 0x81])


@pytest.fixture
def golden_cemi() -> bytes:
    """The 11-byte reference cEMI frame."""
    return GOLDEN_CEMI


@pytest.fixture
def golden_message(golden_cemi):
    """The reference cEMI frame decoded into a message model."""
    from knxtunnel import cemi

    message, _ = cemi.unpack(golden_cemi)
    return message
