"""knxtunnel — decode hex-encoded tunnelling frames for inspection.

Usage:
    knxtunnel 06100421000a04012a00
    knxtunnel --raw-body response 0405112b

Log level comes from KNXTUNNEL_LOG_LEVEL (default WARNING); --verbose
forces DEBUG.
"""

import argparse
import logging
import os
import sys

from . import cemi
from .errors import DecodeError
from .frames import unpack_frame
from .tunnel import TunnelRequest, TunnelResponse

logger = logging.getLogger("knxtunnel")

RAW_BODY_CODECS = {
    "request": TunnelRequest,
    "response": TunnelResponse,
}


def describe(message) -> str:
    """One-line human-readable rendering of a decoded message."""
    if isinstance(message, TunnelResponse):
        return (
            f"TunnelResponse ch={message.channel} seq={message.seq_number} "
            f"status={message.status}"
        )

    payload = message.payload
    if isinstance(payload, cemi.LData):
        dst = (
            cemi.format_group_address(payload.destination)
            if payload.is_group
            else cemi.format_individual_address(payload.destination)
        )
        detail = (
            f"{type(payload).__name__} "
            f"src={cemi.format_individual_address(payload.source)} dst={dst} "
            f"apci={payload.apci:#04x} data={payload.value.hex()}"
        )
    else:
        detail = f"cEMI code={payload.code:#04x} data={payload.data.hex()}"
    return f"TunnelRequest ch={message.channel} seq={message.seq_number} {detail}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="knxtunnel", description="Decode KNXnet/IP tunnelling frames"
    )
    parser.add_argument("frames", nargs="+", metavar="HEX", help="hex-encoded frame")
    parser.add_argument(
        "--raw-body",
        choices=sorted(RAW_BODY_CODECS),
        help="input is a bare body of this kind (no 6-byte header)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    level = "DEBUG" if args.verbose else os.environ.get("KNXTUNNEL_LOG_LEVEL", "WARNING")
    level = level.upper()
    if level not in logging.getLevelNamesMapping():
        print(f"Unknown KNXTUNNEL_LOG_LEVEL {level!r}, using WARNING", file=sys.stderr)
        level = "WARNING"
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )

    failures = 0
    for text in args.frames:
        try:
            data = bytes.fromhex(text)
        except ValueError:
            print(f"{text}: not a hex string", file=sys.stderr)
            failures += 1
            continue

        try:
            if args.raw_body:
                message, consumed = RAW_BODY_CODECS[args.raw_body].unpack(data)
            else:
                message, consumed = unpack_frame(data)
        except DecodeError as e:
            print(f"{text}: {e} (after {e.consumed} bytes)", file=sys.stderr)
            failures += 1
            continue

        logger.debug("Decoded %d of %d bytes from %s", consumed, len(data), text)
        print(describe(message))

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
