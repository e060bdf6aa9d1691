"""Shared decode helper for fixed sequences of integer fields."""

import struct

from .errors import ShortInputError


def unpack_some(data: bytes, *fields: str) -> tuple[tuple[int, ...], int]:
    """Read ``fields`` in order from the start of ``data``.

    Each field is a single ``struct`` format character ("B", "H", "I", ...)
    and is decoded in network byte order. Returns ``(values, consumed)``.

    Raises ShortInputError when ``data`` runs out; its ``consumed`` counts
    only the whole fields read before exhaustion.
    """
    values = []
    offset = 0
    for field in fields:
        fmt = "!" + field
        width = struct.calcsize(fmt)
        if len(data) - offset < width:
            raise ShortInputError(
                f"Short input: need {width} byte(s) at offset {offset}, "
                f"have {max(len(data) - offset, 0)}",
                consumed=offset,
            )
        values.append(struct.unpack_from(fmt, data, offset)[0])
        offset += width
    return tuple(values), offset
