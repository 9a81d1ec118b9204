# SPDX-License-Identifier: MIT
"""Base91 text encoding for self-contained v4 payloads.

Packs 13 or 14 bits into every pair of symbols, which is roughly 15% denser
than base64.
"""

from __future__ import annotations

from constants import BASE91_ALPHABET

_DECODE_TABLE = {symbol: index for index, symbol in enumerate(BASE91_ALPHABET)}


def encode_base91(data: bytes) -> str:
    """Return ``data`` encoded with the base91 alphabet."""

    out: list[str] = []
    bits = 0
    count = 0
    for byte in data:
        bits |= byte << count
        count += 8
        if count > 13:
            value = bits & 8191
            if value > 88:
                bits >>= 13
                count -= 13
            else:
                value = bits & 16383
                bits >>= 14
                count -= 14
            out.append(BASE91_ALPHABET[value % 91])
            out.append(BASE91_ALPHABET[value // 91])
    if count:
        out.append(BASE91_ALPHABET[bits % 91])
        if count > 7 or bits > 90:
            out.append(BASE91_ALPHABET[bits // 91])
    return "".join(out)


def decode_base91(text: str) -> bytes:
    """Return the bytes encoded in ``text``.

    Raises:
        ValueError: If ``text`` contains a symbol outside the alphabet.
    """

    out = bytearray()
    bits = 0
    count = 0
    pending = -1
    for symbol in text:
        digit = _DECODE_TABLE.get(symbol)
        if digit is None:
            raise ValueError(f"Invalid base91 symbol {symbol!r}")
        if pending < 0:
            pending = digit
            continue
        pending += digit * 91
        bits |= pending << count
        count += 13 if (pending & 8191) > 88 else 14
        while count >= 8:
            out.append(bits & 255)
            bits >>= 8
            count -= 8
        pending = -1
    if pending > -1:
        out.append((bits | pending << count) & 255)
    return bytes(out)


def is_base91(text: str) -> bool:
    """Return ``True`` when every character of ``text`` is a base91 symbol."""

    return all(symbol in _DECODE_TABLE for symbol in text)


__all__ = ["encode_base91", "decode_base91", "is_base91"]
