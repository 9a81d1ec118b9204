# SPDX-License-Identifier: MIT
"""Deterministic seed derivation from token strings.

The hashing and the sfc32 generator below are part of the wire format: every
issued token renders identically only while these functions return the same
values for the same input. Do not change the arithmetic.
"""

from __future__ import annotations

import secrets
from typing import Callable

from constants import SEED_ALPHABET, SEED_LENGTH, TOKEN_PREFIX

from .digest import utf16_units

_MASK32 = 0xFFFFFFFF
_TWO_POW_32 = 4294967296.0


def _int32(value: int) -> int:
    """Wrap ``value`` to a signed 32-bit integer."""

    value &= _MASK32
    return value - 0x100000000 if value & 0x80000000 else value


def hash_token(token: str) -> tuple[int, int, int, int]:
    """Fold ``token`` into four non-negative 32-bit lanes.

    Each UTF-16 code unit updates lane ``i % 4`` with ``h * 31 + code``
    wrapped to signed 32 bits. Lanes are returned as absolute values.
    """

    lanes = [0, 0, 0, 0]
    for index, code in enumerate(utf16_units(token)):
        lane = index % 4
        current = lanes[lane]
        lanes[lane] = _int32((_int32(current << 5) - current) + code)
    return (abs(lanes[0]), abs(lanes[1]), abs(lanes[2]), abs(lanes[3]))


class Sfc32:
    """Small fast counting PRNG with 128 bits of state.

    Calling an instance returns the next float in ``[0, 1)``.
    """

    __slots__ = ("_a", "_b", "_c", "_d")

    def __init__(self, a: int, b: int, c: int, d: int) -> None:
        self._a = a & _MASK32
        self._b = b & _MASK32
        self._c = c & _MASK32
        self._d = d & _MASK32

    def next_uint32(self) -> int:
        """Advance the state and return the next unsigned 32-bit output."""

        a, b, c, d = self._a, self._b, self._c, self._d
        t = (a + b) & _MASK32
        a = b ^ (b >> 9)
        b = (c + (c << 3)) & _MASK32
        c = ((c << 21) | (c >> 11)) & _MASK32
        d = (d + 1) & _MASK32
        t = (t + d) & _MASK32
        c = (c + t) & _MASK32
        self._a, self._b, self._c, self._d = a, b, c, d
        return t

    def __call__(self) -> float:
        return self.next_uint32() / _TWO_POW_32


def create_seeded_random(token: str) -> Callable[[], float]:
    """Return a generator whose n-th call is a pure function of ``token``."""

    return Sfc32(*hash_token(token))


def token_to_seed(token: str) -> int:
    """Return the unsigned 32-bit integer seed for ``token``."""

    return hash_token(token)[0]


def generate_token(artwork_type: str) -> str:
    """Return a fresh legacy seed token for ``artwork_type``.

    Uses the operating system's CSPRNG; only the resulting string is
    deterministic input for rendering.
    """

    seed = "".join(secrets.choice(SEED_ALPHABET) for _ in range(SEED_LENGTH))
    return f"{TOKEN_PREFIX}-{artwork_type}-{seed}"


__all__ = [
    "hash_token",
    "Sfc32",
    "create_seeded_random",
    "token_to_seed",
    "generate_token",
]
