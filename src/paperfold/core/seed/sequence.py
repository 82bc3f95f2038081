from __future__ import annotations

from typing import Iterator, Union

from paperfold.core.constants import LCG_INCREMENT, LCG_MASK, LCG_MULTIPLIER, SEED_MODULUS
from paperfold.core.numeric import to_int32

SeedLike = Union[str, int, bytes]

_SEED_BITS = 256


def reduce_seed(seed: SeedLike) -> int:
    """
    Reduce a 256-bit seed to the seed domain [0, 0x7fffffff).

    Only the upper 64 bits take part; the on-chain evaluator reads the same
    word, so this rule must not change.
    """
    if isinstance(seed, bool):
        raise ValueError("seed must be a hex string, int or bytes")
    if isinstance(seed, str):
        text = seed.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        head = text[:16]
        if not head:
            return 0
        try:
            upper = int(head, 16)
        except ValueError as exc:
            raise ValueError(f"Invalid hex seed '{seed}'") from exc
        return upper % SEED_MODULUS
    if isinstance(seed, (bytes, bytearray)):
        if len(seed) != _SEED_BITS // 8:
            raise ValueError("bytes seed must be exactly 32 bytes")
        return int.from_bytes(bytes(seed[:8]), "big") % SEED_MODULUS
    if isinstance(seed, int):
        if seed < 0 or seed >= 1 << _SEED_BITS:
            raise ValueError("integer seed must be within [0, 2**256)")
        return (seed >> (_SEED_BITS - 64)) % SEED_MODULUS
    raise ValueError(f"Unsupported seed type {type(seed).__name__}")


def seed_to_hex(seed: SeedLike) -> str:
    """Lower-case 0x-prefixed hex form of a seed (ints and bytes are 64 digits)."""
    if isinstance(seed, str):
        text = seed.strip().lower()
        if text.startswith("0x"):
            text = text[2:]
        if text:
            int(text, 16)
        return "0x" + text
    if isinstance(seed, (bytes, bytearray)):
        return "0x" + bytes(seed).hex()
    return f"0x{int(seed):064x}"


class SeededSequence:
    """
    Deterministic float stream keyed by one integer.

    Linear congruential recurrence on exact integers; every value lies in
    [0, 1). Two instances built from the same channel seed yield the same
    infinite sequence.
    """

    __slots__ = ("seed", "_state")

    def __init__(self, seed: int):
        self.seed = int(seed)
        self._state = abs(self.seed) or 1

    def next(self) -> float:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) & LCG_MASK
        return self._state / LCG_MASK

    __call__ = next

    def __iter__(self) -> Iterator[float]:
        while True:
            yield self.next()

    def __repr__(self) -> str:
        return f"SeededSequence(seed={self.seed})"


def channel(seed_num: int, offset: int = 0) -> SeededSequence:
    """Fresh sequence for one decision channel of a reduced seed."""
    return SeededSequence(seed_num + offset)


def hash_seed(seed: int, text: str) -> int:
    """Mutate a step seed with a label, 32-bit rolling hash."""
    h = seed
    for ch in text:
        h = to_int32(to_int32(to_int32(h) << 5) - h + ord(ch))
    return abs(h) or 1
