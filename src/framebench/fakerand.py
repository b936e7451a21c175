"""Deterministic, replayable pseudo-random source for workloads.

``FakeRand`` reads from a fixed byte buffer shipped with the package
(``data/random_bytes.bin``) through a cursor that wraps around forever.  Two
fresh instances always produce the same sequence, across processes and
machines, so two runs of the same workload do identical logical work.

There is no seeding and no entropy source.  Each simulation owns its own
instance; the cursor is never shared between execution contexts.
"""

from __future__ import annotations

from importlib import resources

_SEED_RESOURCE = "data/random_bytes.bin"

_seed_cache: bytes | None = None


def seed_bytes() -> bytes:
    """Return the shipped seed buffer (read once, then cached)."""
    global _seed_cache
    if _seed_cache is None:
        _seed_cache = resources.files("framebench").joinpath(_SEED_RESOURCE).read_bytes()
    return _seed_cache


class FakeRand:
    """Cycling byte-buffer random number generator.

    Usage::

        rng = FakeRand()
        x = rng.gen_range(-400.0, 400.0)
        n = rng.gen_range(1, 50)
    """

    def __init__(self, buffer: bytes | None = None) -> None:
        data = seed_bytes() if buffer is None else bytes(buffer)
        if not data:
            raise ValueError("FakeRand needs a non-empty byte buffer")
        self._buffer = data
        self._pos = 0

    @property
    def position(self) -> int:
        """Current cursor offset into the buffer."""
        return self._pos

    @property
    def period(self) -> int:
        """Length of the buffer, after which the sequence repeats."""
        return len(self._buffer)

    def next_bytes(self, n: int) -> bytes:
        """Read *n* bytes, wrapping around the buffer as often as needed."""
        if n < 0:
            raise ValueError(f"Cannot read a negative number of bytes ({n})")
        buf = self._buffer
        size = len(buf)
        out = bytearray()
        pos = self._pos
        while n > 0:
            chunk = buf[pos : pos + n]
            out += chunk
            n -= len(chunk)
            pos = (pos + len(chunk)) % size
        self._pos = pos
        return bytes(out)

    def skip(self, n: int) -> None:
        """Advance the cursor by *n* bytes without producing output."""
        if n < 0:
            raise ValueError(f"Cannot skip a negative number of bytes ({n})")
        self._pos = (self._pos + n) % len(self._buffer)

    def next_u32(self) -> int:
        return int.from_bytes(self.next_bytes(4), "little")

    def next_u64(self) -> int:
        return int.from_bytes(self.next_bytes(8), "little")

    def random(self) -> float:
        """Uniform float in ``[0.0, 1.0)`` built from the top 53 bits of a u64."""
        return (self.next_u64() >> 11) * (1.0 / (1 << 53))

    def gen_bool(self) -> bool:
        return bool(self.next_bytes(1)[0] & 1)

    def gen_range(self, lo: int | float, hi: int | float) -> int | float:
        """Sample uniformly from the half-open range ``[lo, hi)``.

        Integer bounds give an integer (widening multiply of a u64 by the
        span); any float bound gives a float.
        """
        if not lo < hi:
            raise ValueError(f"Empty range [{lo}, {hi})")
        if isinstance(lo, int) and isinstance(hi, int):
            return lo + ((self.next_u64() * (hi - lo)) >> 64)
        return lo + (hi - lo) * self.random()
