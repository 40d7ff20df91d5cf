"""Portable pseudo-random generator: L'Ecuyer with a Bays-Durham shuffle."""

from __future__ import annotations

import math
import sys

_NTAB = 32
_IM1 = 2147483563
_IM2 = 2147483399
_IMM1 = _IM1 - 1
_AM = 1.0 / _IM1
_IA1 = 40014
_IA2 = 40692
_IQ1 = 53668
_IQ2 = 52774
_IR1 = 12211
_IR2 = 3791
_NDIV = 1 + _IMM1 // _NTAB
_EPS = sys.float_info.epsilon
_RNMX = 1.0 - _EPS

_GAUSSIAN_DRAWS = 12


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


class Random:
    """Seeded generator giving reproducible sequences.

    Seeds 0 and 1 give the same sequence, and a negative seed gives the
    same sequence as its absolute value.
    """

    def __init__(self, seed: int = 0) -> None:
        self._idum = 0
        self._idum2 = 123456789
        self._iy = 0
        self._iv = [0] * _NTAB
        self.randomize(seed)

    def randomize(self, seed: int = 0) -> None:
        """Reset the generator state from ``seed``."""
        if seed <= 0:
            idum = 1 if seed == 0 else -seed
        else:
            idum = seed
        self._idum2 = abs(idum)

        for j in range(_NTAB + 7, -1, -1):
            k = _tdiv(idum, _IQ1)
            idum = _IA1 * (idum - k * _IQ1) - k * _IR1
            if idum < 0:
                idum += _IM1
            if j < _NTAB:
                self._iv[j] = idum

        self._idum = idum
        self._iy = self._iv[0]

    def _next(self) -> float:
        k = _tdiv(self._idum, _IQ1)
        self._idum = _IA1 * (self._idum - k * _IQ1) - k * _IR1
        if self._idum < 0:
            self._idum += _IM1

        k = _tdiv(self._idum2, _IQ2)
        self._idum2 = _IA2 * (self._idum2 - k * _IQ2) - k * _IR2
        if self._idum2 < 0:
            self._idum2 += _IM2

        j = _tdiv(self._iy, _NDIV)
        self._iy = self._iv[j] - self._idum2
        self._iv[j] = self._idum
        if self._iy < 1:
            self._iy += _IMM1

        return min(_AM * self._iy, _RNMX)

    def uniform(self) -> float:
        """Return a float drawn uniformly from the open interval (0, 1)."""
        return self._next()

    def uniform_between(self, low: float, high: float) -> float:
        """Return a float drawn uniformly between ``low`` and ``high``."""
        return low + (high - low) * self._next()

    def uniform_int(self, low: int, high: int) -> int:
        """Return an integer drawn uniformly from ``low`` to ``high`` inclusive."""
        return int(low + (high + 1 - low) * self._next())

    def gaussian(self, mean: float = 0.0, standard_deviation: float = 1.0) -> float:
        """Return an approximately normal sample (sum of twelve uniforms)."""
        value = sum(self.uniform() for _ in range(_GAUSSIAN_DRAWS))
        value -= _GAUSSIAN_DRAWS // 2
        if _GAUSSIAN_DRAWS == 12:
            value *= standard_deviation
        else:
            value *= math.sqrt(12 / _GAUSSIAN_DRAWS) * standard_deviation
        return value + mean

    def exponential(self, rate: float) -> float:
        """Return a sample from the exponential distribution with ``rate``."""
        return -math.log(self.uniform()) / rate