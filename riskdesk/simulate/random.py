"""
Seedable random source shared by the simulators.

Wraps a numpy Generator so that every simulation can be reproduced from a
seed, or driven by a Generator the caller already owns. There is no
module-level generator state: each call builds or receives its own source.

Example:
    >>> source = make_random_source(seed=42)
    >>> z = source.normal()
"""

import math
from typing import Optional, Tuple, Union

import numpy as np


# Lower bound for the first Box-Muller uniform (log(0) guard)
MIN_UNIFORM = 1e-10

SeedLike = Union[None, int, np.random.Generator]


class RandomSource:
    """
    Random draws for the resampling and path simulators.

    Args:
        seed: None for fresh OS entropy, an int seed, or an existing
            numpy Generator to draw from.
    """

    def __init__(self, seed: SeedLike = None):
        if isinstance(seed, np.random.Generator):
            self._generator = seed
        else:
            self._generator = np.random.default_rng(seed)
        self._cached_normal: Optional[float] = None

    @property
    def generator(self) -> np.random.Generator:
        return self._generator

    def uniform(self) -> float:
        """Uniform draw in [0, 1)."""
        return float(self._generator.random())

    def integers(self, high: int, size: Optional[int] = None):
        """Uniform integer(s) in [0, high)."""
        return self._generator.integers(0, high, size=size)

    def choice_indices(self, n: int, size: Union[int, Tuple[int, ...]]) -> np.ndarray:
        """Indices drawn uniformly with replacement from range(n), in the given shape."""
        return self._generator.integers(0, n, size=size)

    def normal(self) -> float:
        """
        Standard normal draw by the Box-Muller transform.

        Each transform yields two independent values; the second is cached and
        returned by the next call.
        """
        if self._cached_normal is not None:
            value = self._cached_normal
            self._cached_normal = None
            return value

        u1 = max(self.uniform(), MIN_UNIFORM)
        u2 = self.uniform()
        magnitude = math.sqrt(-2.0 * math.log(u1))
        theta = 2.0 * math.pi * u2

        self._cached_normal = magnitude * math.sin(theta)
        return magnitude * math.cos(theta)

    def student_t(self, df: float) -> float:
        """
        Student-t draw: a normal divided by sqrt(chi2 / df).

        The chi-square is the sum of ceil(df) squared normals, so fractional
        degrees of freedom round up.
        """
        if df <= 0:
            raise ValueError(f"Degrees of freedom must be positive. Got: {df}")

        z = self.normal()
        chi_square = 0.0
        for _ in range(int(math.ceil(df))):
            zi = self.normal()
            chi_square += zi * zi

        if chi_square == 0:
            return 0.0
        return z / math.sqrt(chi_square / df)


def make_random_source(
    rng: Optional[Union[RandomSource, np.random.Generator]] = None,
    seed: Optional[int] = None
) -> RandomSource:
    """
    Resolve the simulators' rng/seed arguments to a RandomSource.

    An explicit rng wins over seed; with neither, draws are unseeded.
    """
    if isinstance(rng, RandomSource):
        return rng
    if rng is not None:
        return RandomSource(rng)
    return RandomSource(seed)
