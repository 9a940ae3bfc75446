"""Gaussian conditional densities produced by elimination."""

from dataclasses import dataclass
from typing import Hashable, Mapping, Optional, Tuple

import numpy as np

from .noise_model import NoiseModel

Key = Hashable


@dataclass(frozen=True, eq=False)
class GaussianConditional:
    """p(x_f | parents) encoded as R x_f + sum_k S_k x_k = d.

    R is upper triangular. `model` holds the row sigmas; None means unit.
    Without `d` the right-hand side is zero.
    """
    frontal: Key
    R: np.ndarray
    parents: Tuple[Key, ...] = ()
    S: Tuple[np.ndarray, ...] = ()
    d: Optional[np.ndarray] = None
    model: Optional[NoiseModel] = None

    def __post_init__(self):
        if self.d is None:
            object.__setattr__(self, "d", np.zeros(self.R.shape[0]))

    @classmethod
    def create(cls, frontal: Key, d, R, parents=(), model: Optional[NoiseModel] = None):
        """Build from `parents`, a sequence of (key, S) pairs."""
        R = np.atleast_2d(np.asarray(R, dtype=np.float64))
        d = np.atleast_1d(np.asarray(d, dtype=np.float64))
        keys = tuple(key for key, _ in parents)
        S = tuple(np.asarray(s, dtype=np.float64).reshape(R.shape[0], -1) for _, s in parents)
        return cls(frontal, R, keys, S, d, model)

    @property
    def keys(self) -> Tuple[Key, ...]:
        return (self.frontal,) + self.parents

    @property
    def sigmas(self) -> np.ndarray:
        return np.ones(self.R.shape[0]) if self.model is None else self.model.sigmas

    def solve(self, parent_values: Mapping[Key, object]) -> np.ndarray:
        """Value of the frontal variable given its parents."""
        rhs = self.d.copy()
        for key, S in zip(self.parents, self.S):
            rhs -= S @ np.atleast_1d(np.asarray(parent_values[key], dtype=np.float64))
        return np.linalg.solve(self.R, rhs)

    def equals(self, other: "GaussianConditional", tol: float = 1e-9) -> bool:
        if self.frontal != other.frontal or self.parents != other.parents:
            return False
        if self.R.shape != other.R.shape:
            return False
        same = (np.allclose(self.R, other.R, atol=tol)
                and np.allclose(self.d, other.d, atol=tol)
                and np.allclose(self.sigmas, other.sigmas, atol=tol))
        return same and all(
            s.shape == o.shape and np.allclose(s, o, atol=tol) for s, o in zip(self.S, other.S))

    def __repr__(self):
        parents = ", ".join(str(k) for k in self.parents)
        return f"GaussianConditional({self.frontal} | {parents})"
