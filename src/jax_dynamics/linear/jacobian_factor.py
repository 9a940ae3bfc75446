"""Linear Gaussian factors in Jacobian form: sum_k A_k x_k - b."""

from dataclasses import dataclass
from typing import Dict, Hashable, Mapping, Optional, Sequence, Tuple

import numpy as np

from .noise_model import NoiseModel

Key = Hashable


@dataclass(frozen=True, eq=False)
class JacobianFactor:
    """Immutable linear factor over a small set of keyed variables.

    Attributes:
        keys: Variable keys, in block order.
        blocks: One (rows, dim(key)) coefficient matrix per key.
        b: (rows,) right-hand side.
        model: Row noise model; hard rows have zero sigma.
    """
    keys: Tuple[Key, ...]
    blocks: Tuple[np.ndarray, ...]
    b: np.ndarray
    model: NoiseModel

    @classmethod
    def create(cls, terms: Sequence[Tuple[Key, object]], b,
               model: Optional[NoiseModel] = None) -> "JacobianFactor":
        """Build a factor from (key, matrix) pairs.

        Matrices may be JAX or NumPy arrays; a 1-D coefficient of length `rows`
        is read as a single column (a scalar variable). Without a model the
        factor has unit noise.
        """
        b = np.atleast_1d(np.asarray(b, dtype=np.float64))
        keys = []
        blocks = []
        for key, A in terms:
            if key in keys:
                raise ValueError(f"Key {key} appears twice in factor")
            A = np.asarray(A, dtype=np.float64)
            if A.ndim == 1:
                A = A.reshape(b.shape[0], -1) if A.shape[0] == b.shape[0] else A.reshape(1, -1)
            if A.shape[0] != b.shape[0]:
                raise ValueError(
                    f"Block for {key} has {A.shape[0]} rows but b has {b.shape[0]}")
            keys.append(key)
            blocks.append(A)
        if model is None:
            model = NoiseModel.unit(b.shape[0])
        if model.dim != b.shape[0]:
            raise ValueError(f"Noise model dimension {model.dim} does not match {b.shape[0]} rows")
        return cls(tuple(keys), tuple(blocks), b, model)

    @classmethod
    def empty(cls) -> "JacobianFactor":
        return cls((), (), np.zeros(0), NoiseModel.unit(0))

    @property
    def rows(self) -> int:
        return self.b.shape[0]

    @property
    def dims(self) -> Dict[Key, int]:
        return {key: A.shape[1] for key, A in zip(self.keys, self.blocks)}

    def is_empty(self) -> bool:
        return len(self.keys) == 0

    def block(self, key: Key) -> np.ndarray:
        return self.blocks[self.keys.index(key)]

    def unweighted_error(self, values: Mapping[Key, object]) -> np.ndarray:
        """A x - b for the variables in `values`."""
        residual = -self.b.copy()
        for key, A in zip(self.keys, self.blocks):
            residual += A @ np.atleast_1d(np.asarray(values[key], dtype=np.float64))
        return residual

    def error(self, values: Mapping[Key, object]) -> float:
        """Half the squared Mahalanobis norm of the residual."""
        return 0.5 * self.model.squared_mahalanobis(self.unweighted_error(values))

    def __repr__(self):
        keys = ", ".join(str(k) for k in self.keys)
        return f"JacobianFactor(keys=[{keys}], rows={self.rows}, model={self.model!r})"
