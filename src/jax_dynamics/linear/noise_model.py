"""Diagonal Gaussian noise models, including hard (zero-sigma) constraints."""

from dataclasses import dataclass

import numpy as np

# Penalty weight applied to hard rows when evaluating a factor's error.
DEFAULT_MU = 1000.0


@dataclass(frozen=True, eq=False)
class NoiseModel:
    """Per-row standard deviations of a linear factor.

    A sigma of exactly zero marks a hard equality row. Models with at least
    one such row are "constrained" and are eliminated with weighted
    Gram-Schmidt instead of QR.
    """
    sigmas: np.ndarray
    mu: float = DEFAULT_MU

    # Constructors
    @classmethod
    def unit(cls, dim: int) -> "NoiseModel":
        return cls(np.ones(dim))

    @classmethod
    def isotropic(cls, dim: int, sigma: float) -> "NoiseModel":
        return cls(np.full(dim, float(sigma)))

    @classmethod
    def diagonal(cls, sigmas) -> "NoiseModel":
        return cls(np.asarray(sigmas, dtype=np.float64).reshape(-1))

    @classmethod
    def constrained(cls, dim: int) -> "NoiseModel":
        """All rows are hard constraints."""
        return cls(np.zeros(dim))

    @classmethod
    def mixed(cls, sigmas, mu: float = DEFAULT_MU) -> "NoiseModel":
        """Soft rows with the given sigmas, hard rows where sigma is zero."""
        return cls(np.asarray(sigmas, dtype=np.float64).reshape(-1), mu)

    @classmethod
    def from_precisions(cls, precisions, mu: float = DEFAULT_MU) -> "NoiseModel":
        precisions = np.asarray(precisions, dtype=np.float64)
        with np.errstate(divide="ignore"):
            sigmas = np.where(np.isinf(precisions), 0.0, 1.0 / np.sqrt(precisions))
        return cls(sigmas, mu)

    # Properties
    @property
    def dim(self) -> int:
        return self.sigmas.shape[0]

    @property
    def hard_rows(self) -> np.ndarray:
        return self.sigmas == 0.0

    @property
    def is_constrained(self) -> bool:
        return bool(np.any(self.hard_rows))

    @property
    def is_unit(self) -> bool:
        return bool(np.all(self.sigmas == 1.0))

    @property
    def precisions(self) -> np.ndarray:
        with np.errstate(divide="ignore"):
            return np.where(self.hard_rows, np.inf, 1.0 / self.sigmas**2)

    def whiten(self, v: np.ndarray) -> np.ndarray:
        """Divide rows by their sigma; only defined for soft models."""
        if self.is_constrained:
            raise ValueError("Cannot whiten a constrained noise model")
        scale = 1.0 / self.sigmas
        return v * (scale[:, None] if v.ndim == 2 else scale)

    def squared_mahalanobis(self, residual: np.ndarray) -> float:
        """Soft rows are whitened, hard rows are weighted by mu."""
        residual = np.asarray(residual, dtype=np.float64)
        hard = self.hard_rows
        soft = residual[~hard] / self.sigmas[~hard]
        return float(soft @ soft + self.mu * residual[hard] @ residual[hard])

    def equals(self, other: "NoiseModel", tol: float = 1e-9) -> bool:
        return self.dim == other.dim and np.allclose(self.sigmas, other.sigmas, atol=tol)

    def __repr__(self):
        kind = "Constrained" if self.is_constrained else ("Unit" if self.is_unit else "Diagonal")
        return f"NoiseModel.{kind}(sigmas={self.sigmas})"
