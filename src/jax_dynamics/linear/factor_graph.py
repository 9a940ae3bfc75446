"""Gaussian factor graph with stable factor indices."""

from typing import Hashable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .jacobian_factor import JacobianFactor
from .noise_model import NoiseModel

Key = Hashable


class GaussianFactorGraph:
    """Ordered collection of linear factors.

    Removing a factor leaves an empty slot, so the indices of the remaining
    factors never change; a `VariableIndex` built on the graph stays valid.
    """

    def __init__(self, factors: Sequence[JacobianFactor] = ()):
        self._factors: List[Optional[JacobianFactor]] = list(factors)

    def push_back(self, factor: JacobianFactor) -> int:
        """Append a factor and return its index."""
        self._factors.append(factor)
        return len(self._factors) - 1

    def add(self, terms: Sequence[Tuple[Key, object]], b, model: Optional[NoiseModel] = None) -> int:
        """Create a `JacobianFactor` from (key, matrix) terms and append it."""
        return self.push_back(JacobianFactor.create(terms, b, model))

    def push_back_graph(self, other: "GaussianFactorGraph") -> None:
        for factor in other:
            self.push_back(factor)

    def remove(self, index: int) -> None:
        self._factors[index] = None

    def at(self, index: int) -> Optional[JacobianFactor]:
        return self._factors[index]

    def __getitem__(self, index: int) -> Optional[JacobianFactor]:
        return self._factors[index]

    def size(self) -> int:
        """Number of slots, including removed ones."""
        return len(self._factors)

    def n_factors(self) -> int:
        return sum(1 for _ in self)

    def __len__(self) -> int:
        return self.n_factors()

    def __iter__(self) -> Iterator[JacobianFactor]:
        return (f for f in self._factors if f is not None)

    def slots(self) -> Iterator[Tuple[int, Optional[JacobianFactor]]]:
        return enumerate(self._factors)

    def keys(self) -> List[Key]:
        """Keys in order of first appearance."""
        seen = {}
        for factor in self:
            for key in factor.keys:
                seen.setdefault(key, None)
        return list(seen)

    def copy(self) -> "GaussianFactorGraph":
        # Factors are immutable, only the slot list is copied.
        graph = GaussianFactorGraph()
        graph._factors = list(self._factors)
        return graph

    def error(self, values: Mapping[Key, object]) -> float:
        return sum(factor.error(values) for factor in self)

    def __repr__(self):
        return f"GaussianFactorGraph(size={self.size()}, factors={self.n_factors()})"
