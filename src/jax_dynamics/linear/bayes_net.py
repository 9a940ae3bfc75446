"""Ordered sequence of Gaussian conditionals."""

from typing import Dict, Hashable, Iterator, List

import numpy as np

from .conditional import GaussianConditional

Key = Hashable


class GaussianBayesNet:
    """Conditionals in elimination order; each depends only on later ones."""

    def __init__(self, conditionals=()):
        self._conditionals: List[GaussianConditional] = list(conditionals)

    def push_back(self, conditional: GaussianConditional) -> None:
        self._conditionals.append(conditional)

    def ordering(self) -> List[Key]:
        return [c.frontal for c in self._conditionals]

    def optimize(self) -> Dict[Key, np.ndarray]:
        """Most probable values by back-substitution from the last conditional."""
        solution: Dict[Key, np.ndarray] = {}
        for conditional in reversed(self._conditionals):
            solution[conditional.frontal] = conditional.solve(solution)
        return solution

    def equals(self, other: "GaussianBayesNet", tol: float = 1e-9) -> bool:
        return len(self) == len(other) and all(
            a.equals(b, tol) for a, b in zip(self, other))

    def __getitem__(self, i: int) -> GaussianConditional:
        return self._conditionals[i]

    def __iter__(self) -> Iterator[GaussianConditional]:
        return iter(self._conditionals)

    def __len__(self) -> int:
        return len(self._conditionals)

    def __repr__(self):
        return f"GaussianBayesNet({self._conditionals})"
