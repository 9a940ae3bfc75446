"""Map from variable keys to the factors that involve them."""

from typing import Dict, Hashable, Iterable, List, Optional, Tuple

from .factor_graph import GaussianFactorGraph
from .jacobian_factor import JacobianFactor

Key = Hashable


class VariableIndex:
    """Incrementally maintained key -> factor-index map."""

    def __init__(self, graph: Optional[GaussianFactorGraph] = None):
        self._index: Dict[Key, List[int]] = {}
        if graph is not None:
            for i, factor in graph.slots():
                if factor is not None:
                    self.augment(factor, i)

    def augment(self, factor: JacobianFactor, index: int) -> None:
        for key in factor.keys:
            self._index.setdefault(key, []).append(index)

    def remove(self, index: int, keys: Iterable[Key]) -> None:
        for key in keys:
            self._index[key].remove(index)

    def __getitem__(self, key: Key) -> Tuple[int, ...]:
        return tuple(self._index.get(key, ()))

    def __contains__(self, key: Key) -> bool:
        return bool(self._index.get(key))

    def keys(self):
        return self._index.keys()

    def n_variables(self) -> int:
        return len(self._index)
