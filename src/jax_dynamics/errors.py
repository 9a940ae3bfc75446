"""Exceptions raised by jax_dynamics."""


class MissingValueError(KeyError):
    """A requested quantity is absent from a known-value collection."""

    def __init__(self, key, container: str = "values"):
        self.key = key
        super().__init__(f"{key} does not exist in {container}")

    def __str__(self):
        return self.args[0]


class InvalidOrderingError(ValueError):
    """An elimination ordering is not a permutation of the graph's keys."""


class IndeterminantLinearSystemError(ValueError):
    """A frontal variable carries no information during elimination."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Indeterminant linear system detected while eliminating {key}")
