"""Sequential variable elimination in a caller-specified order.

General purpose eliminators pick a fill-reducing ordering. Here the ordering is
part of the result: the Bayes net lists one conditional per key, in exactly the
order given, which callers rely on to read structure (e.g. loop closures) off
the eliminated system.
"""

import logging
from collections import Counter
from typing import Hashable, List, Sequence, Tuple

import numpy as np

from ..errors import IndeterminantLinearSystemError, InvalidOrderingError
from .bayes_net import GaussianBayesNet
from .conditional import GaussianConditional
from .factor_graph import GaussianFactorGraph
from .jacobian_factor import JacobianFactor
from .noise_model import NoiseModel
from .variable_index import VariableIndex

logger = logging.getLogger(__name__)

Key = Hashable

_RANK_TOL = 1e-9


def eliminate_sequential(graph: GaussianFactorGraph, ordering: Sequence[Key]) -> GaussianBayesNet:
    """Eliminate every variable of `graph` in `ordering`, one at a time.

    The input graph is not modified. Each step removes the factors touching the
    key, turns them into one conditional (appended to the Bayes net) and one
    joint factor on the remaining keys, which is added back to the graph.

    Raises:
        InvalidOrderingError: `ordering` is not a permutation of the graph's keys.
        IndeterminantLinearSystemError: a variable is not constrained when its
            turn comes.
    """
    ordering = list(ordering)
    _check_ordering(graph, ordering)

    graph = graph.copy()
    variable_index = VariableIndex(graph)
    bayes_net = GaussianBayesNet()

    for key in ordering:
        factor_indices = variable_index[key]
        factors = [graph.at(i) for i in factor_indices]
        for i, factor in zip(factor_indices, factors):
            graph.remove(i)
            variable_index.remove(i, factor.keys)

        logger.debug("Eliminating %s from %d factors", key, len(factors))
        conditional, joint_factor = eliminate_one(factors, key)
        bayes_net.push_back(conditional)

        new_index = graph.push_back(joint_factor)
        variable_index.augment(joint_factor, new_index)

    return bayes_net


def _check_ordering(graph: GaussianFactorGraph, ordering: List[Key]) -> None:
    duplicates = [key for key, count in Counter(ordering).items() if count > 1]
    if duplicates:
        raise InvalidOrderingError(f"Ordering contains duplicate keys: {duplicates}")
    graph_keys = set(graph.keys())
    ordered_keys = set(ordering)
    unknown = [key for key in ordering if key not in graph_keys]
    if unknown:
        raise InvalidOrderingError(f"Ordering contains keys not in the graph: {unknown}")
    missing = [key for key in graph.keys() if key not in ordered_keys]
    if missing:
        raise InvalidOrderingError(f"Ordering is missing graph keys: {missing}")


def eliminate_one(factors: Sequence[JacobianFactor], key: Key) -> Tuple[GaussianConditional, JacobianFactor]:
    """Eliminate `key` from the product of `factors`.

    Returns the conditional on `key` given the other variables of the factors,
    and the joint factor left on those variables. Separator keys keep the
    order in which they first appear in `factors`.
    """
    if not factors:
        raise IndeterminantLinearSystemError(key)

    dims = {key: None}
    for factor in factors:
        for k, dim in factor.dims.items():
            if dims.get(k) is None:
                dims[k] = dim
    if dims[key] is None:
        raise IndeterminantLinearSystemError(key)

    keys = list(dims)
    offsets = np.cumsum([0] + [dims[k] for k in keys])
    n = int(offsets[-1])
    m = sum(f.rows for f in factors)

    Ab = np.zeros((m, n + 1))
    sigmas = np.zeros(m)
    row = 0
    for factor in factors:
        rows = slice(row, row + factor.rows)
        for k, A in zip(factor.keys, factor.blocks):
            col = keys.index(k)
            Ab[rows, offsets[col]:offsets[col + 1]] = A
        Ab[rows, n] = factor.b
        sigmas[rows] = factor.model.sigmas
        row += factor.rows

    model = NoiseModel.diagonal(sigmas)
    if model.is_constrained:
        Rd, pivots, precisions = _weighted_gram_schmidt(Ab, model.precisions)
    else:
        Rd, pivots = _householder(model.whiten(Ab))
        precisions = None

    frontal_dim = dims[key]
    frontal_rows = [i for i, j in enumerate(pivots) if 0 <= j < frontal_dim]
    if len(frontal_rows) != frontal_dim:
        raise IndeterminantLinearSystemError(key)
    other_rows = [i for i, j in enumerate(pivots) if j >= frontal_dim or (j < 0 and i >= frontal_dim)]

    def split(rows):
        return [(k, Rd[rows, offsets[c]:offsets[c + 1]]) for c, k in enumerate(keys) if c > 0]

    def row_model(rows):
        if precisions is None:
            return NoiseModel.unit(len(rows))
        return NoiseModel.from_precisions(precisions[rows])

    conditional_model = row_model(frontal_rows)
    conditional = GaussianConditional(
        frontal=key,
        R=Rd[frontal_rows, :frontal_dim],
        parents=tuple(keys[1:]),
        S=tuple(S for _, S in split(frontal_rows)),
        d=Rd[frontal_rows, n],
        model=None if conditional_model.is_unit else conditional_model,
    )

    if other_rows and len(keys) > 1:
        joint_factor = JacobianFactor.create(split(other_rows), Rd[other_rows, n], row_model(other_rows))
    else:
        joint_factor = JacobianFactor.empty()

    return conditional, joint_factor


def _householder(Ab: np.ndarray):
    """Triangularize [A | b] with QR, positive diagonal.

    Returns the first min(m, n) rows of R, row i sitting on column i. Rows
    below the rank of A only carry the residual of b and are dropped. A
    numerically zero diagonal marks the row's pivot as -1.
    """
    m, n1 = Ab.shape
    n = n1 - 1
    R = np.linalg.qr(Ab, mode="r")
    max_rank = min(m, n)
    R = R[:max_rank].copy()
    diag = np.diagonal(R[:, :n]).copy()
    R[diag < 0] *= -1.0

    scale = max(1.0, float(np.abs(Ab).max(initial=0.0)))
    pivots = [i if abs(R[i, i]) > _RANK_TOL * scale else -1 for i in range(max_rank)]
    return R, pivots


def _weighted_pseudoinverse(a: np.ndarray, weights: np.ndarray):
    """Pseudo-inverse of column `a` under row `weights` (inf for hard rows)."""
    hard = np.isinf(weights) & (np.abs(a) > _RANK_TOL)
    if np.any(hard):
        i = int(np.argmax(hard))
        pseudo = np.zeros_like(a)
        pseudo[i] = 1.0 / a[i]
        return np.inf, pseudo

    weighted = np.where(np.isinf(weights), 0.0, weights) * a
    precision = float(weighted @ a)
    if precision > 1e-8:
        return precision, weighted / precision
    return precision, np.zeros_like(a)


def _weighted_gram_schmidt(Ab: np.ndarray, weights: np.ndarray):
    """Eliminate [A | b] column by column with weighted Gram-Schmidt.

    Columns that hit a hard row take that row as pivot with infinite precision;
    other columns are solved in the weighted least-squares sense. Produces
    unit-diagonal rows, the pivot column of each row and its precision.
    """
    Ab = Ab.copy()
    m, n1 = Ab.shape
    n = n1 - 1
    max_rank = min(m, n)

    rows, pivots, precisions = [], [], []
    for j in range(n):
        a = Ab[:, j].copy()
        precision, pseudo = _weighted_pseudoinverse(a, weights)
        if precision < 1e-8:
            continue
        rd = np.zeros(n1)
        rd[j] = 1.0
        rd[j + 1:] = pseudo @ Ab[:, j + 1:]
        rows.append(rd)
        pivots.append(j)
        precisions.append(precision)
        if len(rows) >= max_rank:
            break
        Ab[:, j + 1:] -= np.outer(a, rd[j + 1:])

    Rd = np.array(rows).reshape(len(rows), n1)
    return Rd, pivots, np.array(precisions)
