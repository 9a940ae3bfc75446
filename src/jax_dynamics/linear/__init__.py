"""Linear Gaussian factor graphs and ordered sequential elimination."""

from .bayes_net import GaussianBayesNet
from .conditional import GaussianConditional
from .elimination import eliminate_one, eliminate_sequential
from .factor_graph import GaussianFactorGraph
from .jacobian_factor import JacobianFactor
from .noise_model import NoiseModel
from .variable_index import VariableIndex

__all__ = [
    "GaussianBayesNet",
    "GaussianConditional",
    "GaussianFactorGraph",
    "JacobianFactor",
    "NoiseModel",
    "VariableIndex",
    "eliminate_one",
    "eliminate_sequential",
]
