"""Settings shared by the factor builders."""

from dataclasses import dataclass, field

from .linear.noise_model import NoiseModel


def _default_jl_cost_model() -> NoiseModel:
    return NoiseModel.isotropic(1, 1e-3)


@dataclass(frozen=True)
class OptimizerSetting:
    """Cost models used when emitting soft factors.

    Attributes:
        jl_cost_model: One-row noise model shaping joint limit penalties.
    """
    jl_cost_model: NoiseModel = field(default_factory=_default_jl_cost_model)
