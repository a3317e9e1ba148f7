"""
Models package initialization.
"""

from sde_mc.errors import ConfigurationError
from sde_mc.models.base import SDEModel
from sde_mc.models.gbm import GeometricBrownianMotion
from sde_mc.models.heston import HestonModel
from sde_mc.models.merton import MertonJumpDiffusion
from sde_mc.models.ou import OrnsteinUhlenbeck
from sde_mc.models.sabr import SABRModel

MODELS: dict[str, type[SDEModel]] = {
    "gbm": GeometricBrownianMotion,
    "heston": HestonModel,
    "sabr": SABRModel,
    "merton": MertonJumpDiffusion,
    "ou": OrnsteinUhlenbeck,
}


def create_model(name: str, **params: float) -> SDEModel:
    """
    Build a model by name from keyword parameters.

    Parameters
    ----------
    name : str
        One of 'gbm', 'heston', 'sabr', 'merton', 'ou'
    **params : float
        Constructor parameters of the model

    Raises
    ------
    ConfigurationError
        If the name is unknown or parameters are missing or invalid
    """
    key = name.strip().lower()
    if key not in MODELS:
        raise ConfigurationError(f"Unknown model '{name}'. Available: {', '.join(MODELS)}")
    try:
        return MODELS[key](**params)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid parameters for model '{key}': {exc}") from exc


__all__ = [
    "MODELS",
    "SDEModel",
    "GeometricBrownianMotion",
    "HestonModel",
    "MertonJumpDiffusion",
    "OrnsteinUhlenbeck",
    "SABRModel",
    "create_model",
]
