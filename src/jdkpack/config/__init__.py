"""Configuration modules for jdkpack."""

from .build_config import BuildConfig, BuildConfigError, BuildVariant
from .loader import BuildConfigLoader

__all__ = [
    "BuildConfig",
    "BuildConfigError",
    "BuildVariant",
    "BuildConfigLoader",
]
