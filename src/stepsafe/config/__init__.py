"""
Configuration helpers for StepSafe.
"""

from .models import (
    AppConfig,
    ConfigError,
    HealthProfile,
    Location,
    Routine,
    Sensitivities,
    UserProfile,
    load_config,
)
from .settings import Secrets, get_secrets, resolve_data_dir, resolve_output_root

__all__ = [
    "AppConfig",
    "ConfigError",
    "HealthProfile",
    "Location",
    "Routine",
    "Sensitivities",
    "UserProfile",
    "load_config",
    "Secrets",
    "get_secrets",
    "resolve_data_dir",
    "resolve_output_root",
]
