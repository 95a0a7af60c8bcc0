"""
Core package for the StepSafe climate-health advisory tooling.
"""

from importlib import metadata as _metadata

try:
    __version__ = _metadata.version("stepsafe")
except _metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = ["__version__"]
