"""
Daily report pipeline.
"""

from .executor import PipelineResult, ProfileResult, execute_pipeline

__all__ = ["PipelineResult", "ProfileResult", "execute_pipeline"]
