"""
Web output helpers (scaffolding and menu generation).
"""

from .scaffold import ScaffoldReport, generate_site_structure, profile_slug, resolve_web_root

__all__ = ["ScaffoldReport", "generate_site_structure", "profile_slug", "resolve_web_root"]
