"""
Generate the directory/menu structure required for publishing dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from ..config import AppConfig, UserProfile, resolve_output_root
from ..util import slugify, write_text_file

FAVICON_FILENAME = "favicon.svg"
FAVICON_SVG = """<svg xmlns="http://www.w3.org/2000/svg" width="64" height="64" viewBox="0 0 64 64" role="img" aria-label="StepSafe favicon">
  <defs>
    <linearGradient id="shield" x1="0" y1="0" x2="0" y2="1">
      <stop offset="0" stop-color="#7dd3a8"/>
      <stop offset="1" stop-color="#198754"/>
    </linearGradient>
  </defs>
  <path d="M32 4 L54 12 L54 30 C54 45 44 55 32 60 C20 55 10 45 10 30 L10 12 Z"
        fill="url(#shield)" stroke="#0b3d2a" stroke-width="3"/>
  <circle cx="32" cy="24" r="7" fill="#ffd43b"/>
  <path d="M20 44 C24 36 40 36 44 44" fill="none" stroke="#ffffff" stroke-width="4" stroke-linecap="round"/>
</svg>
"""

PLACEHOLDER_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <link rel="icon" href="../favicon.svg" type="image/svg+xml" sizes="any">
  <title>StepSafe dashboard for {title}</title>
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
           background: #f7f7f7; color: #333; margin: 0 auto; padding: 20px; max-width: 800px; }}
    h1 {{ color: #2F4F4F; margin-top: 0; }}
    #dashboard-content {{ background: #ffffff; padding: 20px; border: 1px solid #ccc; border-radius: 5px; line-height: 1.4em; }}
    a {{ color: #0066cc; text-decoration: none; font-weight: bold; }}
    a:hover {{ text-decoration: underline; }}
  </style>
</head>
<body>
  <h1>StepSafe dashboard for {title}</h1>
  <div id="dashboard-content">
    <p>Your daily health report will appear here after the next run.</p>
  </div>
  <p><a href="../index.html">Return to Menu</a></p>
</body>
</html>
"""

MENU_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <link rel="icon" href="favicon.svg" type="image/svg+xml" sizes="any">
  <title>StepSafe Dashboards</title>
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
           background: #f7f7f7; color: #333; margin: 0 auto; padding: 20px; max-width: 800px; }}
    h1, h2 {{ color: #2F4F4F; margin-top: 1.5em; margin-bottom: 0.5em; }}
    h1 {{ margin-top: 0; }}
    ul {{ list-style-type: none; padding: 0; }}
    li {{ margin: 10px 0; font-size: 18px; }}
    .score {{ color: #666; font-size: 0.85em; margin-left: 0.5em; }}
    a {{ color: #0066cc; text-decoration: none; font-weight: bold; }}
    a:hover {{ text-decoration: underline; }}
    hr {{ margin: 2em 0; border: 0; border-top: 1px solid #ccc; }}
    .footer-note {{ margin-top: 20px; font-size: 0.9em; color: #666; text-align: center; }}
    .footer-note a {{ font-weight: normal; }}
  </style>
</head>
<body>
  <h1>StepSafe Dashboards</h1>
  {profile_section}
  <hr>
  <div class="footer-note">
    Climate data courtesy of <a href="https://open-meteo.com/" target="_blank" rel="noopener">open-meteo.com</a>.
    Guidance is informational and is not medical advice.
  </div>
</body>
</html>
"""


@dataclass
class ScaffoldReport:
    """
    Stores what changed when scaffolding ran.

    Attributes:
        root: The root directory of the dashboard output.
        directories_created: List of newly created folders.
        placeholders_written: List of newly created placeholder files.
        placeholders_skipped: List of skipped files (already existed).
        menu_written: True if the main index.html was updated.
    """
    root: Path
    directories_created: List[Path] = field(default_factory=list)
    placeholders_written: List[Path] = field(default_factory=list)
    placeholders_skipped: List[Path] = field(default_factory=list)
    menu_written: bool = False

    def summary_rows(self) -> Iterable[tuple[str, str]]:
        yield ("Root", str(self.root))
        yield ("Directories created", str(len(self.directories_created)))
        yield ("Placeholders written", str(len(self.placeholders_written)))
        yield ("Placeholders skipped", str(len(self.placeholders_skipped)))
        yield ("Menu updated", "yes" if self.menu_written else "no")


def resolve_web_root(config: AppConfig) -> Path:
    """Absolute path of the dashboard root directory."""
    return resolve_output_root(config.output_root)


def profile_slug(profile: UserProfile) -> str:
    return slugify(profile.id)


def profile_label(profile: UserProfile) -> str:
    city = profile.location.city
    if profile.id == slugify(city):
        return city
    return f"{profile.id} ({city})"


def _ensure_directory(path: Path, report: ScaffoldReport) -> None:
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
        report.directories_created.append(path)


def write_favicon(root: Path, force: bool) -> None:
    """
    Write the default favicon to the web root unless it already exists.
    """
    target = root / FAVICON_FILENAME
    if target.exists() and not force:
        return
    write_text_file(target, FAVICON_SVG)


def write_placeholder(target: Path, title: str, force: bool, report: ScaffoldReport) -> None:
    """
    Write a placeholder HTML file if it doesn't exist or if forced.

    Args:
        target: Path to the HTML file.
        title: Title for the placeholder page.
        force: If True, overwrite existing files.
        report: Report object to update.
    """
    if target.exists() and not force:
        report.placeholders_skipped.append(target)
        return
    write_text_file(target, PLACEHOLDER_TEMPLATE.format(title=html.escape(title, quote=True)))
    report.placeholders_written.append(target)


def build_menu_section(title: str, entries: Iterable[tuple[str, str, Optional[int]]]) -> str:
    """
    Generate an HTML list for a section of the menu.

    Args:
        title: Section header.
        entries: (slug, label, latest score or None) tuples.
    """
    items = []
    for slug, label, score in entries:
        score_html = f'<span class="score">risk score {score}</span>' if score is not None else ""
        items.append(f'    <li><a href="{slug}/index.html">{html.escape(label, quote=True)}</a>{score_html}</li>')
    if not items:
        return ""
    return f"<h2>{title}</h2>\n<ul>\n" + "\n".join(items) + "\n</ul>"


def generate_site_structure(
    config: AppConfig,
    *,
    force: bool = False,
    scores: Optional[Mapping[str, int]] = None,
) -> ScaffoldReport:
    """
    Ensure the menu + placeholder directories exist for every profile.

    Args:
        config: The application configuration.
        force: If True, overwrite existing placeholder pages.
        scores: Latest personal health risk score per profile id, shown in the menu.

    Returns:
        A ScaffoldReport detailing the actions taken.
    """
    root = resolve_web_root(config)
    report = ScaffoldReport(root=root)
    _ensure_directory(root, report)
    write_favicon(root, force)

    scores = scores or {}
    entries: List[tuple[str, str, Optional[int]]] = []
    for profile in config.profiles:
        slug = profile_slug(profile)
        profile_dir = root / slug
        _ensure_directory(profile_dir, report)
        label = profile_label(profile)
        write_placeholder(profile_dir / "index.html", label, force, report)
        entries.append((slug, label, scores.get(profile.id)))

    profile_section = build_menu_section("Profiles", entries)
    index_html = MENU_TEMPLATE.format(
        profile_section=profile_section or "<p>No profiles configured.</p>",
    )
    write_text_file(root / "index.html", index_html)
    report.menu_written = True

    return report
