from .html import DashboardPage, render_dashboard_page

__all__ = ["DashboardPage", "render_dashboard_page"]
