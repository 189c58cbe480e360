from .server import create_app
from .dashboard import get_dashboard_html

__all__ = [
    "create_app",
    "get_dashboard_html",
]
