"""
User interface and API module.

Serves the relay JSON API, the application shell and relay pages.
"""

__all__ = ["api", "http_server", "pages"]
