"""HTTP client for the Pages asset store.

Public API:
    PagesClient(api_token, base_url=..., user_agent=..., timeout=...)
"""

from pagesync.client.pages import PagesClient
from pagesync.client.types import Deployment, Project

__all__ = ["PagesClient", "Deployment", "Project"]
