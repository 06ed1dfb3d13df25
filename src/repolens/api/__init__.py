"""HTTP API for repolens.

Usage:
    uvicorn repolens.api.app:create_app --factory
"""

from repolens.api.app import create_app
from repolens.api.router_summaries import create_summary_router

__all__ = ["create_app", "create_summary_router"]
