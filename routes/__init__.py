"""
API route modules.

Each module defines routes for one trigger surface.
"""

from routes.cleanup import router as cleanup_router

__all__ = [
    "cleanup_router",
]
