"""
API route modules.
"""

from routes.smart_paste import router as smart_paste_router

__all__ = [
    "smart_paste_router",
]
