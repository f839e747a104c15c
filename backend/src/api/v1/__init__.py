"""
API v1 package initialization.

Exposes the order router mounted by the application.
"""

from src.api.v1.orders import router as orders_router

__all__ = ["orders_router"]
