"""
Routers module for the Catalog API.
"""
from . import category_router

__all__ = [
    "category_router",
]
