"""
Controllers module for the Catalog API.
"""
from .category_controller import CategoryController

__all__ = [
    "CategoryController",
]
