"""
Core module for Catalog API application setup.
"""
from .app import create_app
from .dependencies import get_category_controller, require_auth

__all__ = [
    "create_app",
    "get_category_controller",
    "require_auth",
]
