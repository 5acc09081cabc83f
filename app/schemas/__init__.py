"""
Schemas module for the Catalog API.
"""
from .category import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryListItem,
    CategoryDetail,
    MessageResponse
)
from .asset import StoredAsset

__all__ = [
    # Category
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategoryListItem",
    "CategoryDetail",
    "MessageResponse",
    # Asset
    "StoredAsset",
]
