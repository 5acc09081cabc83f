"""
Repositories module for the Catalog API.
"""
from .base import BaseRepository, CollectionRepository
from .category_repository import CategoryRepository
from .subcategory_repository import SubcategoryRepository
from .product_repository import ProductRepository
from .company_repository import CompanyRepository

__all__ = [
    "BaseRepository",
    "CollectionRepository",
    "CategoryRepository",
    "SubcategoryRepository",
    "ProductRepository",
    "CompanyRepository",
]
