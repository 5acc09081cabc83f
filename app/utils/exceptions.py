"""
Custom exceptions for the Catalog API.
"""
from typing import Optional


class CatalogException(Exception):
    """Base exception for the Catalog API."""
    pass


class CategoryNotFoundError(CatalogException):
    """Raised when a category is not found."""
    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Category not found: {category_id}")


class ValidationError(CatalogException):
    """Raised for validation errors."""
    pass


class AuthenticationError(CatalogException):
    """Raised when a request fails the auth gate."""
    pass


class DocumentError(CatalogException):
    """Raised when a stored document does not fit its model."""
    def __init__(self, collection: str, document_id: str, reason: str):
        self.collection = collection
        self.document_id = document_id
        super().__init__(f"Malformed {collection} document {document_id}: {reason}")


class AssetHostError(CatalogException):
    """Raised when the asset host rejects or fails a call."""
    pass


class UpstreamError(CatalogException):
    """Raised when the store or the asset host fails during an operation."""
    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)
