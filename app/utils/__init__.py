"""
Utilities module for the Catalog API.
"""
from .file_utils import read_image_upload, save_bytes, generate_unique_filename
from .documents import normalize_document, id_variants
from .messages import Messages
from .exceptions import (
    CatalogException,
    CategoryNotFoundError,
    ValidationError,
    AuthenticationError,
    DocumentError,
    AssetHostError,
    UpstreamError
)

__all__ = [
    "read_image_upload",
    "save_bytes",
    "generate_unique_filename",
    "normalize_document",
    "id_variants",
    "Messages",
    "CatalogException",
    "CategoryNotFoundError",
    "ValidationError",
    "AuthenticationError",
    "DocumentError",
    "AssetHostError",
    "UpstreamError"
]
