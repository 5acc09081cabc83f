"""
Helpers for turning raw MongoDB documents into API-friendly values.
"""
from typing import Any, List

from bson import ObjectId


def normalize_document(value: Any) -> Any:
    """Recursively replace ObjectId values with their string form."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: normalize_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize_document(item) for item in value]
    return value


def id_variants(value: Any) -> List[Any]:
    """
    Forms a reference may be stored under.

    Reference fields in the catalog hold either an ObjectId or its hex
    string, so lookups match both.
    """
    if isinstance(value, ObjectId):
        return [value, str(value)]
    if isinstance(value, str) and ObjectId.is_valid(value):
        return [ObjectId(value), value]
    return [value]
