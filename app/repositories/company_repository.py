"""
Company repository for database operations.
"""
from app.repositories.base import CollectionRepository


class CompanyRepository(CollectionRepository):
    """Read access to companies. Lookups come from CollectionRepository.find_by_ids."""

    collection_setting = "companies_collection"
