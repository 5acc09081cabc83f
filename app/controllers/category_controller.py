"""
Category controller with business logic.

Store and asset host failures are turned into UpstreamError carrying the
user-facing message of the operation. When a logo is replaced or removed
the old asset is deleted before the record is written; if a later step
fails, freshly uploaded assets are deleted again and a record whose asset
is already gone has its logo cleared.
"""
from typing import Any, Dict, List, Optional
import logging

from fastapi import UploadFile
from pydantic import ValidationError as PydanticValidationError
from bson.errors import BSONError
from pymongo.errors import PyMongoError

from app.repositories import (
    CategoryRepository,
    SubcategoryRepository,
    ProductRepository,
    CompanyRepository
)
from app.schemas import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryListItem,
    CategoryDetail,
    StoredAsset
)
from app.services.asset_host import AssetHost
from app.utils.exceptions import (
    AssetHostError,
    CategoryNotFoundError,
    DocumentError,
    UpstreamError,
    ValidationError
)
from app.utils.file_utils import read_image_upload
from app.utils.messages import Messages

logger = logging.getLogger(__name__)

# Failures of the entity store, including documents it returns but we cannot read
STORE_ERRORS = (PyMongoError, BSONError, DocumentError)


def _validation_message(exc: PydanticValidationError) -> str:
    for error in exc.errors():
        if error.get("loc") and error["loc"][0] == "name":
            return Messages.NAME_REQUIRED
    return Messages.INVALID_REQUEST


class CategoryController:
    """Controller for category operations."""

    def __init__(
        self,
        category_repo: CategoryRepository,
        subcategory_repo: SubcategoryRepository,
        product_repo: ProductRepository,
        company_repo: CompanyRepository,
        asset_host: AssetHost,
        settings
    ):
        self.category_repo = category_repo
        self.subcategory_repo = subcategory_repo
        self.product_repo = product_repo
        self.company_repo = company_repo
        self.asset_host = asset_host
        self.settings = settings

    # ── Reads ──

    async def list_categories(self) -> List[CategoryListItem]:
        """Get all categories with their declared references resolved."""
        try:
            categories = await self.category_repo.get_all()
            subcategories = await self.subcategory_repo.get_map(
                ref for cat in categories for ref in cat.subcategories_id
            )
            companies = await self.company_repo.get_map(
                ref for cat in categories for ref in cat.companies_id
            )
        except STORE_ERRORS as e:
            logger.error(f"Failed to list categories: {e}")
            raise UpstreamError(Messages.LIST_FAILED, str(e)) from e

        # dangling references are dropped
        return [
            CategoryListItem(**{
                **cat.model_dump(),
                "subcategories_id": [subcategories[str(ref)] for ref in cat.subcategories_id if str(ref) in subcategories],
                "companies_id": [companies[str(ref)] for ref in cat.companies_id if str(ref) in companies],
                "image_url": cat.logo or self.settings.placeholder_image_url,
            })
            for cat in categories
        ]

    async def get_category(self, category_id: str) -> CategoryDetail:
        """
        Get a category with its current subcategories and companies.

        Companies are those owning at least one product of the category.
        The three lookups are not read from a snapshot, so the view may mix
        states under concurrent writes.
        """
        category = await self._load(category_id, Messages.FETCH_FAILED)

        try:
            subcategories = await self.subcategory_repo.get_by_category(category_id)
            company_ids = await self.product_repo.distinct_company_ids(category_id)
            companies = await self.company_repo.find_by_ids(company_ids)
        except STORE_ERRORS as e:
            logger.error(f"Failed to aggregate category {category_id}: {e}", extra={"category_id": category_id})
            raise UpstreamError(Messages.FETCH_FAILED, str(e)) from e

        return CategoryDetail(**{
            **category.model_dump(),
            "subcategories_id": subcategories,
            "companies_id": companies,
        })

    # ── Writes ──

    async def create_category(
        self,
        name: Optional[str],
        logo: Optional[UploadFile] = None
    ) -> CategoryResponse:
        """Create a new category, uploading its logo first when given."""
        try:
            request = CategoryCreate(name=name or "")
        except PydanticValidationError as e:
            raise ValidationError(_validation_message(e)) from e

        asset = await self._store_logo(logo, Messages.CREATE_FAILED) if logo else None

        try:
            category = await self.category_repo.create(
                name=request.name,
                logo=asset.url if asset else None,
                logo_public_id=asset.public_id if asset else None
            )
        except STORE_ERRORS as e:
            logger.error(f"Failed to create category {request.name!r}: {e}")
            if asset:
                await self._discard_asset(asset.public_id)
            raise UpstreamError(Messages.CREATE_FAILED, str(e)) from e

        return CategoryResponse(**category.model_dump())

    async def update_category(
        self,
        category_id: str,
        fields: Dict[str, Any],
        logo: Optional[UploadFile] = None
    ) -> CategoryResponse:
        """
        Partially update a category.

        An uploaded logo always wins over a ``logo`` value in ``fields``.
        A body ``logo`` that differs from the stored one points at an
        asset this service does not manage, so it carries no public id.
        """
        try:
            request = CategoryUpdate(**fields)
        except PydanticValidationError as e:
            raise ValidationError(_validation_message(e)) from e
        updates = request.model_dump(exclude_unset=True)

        category = await self._load(category_id, Messages.UPDATE_FAILED)

        new_asset = await self._store_logo(logo, Messages.UPDATE_FAILED) if logo else None
        if new_asset:
            updates["logo"] = new_asset.url
            updates["logo_public_id"] = new_asset.public_id
        elif "logo" in updates:
            if updates["logo"] == category.logo:
                updates.pop("logo")
            else:
                updates["logo_public_id"] = None

        old_asset_deleted = False
        if "logo" in updates and category.logo:
            try:
                old_asset_deleted = await self._delete_logo(category)
            except AssetHostError as e:
                logger.error(
                    f"Failed to delete old logo of category {category_id}: {e}",
                    extra={"category_id": category_id}
                )
                if new_asset:
                    await self._discard_asset(new_asset.public_id)
                raise UpstreamError(Messages.UPDATE_FAILED, str(e)) from e

        try:
            updated = await self.category_repo.update(category_id, updates)
        except STORE_ERRORS as e:
            logger.error(f"Failed to update category {category_id}: {e}", extra={"category_id": category_id})
            await self._compensate_update(category_id, new_asset, old_asset_deleted)
            raise UpstreamError(Messages.UPDATE_FAILED, str(e)) from e

        if updated is None:
            await self._compensate_update(category_id, new_asset, old_asset_deleted)
            raise CategoryNotFoundError(category_id)

        return CategoryResponse(**updated.model_dump())

    async def delete_category(self, category_id: str) -> None:
        """Delete a category after removing its logo from the asset host."""
        category = await self._load(category_id, Messages.DELETE_FAILED)

        asset_deleted = False
        if category.logo:
            try:
                asset_deleted = await self._delete_logo(category)
            except AssetHostError as e:
                logger.error(
                    f"Failed to delete logo of category {category_id}: {e}",
                    extra={"category_id": category_id}
                )
                raise UpstreamError(Messages.DELETE_FAILED, str(e)) from e

        try:
            deleted = await self.category_repo.delete(category_id)
        except STORE_ERRORS as e:
            logger.error(f"Failed to delete category {category_id}: {e}", extra={"category_id": category_id})
            if asset_deleted:
                await self._clear_logo(category_id)
            raise UpstreamError(Messages.DELETE_FAILED, str(e)) from e

        if not deleted:
            raise CategoryNotFoundError(category_id)

    # ── Helpers ──

    async def _load(self, category_id: str, failure_message: str) -> Category:
        try:
            category = await self.category_repo.get_by_id(category_id)
        except STORE_ERRORS as e:
            logger.error(f"Failed to load category {category_id}: {e}", extra={"category_id": category_id})
            raise UpstreamError(failure_message, str(e)) from e
        if not category:
            raise CategoryNotFoundError(category_id)
        return category

    async def _store_logo(self, file: UploadFile, failure_message: str) -> StoredAsset:
        content = await read_image_upload(
            file,
            allowed_types=self.settings.allowed_image_types,
            max_size=self.settings.max_upload_size
        )
        try:
            return await self.asset_host.store(content, file.filename or "logo", file.content_type)
        except AssetHostError as e:
            logger.error(f"Failed to store logo {file.filename!r}: {e}")
            raise UpstreamError(failure_message, str(e)) from e

    async def _delete_logo(self, category: Category) -> bool:
        """Delete the category's logo asset. Returns False when it has no managed asset."""
        if not category.logo_public_id:
            logger.warning(
                f"Category {category.category_id} has an unmanaged logo ({category.logo}); leaving it in place. "
                "Run catalog-backfill-logos to record its public id",
                extra={"category_id": category.category_id}
            )
            return False
        await self.asset_host.delete(category.logo_public_id)
        return True

    async def _discard_asset(self, public_id: str) -> None:
        try:
            await self.asset_host.delete(public_id)
        except AssetHostError as e:
            logger.error(f"Orphaned asset {public_id}: {e}", extra={"asset_id": public_id})

    async def _clear_logo(self, category_id: str) -> None:
        try:
            await self.category_repo.clear_logo(category_id)
        except STORE_ERRORS as e:
            logger.error(
                f"Category {category_id} keeps a logo whose asset was deleted: {e}",
                extra={"category_id": category_id}
            )

    async def _compensate_update(
        self,
        category_id: str,
        new_asset: Optional[StoredAsset],
        old_asset_deleted: bool
    ) -> None:
        if new_asset:
            await self._discard_asset(new_asset.public_id)
        if old_asset_deleted:
            await self._clear_logo(category_id)
