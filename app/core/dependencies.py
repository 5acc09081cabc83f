"""
Dependency injection container and FastAPI dependency functions.
"""
from typing import Optional
import logging

from fastapi import Depends, Header

from app.config.settings import Settings, get_settings
from app.repositories import (
    BaseRepository,
    CategoryRepository,
    SubcategoryRepository,
    ProductRepository,
    CompanyRepository
)
from app.controllers import CategoryController
from app.services.asset_host import AssetHost, create_asset_host
from app.services.auth_gate import TokenAuthGate


logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.base_repo = BaseRepository(self.settings)

        # Repositories
        self.category_repo: Optional[CategoryRepository] = None
        self.subcategory_repo: Optional[SubcategoryRepository] = None
        self.product_repo: Optional[ProductRepository] = None
        self.company_repo: Optional[CompanyRepository] = None

        # Collaborators
        self.asset_host: Optional[AssetHost] = None
        self.auth_gate = TokenAuthGate(self.settings.auth_tokens, enabled=self.settings.auth_enabled)

        # Controllers
        self.category_controller: Optional[CategoryController] = None

    async def initialize(self) -> None:
        """Initialize all components (called at startup)."""
        logger.info("Initializing dependency container...")
        self.settings.ensure_directories()

        # Connect to database
        await self.base_repo.connect()

        # Initialize repositories
        self.category_repo = CategoryRepository(self.base_repo.db)
        self.category_repo.set_settings(self.settings)

        self.subcategory_repo = SubcategoryRepository(self.base_repo.db)
        self.subcategory_repo.set_settings(self.settings)

        self.product_repo = ProductRepository(self.base_repo.db)
        self.product_repo.set_settings(self.settings)

        self.company_repo = CompanyRepository(self.base_repo.db)
        self.company_repo.set_settings(self.settings)

        # Initialize services
        self.asset_host = create_asset_host(self.settings)
        logger.info(f"Asset host: {self.asset_host.kind}")

        # Initialize controllers
        self.category_controller = CategoryController(
            category_repo=self.category_repo,
            subcategory_repo=self.subcategory_repo,
            product_repo=self.product_repo,
            company_repo=self.company_repo,
            asset_host=self.asset_host,
            settings=self.settings
        )

        logger.info("Dependency container initialized")

    async def shutdown(self) -> None:
        """Cleanup on shutdown."""
        logger.info("Shutting down dependency container...")
        if self.asset_host:
            await self.asset_host.close()
        await self.base_repo.disconnect()
        logger.info("Dependency container shutdown complete")


# Global container instance
container = Container()


# Dependency functions for FastAPI
def get_container() -> Container:
    """Get the DI container."""
    return container


def get_category_controller() -> CategoryController:
    """Dependency for category controller."""
    return container.category_controller


def get_auth_gate() -> TokenAuthGate:
    """Dependency for the auth gate."""
    return container.auth_gate


def require_auth(
    authorization: Optional[str] = Header(default=None),
    gate: TokenAuthGate = Depends(get_auth_gate)
) -> str:
    """Reject the request unless the auth gate approves it."""
    return gate.authorize(authorization)
