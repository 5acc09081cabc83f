"""
Configuration settings for the Catalog API.
"""
from pydantic_settings import BaseSettings, NoDecode
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # MongoDB Configuration
    mongodb_uri: str = Field(default="mongodb://localhost:27017", alias="MONGODB_URI")
    mongodb_database: str = Field(default="catalog", alias="MONGODB_DATABASE")

    # MongoDB Collection Names
    categories_collection: str = Field(default="categories", alias="CATEGORIES_COLLECTION")
    subcategories_collection: str = Field(default="subcategories", alias="SUBCATEGORIES_COLLECTION")
    products_collection: str = Field(default="products", alias="PRODUCTS_COLLECTION")
    companies_collection: str = Field(default="companies", alias="COMPANIES_COLLECTION")

    # Reference field names used by the existing catalog data
    subcategory_category_field: str = Field(default="categories_id", alias="SUBCATEGORY_CATEGORY_FIELD")
    product_category_field: str = Field(default="categoriesa_id", alias="PRODUCT_CATEGORY_FIELD")
    product_company_field: str = Field(default="Company_id", alias="PRODUCT_COMPANY_FIELD")

    # Asset Host Configuration ("local" or "cloudinary")
    asset_host: str = Field(default="local", alias="ASSET_HOST")
    upload_dir: Path = Field(default=Path("./uploads"), alias="UPLOAD_DIR")
    uploads_url_prefix: str = Field(default="/uploads", alias="UPLOADS_URL_PREFIX")
    placeholder_image_url: str = Field(default="/uploads/placeholder.jpg", alias="PLACEHOLDER_IMAGE_URL")
    max_upload_size: int = Field(default=5 * 1024 * 1024, alias="MAX_UPLOAD_SIZE")
    allowed_image_types: Annotated[List[str], NoDecode] = Field(
        default=["image/jpeg", "image/png", "image/gif", "image/webp"],
        alias="ALLOWED_IMAGE_TYPES"
    )

    # Cloudinary Configuration
    cloudinary_cloud_name: str = Field(default="", alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str = Field(default="", alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str = Field(default="", alias="CLOUDINARY_API_SECRET")
    cloudinary_folder: str = Field(default="categories", alias="CLOUDINARY_FOLDER")
    asset_host_timeout: float = Field(default=30.0, alias="ASSET_HOST_TIMEOUT")

    # Auth Configuration
    auth_enabled: bool = Field(default=True, alias="AUTH_ENABLED")
    auth_tokens: Annotated[List[str], NoDecode] = Field(default_factory=list, alias="AUTH_TOKENS")

    # Logging Configuration
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: Path = Field(default=Path("./logs"), alias="LOG_DIR")
    log_json: bool = Field(default=True, alias="LOG_JSON")

    @field_validator("allowed_image_types", "auth_tokens", mode="before")
    @classmethod
    def split_list(cls, value):
        """Accept a JSON array or a comma-separated string."""
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    settings.ensure_directories()
    return settings
