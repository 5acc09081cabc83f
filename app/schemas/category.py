"""
Category schemas.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime


class Category(BaseModel):
    """Category record as stored in the catalog."""
    model_config = ConfigDict(populate_by_name=True)

    category_id: str = Field(alias="_id")
    id: Optional[str] = None
    name: str
    logo: Optional[str] = None
    logo_public_id: Optional[str] = None
    subcategories_id: List[Any] = Field(default_factory=list)
    companies_id: List[Any] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategoryCreate(BaseModel):
    """Request to create a category."""
    name: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class CategoryUpdate(BaseModel):
    """Partial update of a category. Unknown fields are dropped."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    logo: Optional[str] = None
    subcategories_id: Optional[List[str]] = None
    companies_id: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("logo")
    @classmethod
    def empty_logo_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class CategoryResponse(BaseModel):
    """Category record returned by create and update."""
    model_config = ConfigDict(populate_by_name=True)

    category_id: str = Field(alias="_id")
    id: Optional[str] = None
    name: str
    logo: Optional[str] = None
    logo_public_id: Optional[str] = None
    subcategories_id: List[Any] = Field(default_factory=list)
    companies_id: List[Any] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategoryListItem(CategoryResponse):
    """Category with its declared references resolved and a display image."""
    subcategories_id: List[Dict[str, Any]] = Field(default_factory=list)
    companies_id: List[Dict[str, Any]] = Field(default_factory=list)
    image_url: str = Field(alias="imageUrl")


class CategoryDetail(CategoryResponse):
    """Aggregate view: category with its current subcategories and companies."""
    subcategories_id: List[Dict[str, Any]] = Field(default_factory=list)
    companies_id: List[Dict[str, Any]] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Plain confirmation message."""
    message: str
