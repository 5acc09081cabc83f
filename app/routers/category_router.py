"""
Category API router.

Thin router that delegates to CategoryController. Write endpoints accept
multipart or urlencoded forms (with an optional ``logo`` file) as well as
JSON bodies.
"""
from fastapi import APIRouter, Depends, Request, UploadFile
from typing import Any, Dict, List, Optional, Tuple
import json

from app.core.dependencies import get_category_controller, require_auth
from app.controllers import CategoryController
from app.schemas import CategoryResponse, CategoryListItem, CategoryDetail, MessageResponse
from app.utils.exceptions import ValidationError
from app.utils.messages import Messages

router = APIRouter(prefix="/api/categories", tags=["Categories"])

LIST_FIELDS = ("subcategories_id", "companies_id")


def _parse_list_field(values: List[str]) -> List[str]:
    """Accept repeated form fields, a JSON array or a comma-separated string."""
    if len(values) != 1:
        return values
    raw = values[0]
    try:
        parsed = json.loads(raw)
        if isinstance(parsed, list):
            return [str(item) for item in parsed]
        return [str(parsed)]
    except json.JSONDecodeError:
        return [item.strip() for item in raw.split(",") if item.strip()]


async def _read_payload(request: Request) -> Tuple[Dict[str, Any], Optional[UploadFile]]:
    """Split a request body into plain fields and the uploaded logo, if any."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except json.JSONDecodeError as e:
            raise ValidationError(Messages.INVALID_REQUEST) from e
        if not isinstance(body, dict):
            raise ValidationError(Messages.INVALID_REQUEST)
        return body, None

    if not content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        return {}, None

    form = await request.form()
    fields: Dict[str, Any] = {}
    logo = None
    for key in form.keys():
        values = form.getlist(key)
        if key == "logo":
            files = [v for v in values if not isinstance(v, str) and v.filename]
            texts = [v for v in values if isinstance(v, str)]
            if files:
                logo = files[-1]
            if texts:
                fields["logo"] = texts[-1]
        elif key in LIST_FIELDS:
            fields[key] = _parse_list_field([v for v in values if isinstance(v, str)])
        elif isinstance(values[-1], str):
            fields[key] = values[-1]
    return fields, logo


@router.get("", response_model=List[CategoryListItem])
async def list_categories(
    controller: CategoryController = Depends(get_category_controller)
):
    """List all categories with their subcategories and companies."""
    return await controller.list_categories()


@router.get("/{category_id}", response_model=CategoryDetail)
async def get_category(
    category_id: str,
    controller: CategoryController = Depends(get_category_controller)
):
    """Get a category with its current subcategories and companies."""
    return await controller.get_category(category_id)


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(
    request: Request,
    _principal: str = Depends(require_auth),
    controller: CategoryController = Depends(get_category_controller)
):
    """
    Create a category.

    - **name**: Category name (required)
    - **logo**: Optional image file
    """
    fields, logo = await _read_payload(request)
    name = fields.get("name")
    return await controller.create_category(
        name=name if isinstance(name, str) else None,
        logo=logo
    )


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    request: Request,
    _principal: str = Depends(require_auth),
    controller: CategoryController = Depends(get_category_controller)
):
    """
    Update a category.

    - **name**, **subcategories_id**, **companies_id**, **logo**: any subset
    - **logo** file: replaces the current logo (wins over a ``logo`` field)
    """
    fields, logo = await _read_payload(request)
    return await controller.update_category(category_id, fields, logo=logo)


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: str,
    _principal: str = Depends(require_auth),
    controller: CategoryController = Depends(get_category_controller)
):
    """Delete a category and its logo."""
    await controller.delete_category(category_id)
    return MessageResponse(message=Messages.CATEGORY_DELETED)
