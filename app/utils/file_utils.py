"""
File utilities for the Catalog API.
"""
from pathlib import Path
import io
import uuid
import aiofiles
from typing import Optional, Sequence
from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from app.utils.exceptions import ValidationError
from app.utils.messages import Messages


def generate_unique_filename(original_filename: str, prefix: str = "") -> str:
    """
    Generate a unique filename preserving the original extension.

    Args:
        original_filename: Original file name
        prefix: Optional prefix for the filename

    Returns:
        Unique filename
    """
    ext = Path(original_filename).suffix.lower() if original_filename else ""
    if not ext:
        ext = ".bin"
    unique_id = uuid.uuid4().hex[:12]
    if prefix:
        return f"{prefix}_{unique_id}{ext}"
    return f"{unique_id}{ext}"


async def read_image_upload(
    file: UploadFile,
    allowed_types: Sequence[str],
    max_size: int
) -> bytes:
    """
    Read an uploaded image into memory and check it is a usable image.

    Args:
        file: FastAPI UploadFile object
        allowed_types: Accepted content types
        max_size: Maximum size in bytes

    Returns:
        The file content

    Raises:
        ValidationError: wrong content type, empty, too large or undecodable
    """
    if file.content_type not in allowed_types:
        raise ValidationError(Messages.IMAGE_TYPE_NOT_ALLOWED.format(content_type=file.content_type))

    content = await file.read(max_size + 1)
    if len(content) > max_size:
        raise ValidationError(Messages.IMAGE_TOO_LARGE.format(max_size=max_size))
    if not content:
        raise ValidationError(Messages.INVALID_IMAGE)

    try:
        with Image.open(io.BytesIO(content)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValidationError(Messages.INVALID_IMAGE) from e

    return content


async def save_bytes(
    content: bytes,
    destination_dir: Path,
    filename: Optional[str] = None
) -> Path:
    """
    Write bytes to a file on disk.

    Args:
        content: Data to write
        destination_dir: Directory to save the file
        filename: Optional custom filename (generates unique if None)

    Returns:
        Path to the saved file
    """
    destination_dir.mkdir(parents=True, exist_ok=True)

    if filename is None:
        filename = generate_unique_filename("file")

    file_path = destination_dir / filename

    async with aiofiles.open(file_path, "wb") as f:
        await f.write(content)

    return file_path
