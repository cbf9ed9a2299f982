"""Blob uploader adapter - base64 data URLs to public Supabase Storage URLs.

Paths are derived from the listing name, so re-uploading under the same name
overwrites rather than duplicating:

    <root>/<slug>/banner.<ext>
    <root>/<slug>/<folder>/<folder>-<index>.<ext>
    <root>/<slug>/brochure.pdf
"""

import base64
import binascii
import re
from typing import Optional, Sequence

from src.services.supabase_client import SupabaseClient
from src.utils.config import Settings
from src.utils.errors import InvalidMediaError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# Folders stored at the listing root rather than in a subfolder
ROOT_LEVEL_FOLDERS = ("banner", "logo", "layout")

_DATA_URL = re.compile(r'^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$', re.DOTALL)


def slugify(name: str) -> str:
    """Normalize a listing name into a storage directory name."""
    slug = re.sub(r'\s+', '-', name.strip().lower())
    slug = re.sub(r'[^a-z0-9-]', '', slug)
    return slug or "untitled"


def decode_data_url(data_url: str, expected_prefix: str = "image/") -> tuple[bytes, str, str]:
    """Split a data URL into (bytes, mime type, file extension)."""
    match = _DATA_URL.match(data_url or "")
    if not match or not match.group("mime").startswith(expected_prefix):
        raise InvalidMediaError(detail=f"Expected a base64 {expected_prefix}* data URL")

    mime_type = match.group("mime")
    try:
        payload = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidMediaError(detail=f"Malformed base64 payload: {e}") from e

    extension = mime_type.split("/")[1]
    if extension == "jpeg":
        extension = "jpg"
    return payload, mime_type, extension


def is_data_url(value: Optional[str]) -> bool:
    return bool(value) and value.startswith("data:")


def build_blob_path(root: str, entity_name: str, folder: str, extension: str, index: Optional[int] = None) -> str:
    slug = slugify(entity_name)
    if folder in ROOT_LEVEL_FOLDERS or index is None:
        return f"{root}/{slug}/{folder}.{extension}"
    return f"{root}/{slug}/{folder}/{folder}-{index}.{extension}"


async def _put(path: str, payload: bytes, content_type: str) -> str:
    async with SupabaseClient() as client:
        bucket = client.storage.from_(Settings.STORAGE_BUCKET)
        bucket.upload(path, payload, {"content-type": content_type, "upsert": "true"})
        url = bucket.get_public_url(path)

    logger.debug("Uploaded blob", blob_path=path, content_type=content_type, size_bytes=len(payload))
    return url


async def upload_one(
    entity_name: str,
    folder: str,
    base64_image: str,
    index: Optional[int] = None,
    root: str = "projects",
) -> str:
    """Upload a single image and return its public URL."""
    payload, mime_type, extension = decode_data_url(base64_image)
    path = build_blob_path(root, entity_name, folder, extension, index)
    return await _put(path, payload, mime_type)


async def upload_many(
    entity_name: str,
    folder: str,
    base64_images: Sequence[str],
    root: str = "projects",
    start_index: int = 0,
) -> list[str]:
    """Upload a batch one image at a time, indexed by position. Stops at the first failure."""
    urls = []
    for index, image in enumerate(base64_images, start=start_index):
        urls.append(await upload_one(entity_name, folder, image, index=index, root=root))
    return urls


async def upload_document(entity_name: str, base64_pdf: str, root: str = "projects") -> str:
    """Upload a brochure PDF and return its public URL."""
    payload, mime_type, _ = decode_data_url(base64_pdf, expected_prefix="application/pdf")
    path = build_blob_path(root, entity_name, "brochure", "pdf")
    return await _put(path, payload, mime_type)
