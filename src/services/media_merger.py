"""Media set merger - final URL value for each listing image category."""

from enum import Enum
from typing import Iterable, NamedTuple, Optional, Sequence, Union

MediaValue = Union[Optional[str], list[str]]


class MediaCategory(str, Enum):
    """Named image slots on a listing."""
    BANNER = "banner"
    FLOORPLANS = "floorplans"
    CLUBHOUSE = "clubhouse"
    GALLERY = "gallery"
    SITE_LAYOUT = "site_layout"


class CategorySlot(NamedTuple):
    payload_field: str   # command attribute holding the base64 upload(s)
    stored_field: str    # listing column holding the URL(s)
    folder: str          # blob storage folder
    ceiling: int
    singular: bool


GALLERY_CEILING = 20

CATEGORY_SLOTS: dict[MediaCategory, CategorySlot] = {
    MediaCategory.BANNER: CategorySlot(
        "banner_image_base64", "banner_image_url", "banner", 1, True
    ),
    MediaCategory.FLOORPLANS: CategorySlot(
        "floorplan_images_base64", "floorplan_image_urls", "floorplans", 20, False
    ),
    MediaCategory.CLUBHOUSE: CategorySlot(
        "clubhouse_images_base64", "clubhouse_image_urls", "clubhouse", 10, False
    ),
    MediaCategory.GALLERY: CategorySlot(
        "gallery_images_base64", "gallery_image_urls", "gallery", GALLERY_CEILING, False
    ),
    MediaCategory.SITE_LAYOUT: CategorySlot(
        "site_layout_images_base64", "site_layout_image_urls", "sitelayout", GALLERY_CEILING, False
    ),
}

# Order matters: it is the order of the combined image_urls list
COMBINED_CATEGORIES = (
    MediaCategory.FLOORPLANS,
    MediaCategory.CLUBHOUSE,
    MediaCategory.GALLERY,
    MediaCategory.SITE_LAYOUT,
)


def slot_for(category: MediaCategory) -> CategorySlot:
    return CATEGORY_SLOTS[MediaCategory(category)]


def truncate_to_ceiling(category: MediaCategory, submitted: Optional[Sequence[str]]) -> list[str]:
    """Cap a submitted batch before it reaches the uploader."""
    if not submitted:
        return []
    return list(submitted[:slot_for(category).ceiling])


def merge_category(
    category: MediaCategory,
    existing: MediaValue,
    keep_existing: Optional[bool],
    uploaded: Optional[Sequence[str]],
) -> MediaValue:
    """
    Compute the stored value for one category.

    Singular categories: a new upload always wins, otherwise the existing URL
    survives only when ``keep_existing`` is set.

    List categories: keep-existing URLs come first, new uploads are appended,
    and the result is capped at the ceiling. Existing media is never evicted;
    uploads beyond the remaining room are dropped from the stored value.
    """
    slot = slot_for(category)
    uploaded = list(uploaded or [])

    if slot.singular:
        if uploaded:
            return uploaded[0]
        if keep_existing and existing:
            return existing
        return None

    base = list(existing or []) if keep_existing else []
    return (base + uploaded)[:slot.ceiling]


THUMBNAIL_SOURCES = (MediaCategory.BANNER, MediaCategory.GALLERY)


def derive_thumbnail(media: dict[MediaCategory, MediaValue]) -> Optional[str]:
    """First available source in THUMBNAIL_SOURCES order: banner, then first gallery image."""
    for category in THUMBNAIL_SOURCES:
        value = media.get(category)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, list) and value:
            return value[0]
    return None


def combine_image_urls(media: dict[MediaCategory, MediaValue], categories: Iterable[MediaCategory]) -> list[str]:
    """Flatten list categories into the search/card image list in COMBINED_CATEGORIES order."""
    enabled = set(categories)
    combined: list[str] = []
    for category in COMBINED_CATEGORIES:
        if category in enabled:
            combined.extend(media.get(category) or [])
    return combined
