"""Listing ingestion pipeline - create and update for projects and properties.

Both flavors run the same sequence:

    method -> session -> id (update) -> ownership (update) -> payload ->
    builder -> location (when an address is sent) -> uploads -> persist

Every stage either passes or raises a ListingsError; the operation boundary
turns errors into responses.
"""

from dataclasses import dataclass
from typing import Any, Optional
from ulid import ULID

from src.models.api import ApiRequest, ApiResponse
from src.models.commands import (
    ListingPayload,
    ProjectCreateCommand,
    ProjectUpdateCommand,
    PropertyCreateCommand,
    PropertyUpdateCommand,
    parse_command,
)
from src.models.listing import Listing, Project, Property, ProjectType, PropertyType, ListingType, ListingStatus
from src.services.blob_storage import upload_one, upload_many, upload_document, is_data_url
from src.services.location_resolver import resolve_location
from src.services.media_merger import (
    MediaCategory,
    MediaValue,
    slot_for,
    truncate_to_ceiling,
    merge_category,
    derive_thumbnail,
    combine_image_urls,
)
from src.services.session import Session, require_session
from src.services import supabase_client as db
from src.utils.errors import (
    BadRequestError,
    ForbiddenError,
    ListingsError,
    MethodNotAllowedError,
    NotFoundError,
    UploadError,
)
from src.utils.logging import get_structured_logger, log_timing, mask_user_id
from src.utils.responses import error_response, json_response, resolve_expose_flag

logger = get_structured_logger(__name__)

INVALID_BUILDER_MESSAGE = "Invalid builder ID"

# Optional pass-through fields, written only when the caller sends them
OPTIONAL_FIELDS = (
    "builder_website_link",
    "walkthrough_video_url",
    "highlights",
    "amenities",
)

PROPERTY_FIELDS = (
    "listing_type",
    "price",
    "bedrooms",
    "bathrooms",
    "property_size",
    "property_size_unit",
    "facing",
    "project_id",
)

# Multipliers to square feet, keyed by property_size_unit
SQ_FT_FACTORS = {
    "sq_ft": 1.0,
    "sq_m": 10.764,
    "sq_yd": 9.0,
}


@dataclass(frozen=True)
class ListingKind:
    """Everything that differs between the project and property flavors."""
    key: str
    label: str
    table: str
    storage_root: str
    name_field: str
    default_type: str
    categories: tuple[MediaCategory, ...]
    create_command: type[ListingPayload]
    update_command: type[ListingPayload]
    entity_model: type[Listing]
    extra_fields: tuple[str, ...] = ()

    @property
    def id_required_message(self) -> str:
        return f"{self.label} ID is required"

    @property
    def not_found_message(self) -> str:
        return f"{self.label} not found"

    @property
    def forbidden_message(self) -> str:
        return f"You do not have permission to edit this {self.key}"


PROJECT = ListingKind(
    key="project",
    label="Project",
    table="projects",
    storage_root="projects",
    name_field="name",
    default_type=ProjectType.RESIDENTIAL.value,
    categories=(
        MediaCategory.BANNER,
        MediaCategory.FLOORPLANS,
        MediaCategory.CLUBHOUSE,
        MediaCategory.GALLERY,
        MediaCategory.SITE_LAYOUT,
    ),
    create_command=ProjectCreateCommand,
    update_command=ProjectUpdateCommand,
    entity_model=Project,
)

PROPERTY = ListingKind(
    key="property",
    label="Property",
    table="properties",
    storage_root="properties",
    name_field="title",
    default_type=PropertyType.APARTMENT.value,
    categories=(
        MediaCategory.BANNER,
        MediaCategory.FLOORPLANS,
        MediaCategory.CLUBHOUSE,
        MediaCategory.GALLERY,
    ),
    create_command=PropertyCreateCommand,
    update_command=PropertyUpdateCommand,
    entity_model=Property,
    extra_fields=PROPERTY_FIELDS,
)


def generate_listing_id() -> str:
    """Generate a text-based listing ID."""
    return str(ULID())


def require_method(request: ApiRequest, method: str) -> None:
    if request.method.upper() != method:
        raise MethodNotAllowedError()


def extract_listing_id(kind: ListingKind, request: ApiRequest) -> str:
    """The ``id`` query parameter, sent exactly once and non-empty."""
    values = request.query.get("id") or []
    if len(values) != 1 or not values[0].strip():
        raise BadRequestError(kind.id_required_message)
    return values[0].strip()


async def load_owned_listing(kind: ListingKind, listing_id: str, session: Session) -> dict:
    """Fetch a listing row, checking it exists and belongs to the caller."""
    existing = await db.get_listing_by_id(kind.table, listing_id)
    if existing is None:
        raise NotFoundError(kind.not_found_message)
    if existing.get("posted_by_user_id") != session.user_id:
        logger.warning(
            "Ownership check failed",
            listing_kind=kind.key,
            listing_id=listing_id,
            user_id=mask_user_id(session.user_id),
        )
        raise ForbiddenError(kind.forbidden_message)
    return existing


async def validate_builder(builder_id: str) -> None:
    builder = await db.get_builder_by_id(builder_id)
    if builder is None:
        raise BadRequestError(INVALID_BUILDER_MESSAGE)


def compute_sq_ft(size: Optional[float], unit: Optional[str]) -> Optional[float]:
    """Normalize a property size to square feet. Unknown units give None."""
    if size is None or unit not in SQ_FT_FACTORS:
        return None
    return size * SQ_FT_FACTORS[unit]


def _submitted_uploads(category: MediaCategory, command: ListingPayload, is_update: bool) -> list[str]:
    """Base64 payloads to upload for one category, already capped."""
    slot = slot_for(category)
    submitted = getattr(command, slot.payload_field, None)

    if slot.singular:
        if not submitted:
            return []
        # Update forms echo stored URLs back; only data URLs are new
        if is_update and not is_data_url(submitted):
            return []
        return [submitted]

    if is_update and submitted:
        submitted = [image for image in submitted if is_data_url(image)]
    return truncate_to_ceiling(category, submitted)


async def upload_media(
    kind: ListingKind,
    command: ListingPayload,
    existing: Optional[dict] = None,
) -> tuple[dict[MediaCategory, list[str]], Optional[str]]:
    """
    Upload every submitted image, category by category, then the brochure.

    On update (``existing`` given) batches appended to kept media are indexed
    after the kept images so their blob paths do not collide.

    Returns the uploaded URLs per category and the brochure URL (if one was
    uploaded). Any failure aborts with UploadError; blobs uploaded before the
    failure are left in place.
    """
    entity_name = command.display_name
    is_update = existing is not None
    keep_flags = getattr(command, "keep_existing_images", None)
    uploaded: dict[MediaCategory, list[str]] = {}
    brochure_url = None

    try:
        with log_timing("upload_media", logger=logger, listing_kind=kind.key):
            for category in kind.categories:
                slot = slot_for(category)
                images = _submitted_uploads(category, command, is_update)
                if not images:
                    continue

                if slot.singular:
                    url = await upload_one(entity_name, slot.folder, images[0], root=kind.storage_root)
                    uploaded[category] = [url]
                else:
                    start_index = 0
                    if is_update and keep_flags and keep_flags.flag_for(category.value):
                        start_index = len(existing.get(slot.stored_field) or [])
                    uploaded[category] = await upload_many(
                        entity_name, slot.folder, images, root=kind.storage_root, start_index=start_index
                    )

                logger.debug(
                    "Uploaded category",
                    listing_kind=kind.key,
                    category=category.value,
                    count=len(uploaded[category]),
                )

            if command.brochure_pdf_base64:
                brochure_url = await upload_document(
                    entity_name, command.brochure_pdf_base64, root=kind.storage_root
                )
    except Exception as e:
        logger.error(
            "Image upload failed",
            listing_kind=kind.key,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise UploadError(detail=f"{type(e).__name__}: {e}") from e

    return uploaded, brochure_url


def merge_media_for_create(kind: ListingKind, uploaded: dict[MediaCategory, list[str]]) -> dict[MediaCategory, MediaValue]:
    return {
        category: merge_category(category, None, False, uploaded.get(category))
        for category in kind.categories
    }


def touched_categories(kind: ListingKind, command: ListingPayload) -> list[MediaCategory]:
    """
    Categories an update request addresses.

    A category is touched when its upload key is present or its
    keep-existing flag is set explicitly. Untouched categories keep their
    stored value.
    """
    keep_flags = getattr(command, "keep_existing_images", None)
    touched = []
    for category in kind.categories:
        slot = slot_for(category)
        flag = keep_flags.flag_for(category.value) if keep_flags else None
        if flag is not None:
            touched.append(category)
            continue
        if not command.provided(slot.payload_field):
            continue
        if slot.singular:
            value = getattr(command, slot.payload_field)
            if value and not is_data_url(value):
                continue
        touched.append(category)
    return touched


def merge_media_for_update(
    kind: ListingKind,
    command: ListingPayload,
    existing: dict,
    uploaded: dict[MediaCategory, list[str]],
) -> dict[MediaCategory, MediaValue]:
    """Merged values for touched categories only."""
    keep_flags = getattr(command, "keep_existing_images", None)
    merged = {}
    for category in touched_categories(kind, command):
        slot = slot_for(category)
        keep = keep_flags.flag_for(category.value) if keep_flags else None
        merged[category] = merge_category(category, existing.get(slot.stored_field), keep, uploaded.get(category))
    return merged


def _stored_media(kind: ListingKind, row: dict) -> dict[MediaCategory, MediaValue]:
    return {category: row.get(slot_for(category).stored_field) for category in kind.categories}


def _media_columns(media: dict[MediaCategory, MediaValue]) -> dict[str, Any]:
    return {slot_for(category).stored_field: value for category, value in media.items()}


def build_create_record(
    kind: ListingKind,
    command: ListingPayload,
    session: Session,
    location_id: str,
    media: dict[MediaCategory, MediaValue],
    brochure_url: Optional[str],
) -> dict[str, Any]:
    """Row for a new listing."""
    record: dict[str, Any] = {
        "id": generate_listing_id(),
        kind.name_field: command.display_name,
        "description": command.description,
        "type": command.type or kind.default_type,
        "builder_id": command.builder_id,
        "location_id": location_id,
        "posted_by_user_id": session.user_id,
        "is_archived": False,
        "brochure_url": brochure_url or command.brochure_url,
        "thumbnail_url": derive_thumbnail(media),
        "image_urls": combine_image_urls(media, kind.categories),
    }
    record.update(_media_columns(media))

    for field in OPTIONAL_FIELDS + kind.extra_fields:
        value = getattr(command, field)
        if value is not None:
            record[field] = value

    if kind is PROPERTY:
        record["listing_type"] = command.listing_type or ListingType.SALE.value
        record["listing_status"] = ListingStatus.ACTIVE.value
        record["sq_ft"] = compute_sq_ft(command.property_size, command.property_size_unit)

    return record


def build_update_record(
    kind: ListingKind,
    command: ListingPayload,
    existing: dict,
    location_id: Optional[str],
    merged: dict[MediaCategory, MediaValue],
    brochure_url: Optional[str],
) -> dict[str, Any]:
    """Column updates for an existing listing. Owner and archive state are never written."""
    updates: dict[str, Any] = {
        kind.name_field: command.display_name,
        "description": command.description,
        "builder_id": command.builder_id,
    }

    if command.type:
        updates["type"] = command.type
    if location_id:
        updates["location_id"] = location_id

    if brochure_url:
        updates["brochure_url"] = brochure_url
    elif command.provided("brochure_url"):
        updates["brochure_url"] = command.brochure_url

    for field in OPTIONAL_FIELDS + kind.extra_fields:
        if command.provided(field):
            updates[field] = getattr(command, field)

    if kind is PROPERTY and (command.provided("property_size") or command.provided("property_size_unit")):
        size = command.property_size if command.provided("property_size") else existing.get("property_size")
        unit = command.property_size_unit if command.provided("property_size_unit") else existing.get("property_size_unit")
        updates["sq_ft"] = compute_sq_ft(size, unit)

    if merged:
        media = _stored_media(kind, existing)
        media.update(merged)
        updates.update(_media_columns(merged))
        updates["image_urls"] = combine_image_urls(media, kind.categories)
        updates["thumbnail_url"] = derive_thumbnail(media) or existing.get("thumbnail_url")

    return updates


async def _fetch_entity(kind: ListingKind, listing_id: str, fallback: dict) -> dict:
    """Re-read the listing with relations and serialize it in camelCase."""
    row = await db.get_listing_with_relations(kind.table, listing_id) or fallback
    return kind.entity_model.model_validate(row).model_dump(by_alias=True, mode="json")


async def _create(kind: ListingKind, request: ApiRequest) -> ApiResponse:
    require_method(request, "POST")
    session = await require_session(request)

    command = parse_command(kind.create_command, request.body)
    await validate_builder(command.builder_id)
    location_id = await resolve_location(command.location_address)

    uploaded, brochure_url = await upload_media(kind, command)
    media = merge_media_for_create(kind, uploaded)
    record = build_create_record(kind, command, session, location_id, media, brochure_url)

    with log_timing("persist_listing", logger=logger, listing_kind=kind.key):
        created = await db.create_listing(kind.table, record)
        entity = await _fetch_entity(kind, created["id"], created)

    logger.info(
        "Listing created",
        listing_kind=kind.key,
        listing_id=created["id"],
        location_id=location_id,
        user_id=mask_user_id(session.user_id),
        uploaded_categories=[category.value for category in uploaded],
    )
    return json_response(201, {"message": f"{kind.label} created successfully", kind.key: entity})


async def _update(kind: ListingKind, request: ApiRequest) -> ApiResponse:
    require_method(request, "PUT")
    session = await require_session(request)
    listing_id = extract_listing_id(kind, request)
    existing = await load_owned_listing(kind, listing_id, session)

    command = parse_command(kind.update_command, request.body)
    await validate_builder(command.builder_id)

    location_id = None
    if command.location_address:
        location_id = await resolve_location(command.location_address)

    uploaded, brochure_url = await upload_media(kind, command, existing=existing)
    merged = merge_media_for_update(kind, command, existing, uploaded)
    updates = build_update_record(kind, command, existing, location_id, merged, brochure_url)

    with log_timing("persist_listing", logger=logger, listing_kind=kind.key):
        updated = await db.update_listing(kind.table, listing_id, updates)
        entity = await _fetch_entity(kind, listing_id, updated)

    logger.info(
        "Listing updated",
        listing_kind=kind.key,
        listing_id=listing_id,
        location_changed=bool(location_id),
        merged_categories=[category.value for category in merged],
        user_id=mask_user_id(session.user_id),
    )
    return json_response(200, {"message": f"{kind.label} updated successfully", kind.key: entity})


async def run_operation(operation, kind: ListingKind, request: ApiRequest, expose_internal_errors: Optional[bool]) -> ApiResponse:
    """Run a listing operation and turn any failure into an error response."""
    expose = resolve_expose_flag(expose_internal_errors)
    try:
        return await operation(kind, request)
    except ListingsError as e:
        if e.status_code >= 500:
            logger.error(
                "Listing operation failed",
                listing_kind=kind.key,
                error=e.message,
                error_detail=e.detail,
                error_type=type(e).__name__,
            )
        else:
            logger.info(
                "Listing request rejected",
                listing_kind=kind.key,
                status_code=e.status_code,
                reason=e.message,
            )
        return error_response(e, expose)
    except Exception as e:
        logger.exception(
            "Unexpected listing operation error",
            listing_kind=kind.key,
            error=str(e),
            error_type=type(e).__name__,
        )
        return error_response(ListingsError(detail=f"{type(e).__name__}: {e}"), expose)


async def create_project(request: ApiRequest, expose_internal_errors: Optional[bool] = None) -> ApiResponse:
    return await run_operation(_create, PROJECT, request, expose_internal_errors)


async def update_project(request: ApiRequest, expose_internal_errors: Optional[bool] = None) -> ApiResponse:
    return await run_operation(_update, PROJECT, request, expose_internal_errors)


async def create_property(request: ApiRequest, expose_internal_errors: Optional[bool] = None) -> ApiResponse:
    return await run_operation(_create, PROPERTY, request, expose_internal_errors)


async def update_property(request: ApiRequest, expose_internal_errors: Optional[bool] = None) -> ApiResponse:
    return await run_operation(_update, PROPERTY, request, expose_internal_errors)
