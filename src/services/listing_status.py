"""Listing status transitions - archive, reactivate and mark sold."""

from datetime import datetime, timezone
from typing import Optional

from src.models.api import ApiRequest, ApiResponse
from src.models.listing import ListingStatus
from src.services.listing_ingestor import (
    PROJECT,
    PROPERTY,
    ListingKind,
    extract_listing_id,
    load_owned_listing,
    require_method,
    run_operation,
)
from src.services.session import require_session
from src.services import supabase_client as db
from src.utils.errors import BadRequestError
from src.utils.logging import get_structured_logger
from src.utils.responses import json_response

logger = get_structured_logger(__name__)

DEFAULT_BUYER = "External Buyer"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _owned(kind: ListingKind, request: ApiRequest, method: str) -> tuple[str, dict]:
    require_method(request, method)
    session = await require_session(request)
    listing_id = extract_listing_id(kind, request)
    existing = await load_owned_listing(kind, listing_id, session)
    return listing_id, existing


async def _archive_project(kind: ListingKind, request: ApiRequest) -> ApiResponse:
    require_method(request, "PATCH")
    session = await require_session(request)
    listing_id = extract_listing_id(kind, request)

    is_archived = request.body.get("isArchived")
    if not isinstance(is_archived, bool):
        raise BadRequestError("isArchived must be a boolean")

    await load_owned_listing(kind, listing_id, session)
    updated = await db.update_listing(kind.table, listing_id, {"is_archived": is_archived})
    row = await db.get_listing_with_relations(kind.table, listing_id) or updated
    entity = kind.entity_model.model_validate(row).model_dump(by_alias=True, mode="json")

    logger.info("Project archive state changed", listing_id=listing_id, is_archived=is_archived)
    message = "Project archived successfully" if is_archived else "Project unarchived successfully"
    return json_response(200, {"message": message, kind.key: entity})


async def _transition(
    kind: ListingKind,
    request: ApiRequest,
    source: ListingStatus,
    target: ListingStatus,
    rejection: str,
    success: str,
) -> ApiResponse:
    listing_id, existing = await _owned(kind, request, "POST")
    if existing.get("listing_status") != source.value:
        raise BadRequestError(rejection)

    await db.update_listing(kind.table, listing_id, {
        "listing_status": target.value,
        "updated_at": _utc_now(),
    })
    logger.info(
        "Property status changed",
        listing_id=listing_id,
        from_status=source.value,
        to_status=target.value,
    )
    return json_response(200, {"message": success})


async def _archive_property(kind: ListingKind, request: ApiRequest) -> ApiResponse:
    return await _transition(
        kind, request,
        ListingStatus.ACTIVE, ListingStatus.ARCHIVED,
        "Only active properties can be archived",
        "Property archived successfully",
    )


async def _reactivate_property(kind: ListingKind, request: ApiRequest) -> ApiResponse:
    return await _transition(
        kind, request,
        ListingStatus.ARCHIVED, ListingStatus.ACTIVE,
        "Only archived properties can be reactivated",
        "Property reactivated successfully",
    )


async def _mark_property_sold(kind: ListingKind, request: ApiRequest) -> ApiResponse:
    listing_id, _ = await _owned(kind, request, "POST")

    sold_to = request.body.get("soldTo")
    sold_to_user_id = request.body.get("soldToUserId")
    updated = await db.update_listing(kind.table, listing_id, {
        "listing_status": ListingStatus.SOLD.value,
        "sold_to": sold_to if isinstance(sold_to, str) and sold_to else DEFAULT_BUYER,
        "sold_to_user_id": sold_to_user_id if isinstance(sold_to_user_id, str) and sold_to_user_id else None,
        "sold_date": _utc_now(),
    })
    entity = kind.entity_model.model_validate(updated).model_dump(by_alias=True, mode="json")

    logger.info("Property marked as sold", listing_id=listing_id, has_buyer_user=bool(entity.get("soldToUserId")))
    return json_response(200, {"message": "Property marked as sold successfully", kind.key: entity})


async def archive_project(request: ApiRequest, expose_internal_errors: Optional[bool] = None) -> ApiResponse:
    return await run_operation(_archive_project, PROJECT, request, expose_internal_errors)


async def archive_property(request: ApiRequest, expose_internal_errors: Optional[bool] = None) -> ApiResponse:
    return await run_operation(_archive_property, PROPERTY, request, expose_internal_errors)


async def reactivate_property(request: ApiRequest, expose_internal_errors: Optional[bool] = None) -> ApiResponse:
    return await run_operation(_reactivate_property, PROPERTY, request, expose_internal_errors)


async def mark_property_sold(request: ApiRequest, expose_internal_errors: Optional[bool] = None) -> ApiResponse:
    return await run_operation(_mark_property_sold, PROPERTY, request, expose_internal_errors)
