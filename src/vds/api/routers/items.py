"""
Items router.

Endpoints:
    POST   /items                 Create an item
    GET    /items                 List items (``attr.<type>=<value>`` filters)
    GET    /items/{id}            Item with attributes and linkages
    PATCH  /items/{id}            Update body and/or attributes in one commit
    DELETE /items/{id}            Delete (cascades to attributes and linkages)
    GET    /items/{id}/history    Commits that touched the item

Mutations honour ``If-Match`` as the base version to fork from.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from vds.api.deps import AsOf, BaseVersion, Limit, Offset, OpContext
from vds.api.schemas.requests import CreateItemRequest, UpdateItemRequest
from vds.api.utils import no_content, versioned
from vds.ops import history as history_ops
from vds.ops import items as item_ops

router = APIRouter(prefix="/items")

ATTR_FILTER_PREFIX = "attr."


def _attr_filters(request: Request) -> list[tuple[str, str]]:
    """``?attr.color=red&attr.size=L`` → ``[("color", "red"), ("size", "L")]``."""
    filters: list[tuple[str, str]] = []
    seen: set[str] = set()
    for key, value in request.query_params.multi_items():
        if key.startswith(ATTR_FILTER_PREFIX) and key not in seen:
            seen.add(key)
            filters.append((key[len(ATTR_FILTER_PREFIX):], value))
    return filters


@router.post("", status_code=201)
def create_item(payload: CreateItemRequest, ctx: OpContext, base_version: BaseVersion, response: Response):
    result = item_ops.create_item(ctx, payload.body, base_version)
    return versioned(response, result)


@router.get("")
def list_items(
    request: Request,
    ctx: OpContext,
    response: Response,
    as_of: AsOf,
    limit: Limit = None,
    offset: Offset = None,
):
    """List items newest first.

    Example:
        GET /items?attr.color=red&limit=10
    """
    result = item_ops.list_items(
        ctx,
        limit=limit,
        offset=offset,
        attr_filters=_attr_filters(request),
        as_of=as_of,
    )
    return versioned(response, result)


@router.get("/{item_id}")
def get_item(item_id: str, ctx: OpContext, response: Response, as_of: AsOf):
    return versioned(response, item_ops.get_item(ctx, item_id, as_of))


@router.patch("/{item_id}")
def update_item(
    item_id: str,
    payload: UpdateItemRequest,
    ctx: OpContext,
    base_version: BaseVersion,
    response: Response,
):
    result = item_ops.update_item(ctx, item_id, payload.to_update(), base_version)
    return versioned(response, result)


@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: str, ctx: OpContext, base_version: BaseVersion):
    return no_content(item_ops.delete_item(ctx, item_id, base_version))


@router.get("/{item_id}/history")
def item_history(
    item_id: str,
    ctx: OpContext,
    response: Response,
    limit: Limit = None,
    offset: Offset = None,
):
    result = history_ops.item_history(ctx, item_id, limit=limit or 50, offset=offset or 0)
    return versioned(response, result)
