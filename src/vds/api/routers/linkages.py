"""
Linkages router.

Endpoints:
    GET    /linkages         List (filter by type_id, source_id, target_id)
    POST   /linkages         Create one linkage
    DELETE /linkages/{id}    Remove it
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Response

from vds.api.deps import AsOf, BaseVersion, Limit, Offset, OpContext
from vds.api.schemas.requests import CreateLinkageRequest
from vds.api.utils import no_content, versioned
from vds.ops import linkages as linkage_ops

router = APIRouter(prefix="/linkages")


@router.get("")
def list_linkages(
    ctx: OpContext,
    response: Response,
    as_of: AsOf,
    type_id: str | None = Query(None),
    source_id: str | None = Query(None),
    target_id: str | None = Query(None),
    limit: Limit = None,
    offset: Offset = None,
):
    result = linkage_ops.list_linkages(
        ctx,
        type_id=type_id,
        source_id=source_id,
        target_id=target_id,
        limit=limit,
        offset=offset,
        as_of=as_of,
    )
    return versioned(response, result)


@router.post("", status_code=201)
def create_linkage(
    payload: CreateLinkageRequest, ctx: OpContext, base_version: BaseVersion, response: Response
):
    result = linkage_ops.create_linkage(ctx, payload.to_linkage(), base_version)
    return versioned(response, result)


@router.delete("/{linkage_id}", status_code=204)
def delete_linkage(linkage_id: str, ctx: OpContext, base_version: BaseVersion):
    return no_content(linkage_ops.delete_linkage(ctx, linkage_id, base_version))
