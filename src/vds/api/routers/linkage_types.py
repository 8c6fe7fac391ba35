"""
Linkage-types router.

Endpoints:
    GET    /linkage-types         List, by name
    POST   /linkage-types         Create
    DELETE /linkage-types/{id}    Delete (409 IN_USE while referenced)
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from vds.api.deps import AsOf, BaseVersion, OpContext
from vds.api.schemas.requests import CreateTypeRequest
from vds.api.utils import no_content, versioned
from vds.ops import linkage_types as linkage_type_ops

router = APIRouter(prefix="/linkage-types")


@router.get("")
def list_linkage_types(ctx: OpContext, response: Response, as_of: AsOf):
    return versioned(response, linkage_type_ops.list_linkage_types(ctx, as_of))


@router.post("", status_code=201)
def create_linkage_type(
    payload: CreateTypeRequest, ctx: OpContext, base_version: BaseVersion, response: Response
):
    result = linkage_type_ops.create_linkage_type(ctx, payload.name, base_version)
    return versioned(response, result)


@router.delete("/{type_id}", status_code=204)
def delete_linkage_type(type_id: str, ctx: OpContext, base_version: BaseVersion):
    return no_content(linkage_type_ops.delete_linkage_type(ctx, type_id, base_version))
