"""
Attributes router.

Endpoints:
    GET    /attributes/{id}    Single attribute
    PATCH  /attributes/{id}    Change its value
    DELETE /attributes/{id}    Remove it
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from vds.api.deps import AsOf, BaseVersion, OpContext
from vds.api.schemas.requests import UpdateAttributeRequest
from vds.api.utils import no_content, versioned
from vds.ops import attributes as attribute_ops

router = APIRouter(prefix="/attributes")


@router.get("/{attribute_id}")
def get_attribute(attribute_id: str, ctx: OpContext, response: Response, as_of: AsOf):
    return versioned(response, attribute_ops.get_attribute(ctx, attribute_id, as_of))


@router.patch("/{attribute_id}")
def update_attribute(
    attribute_id: str,
    payload: UpdateAttributeRequest,
    ctx: OpContext,
    base_version: BaseVersion,
    response: Response,
):
    result = attribute_ops.update_attribute(ctx, attribute_id, payload.value, base_version)
    return versioned(response, result)


@router.delete("/{attribute_id}", status_code=204)
def delete_attribute(attribute_id: str, ctx: OpContext, base_version: BaseVersion):
    return no_content(attribute_ops.delete_attribute(ctx, attribute_id, base_version))
