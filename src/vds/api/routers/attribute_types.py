"""
Attribute-types router.

Endpoints:
    GET    /attribute-types         List, by name
    POST   /attribute-types         Create
    DELETE /attribute-types/{id}    Delete (409 IN_USE while referenced)
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from vds.api.deps import AsOf, BaseVersion, OpContext
from vds.api.schemas.requests import CreateTypeRequest
from vds.api.utils import no_content, versioned
from vds.ops import attribute_types as attribute_type_ops

router = APIRouter(prefix="/attribute-types")


@router.get("")
def list_attribute_types(ctx: OpContext, response: Response, as_of: AsOf):
    return versioned(response, attribute_type_ops.list_attribute_types(ctx, as_of))


@router.post("", status_code=201)
def create_attribute_type(
    payload: CreateTypeRequest, ctx: OpContext, base_version: BaseVersion, response: Response
):
    result = attribute_type_ops.create_attribute_type(ctx, payload.name, base_version)
    return versioned(response, result)


@router.delete("/{type_id}", status_code=204)
def delete_attribute_type(type_id: str, ctx: OpContext, base_version: BaseVersion):
    return no_content(attribute_type_ops.delete_attribute_type(ctx, type_id, base_version))
