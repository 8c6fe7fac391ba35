"""
Schema blob router.

Endpoints:
    GET /schema    Current blob (``{"body": null}`` when unset)
    PUT /schema    Replace it
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from vds.api.deps import AsOf, BaseVersion, OpContext
from vds.api.schemas.requests import SetSchemaRequest
from vds.api.utils import versioned
from vds.ops import schema as schema_ops
from vds.ops.result import Versioned

router = APIRouter(prefix="/schema")


@router.get("")
def get_schema(ctx: OpContext, response: Response, as_of: AsOf):
    result = schema_ops.get_schema(ctx, as_of)
    if result.data is None:
        result = Versioned({"body": None}, result.version)
    return versioned(response, result)


@router.put("")
def set_schema(payload: SetSchemaRequest, ctx: OpContext, base_version: BaseVersion, response: Response):
    return versioned(response, schema_ops.set_schema(ctx, payload.body, base_version))
