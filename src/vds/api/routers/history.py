"""
History router.

Endpoints:
    GET /history             Trunk commits, newest first
    GET /history/{commit}    One commit
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from vds.api.deps import Limit, Offset, OpContext
from vds.api.utils import versioned
from vds.ops import history as history_ops

router = APIRouter(prefix="/history")


@router.get("")
def list_history(ctx: OpContext, response: Response, limit: Limit = None, offset: Offset = None):
    result = history_ops.list_history(ctx, limit=limit or 50, offset=offset or 0)
    return versioned(response, result)


@router.get("/{commit_hash}")
def get_commit(commit_hash: str, ctx: OpContext, response: Response):
    return versioned(response, history_ops.get_commit(ctx, commit_hash))
