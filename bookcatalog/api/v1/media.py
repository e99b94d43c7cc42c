"""
Media endpoints
"""
from fastapi import APIRouter

from bookcatalog.schemas.media import ReconcileRequest, ReconcileResponse
from bookcatalog.services.media_reconciler import reconcile, summarize

router = APIRouter()


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_media(request: ReconcileRequest) -> ReconcileResponse:
    """Keep/create/delete operations that turn the persisted set into the working set"""
    ops = reconcile(request.persisted, request.working)
    return ReconcileResponse(ops=ops, **summarize(ops))
