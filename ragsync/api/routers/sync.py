"""
Sync API endpoints.

Routes: POST /sync

Dependencies: ragsync.core.sync_queue
System role: Sync trigger HTTP API
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from ragsync.api.deps import get_sync_queue
from ragsync.core.document_processing.models import SyncResult
from ragsync.core.exceptions import RagSyncException
from ragsync.core.sync_queue import SyncQueue

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("", response_model=SyncResult)
async def trigger_sync(
    wait: bool = Query(default=False, description="Wait for the pass and return its result"),
    queue: SyncQueue = Depends(get_sync_queue),
):
    """
    Queue a synchronization pass.

    Passes run one at a time in submission order.

    Args:
        wait: When true, block until the pass completes
        queue: Injected SyncQueue

    Returns:
        202 {"status": "queued", "pending": n}, or the SyncResult when wait=true

    Raises:
        HTTPException(503): Queue is shut down
        HTTPException(500): The pass failed (wait=true only)
    """
    try:
        future = queue.submit("api")
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not wait:
        # The worker already logged any failure
        future.add_done_callback(lambda f: f.cancelled() or f.exception())
        return JSONResponse(status_code=202, content={"status": "queued", "pending": queue.pending})

    try:
        return await future
    except RagSyncException as e:
        raise HTTPException(status_code=500, detail=str(e))
