"""Ingest router: triggers a rebuild of the knowledge base from a document folder.

The run happens as a fire-and-forget background task so the response is
returned immediately. Only one run may be active at a time.
"""

import asyncio

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from server.models.requests import IngestRequest
from server.models.responses import IngestAcceptedResponse
from shared.dependencies.auth import verify_api_key
from shared.errors.knowledge_errors import KnowledgeBaseError

router = APIRouter(prefix="/knowledge", tags=["ingest"], dependencies=[Depends(verify_api_key)])


async def _run_ingest(app: FastAPI, path: str, reset: bool) -> None:
    """Run one ingestion and release the ingest lock afterwards."""
    try:
        app.state.last_ingest = await app.state.ingest_service.do_ingest(root_path=path, reset=reset)
    except KnowledgeBaseError as exc:
        app.state.logging.error("Ingestion of '%s' failed: %s", path, exc)
    except Exception:
        # nobody awaits the task, so anything unexpected has to be logged here
        app.state.logging.exception("Ingestion of '%s' failed unexpectedly.", path)
    finally:
        app.state.ingest_lock.release()
        app.state.ingest_task = None


@router.post("/ingest", status_code=202)
async def trigger_ingest(request: Request, body: IngestRequest) -> JSONResponse:
    """Start an ingestion run in the background.

    Args:
        request (Request): FastAPI request (provides app.state.ingest_service).
        body (IngestRequest): Optional folder path and reset flag.

    Returns:
        JSONResponse: 202 acknowledgement with the resolved path.

    Raises:
        HTTPException: 409 if an ingestion run is already in progress.
    """
    app = request.app
    lock = app.state.ingest_lock
    if lock.locked():
        raise HTTPException(status_code=409, detail="Ingestion already in progress")

    # released by _run_ingest once the background run finishes
    await lock.acquire()
    path = body.path or app.state.knowledge_config.documents_path
    app.state.logging.info("Ingestion requested for '%s' (reset=%s)", path, body.reset)
    app.state.ingest_task = asyncio.create_task(_run_ingest(app, path, body.reset))

    accepted = IngestAcceptedResponse(status="accepted", path=path, reset=body.reset)
    return JSONResponse(status_code=202, content=accepted.model_dump())
