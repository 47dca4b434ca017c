from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from docfetch.schemas import (
    DocumentList,
    DocumentRegistration,
    FailureDetail,
    RefreshResponse,
    ScheduleStatus,
)
from docfetch.services.refresh import RefreshInProgressError
from docfetch.services.render import render_document

router = APIRouter()

@router.get("/documents/{doc_id}", response_class=HTMLResponse)
async def show_document(doc_id: int, request: Request):
    """Cached document content with its last update time"""
    return render_document(request.app.state.store, doc_id)

@router.get("/admin/documents", response_model=DocumentList)
async def list_documents(request: Request):
    return DocumentList(documents=request.app.state.registry.list_all())

@router.post("/admin/documents", response_model=DocumentList)
async def save_document(registration: DocumentRegistration, request: Request):
    """Add a document URL, or replace the URL stored under an existing id"""
    registry = request.app.state.registry
    try:
        registry.add_or_update(registration.id, registration.url)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return DocumentList(documents=registry.list_all())

@router.delete("/admin/documents/{doc_id}")
async def delete_document(doc_id: int, request: Request):
    """Remove a document URL together with its cached content"""
    try:
        removed = request.app.state.registry.remove(doc_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Document #{doc_id} is not registered"
        )
    return {"message": "Google Doc URL and content deleted!"}

@router.post("/admin/refresh", response_model=RefreshResponse)
def refresh_now(request: Request):
    """
    Fetch every registered document right now.

    Runs one pass synchronously and restarts the automatic schedule from
    this moment. Documents that fail keep their previous content.
    """
    scheduler = request.app.state.scheduler
    try:
        report = scheduler.trigger_now_and_rebase()
    except RefreshInProgressError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Refresh failed: {str(e)}"
        )

    return RefreshResponse(
        success_count=report.success_count,
        failure_count=report.failure_count,
        outcome=report.outcome.value,
        failures=[
            FailureDetail(
                id=doc_id,
                reason=failure.reason.value,
                status_code=failure.status_code,
                message=failure.message,
            )
            for doc_id, failure in report.failures
        ],
        messages=report.summary_lines(),
        next_run_at=scheduler.next_run_at_iso(),
    )

@router.get("/admin/schedule", response_model=ScheduleStatus)
async def schedule_status(request: Request):
    scheduler = request.app.state.scheduler
    return ScheduleStatus(
        running=scheduler.running,
        period_seconds=scheduler.period_seconds,
        next_run_at=scheduler.next_run_at_iso(),
    )

@router.get("/cache/stats")
async def cache_statistics(request: Request):
    """Get cache statistics for debugging"""
    try:
        return request.app.state.store.get_stats()
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to read cache statistics: {str(e)}"
        )

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "Document Export Fetcher"}
