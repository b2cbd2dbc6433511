### app/exports/router.py

"""
Export API Endpoints

Provides REST API for requesting, monitoring, downloading and removing
youth profile exports.
"""

import math
from typing import Callable, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import SessionLocal
from app.exports.exceptions import (
    ExportError,
    ExportNotFoundError,
    InvalidExportTransitionError,
)
from app.exports.models import ExportStatus
from app.exports.schemas import (
    ExportListItem,
    ExportResponse,
    ExportStatusResponse,
    PaginatedExportListResponse,
    YouthExportRequest,
)
from app.exports.tasks import export_youth_data_async, run_export_job
from app.exports.tracker import ExportJobTracker
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/exports", tags=["Exports"])


def get_export_tracker() -> ExportJobTracker:
    """Tracker over the configured exports directory."""
    return ExportJobTracker(settings.exports_path)


def get_session_factory() -> Callable[[], Session]:
    """Session factory handed to background export jobs."""
    return SessionLocal


@router.post("/youth", response_model=ExportResponse, status_code=status.HTTP_202_ACCEPTED)
def request_youth_export(
    export_request: YouthExportRequest,
    background_tasks: BackgroundTasks,
    tracker: ExportJobTracker = Depends(get_export_tracker),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """
    Create a youth profile export job and start it in the background.

    Returns immediately with the job ID; poll the status URL until the job
    is completed, then fetch the download URL.

    **Supported Formats:**
    - json (profiles with nested related collections)
    - csv (one row per profile, collections summarised)
    - xlsx (profiles sheet, one sheet per collection, export info)
    """
    try:
        job = tracker.create_job(export_request)

        try:
            # The job is processing before its id is handed out
            tracker.mark_processing(job.id)

            if settings.export_task_backend == "celery":
                task = export_youth_data_async.delay(job.id)
                logger.info(f"Triggered Celery task {task.id} for export job {job.id}")
            else:
                background_tasks.add_task(
                    run_export_job,
                    job.id,
                    session_factory=session_factory,
                    tracker=tracker,
                )
                logger.info(f"Scheduled background export job {job.id}")
        except Exception as e:
            # Nothing will run this job; record it as failed so it can be removed
            tracker.mark_failed(job.id, f"Failed to dispatch export job: {e}")
            raise

    except ExportError as e:
        logger.error(f"Error creating export job: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except Exception as e:
        logger.error(f"Error creating export job: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create export job: {str(e)}",
        )

    return ExportResponse(
        job_id=job.id,
        status=ExportStatus.PROCESSING,
        message=(
            f"Export job created successfully. "
            f"Check status at /exports/{job.id}/status"
        ),
        status_url=f"/exports/{job.id}/status",
        download_url=f"/exports/{job.id}/download",
    )


@router.get(
    "/{job_id}/status",
    response_model=ExportStatusResponse,
    response_model_exclude_none=True,
)
def get_export_status(
    job_id: str,
    tracker: ExportJobTracker = Depends(get_export_tracker),
):
    """
    Check the status of an export job.

    **Status Values:**
    - pending: job created, not started yet
    - processing: export is being generated
    - completed: export ready for download (format and size included)
    - failed: export failed (see error)
    """
    try:
        job = tracker.get_job(job_id)
    except ExportNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    response = ExportStatusResponse(
        job_id=job.id,
        status=job.status,
        created_at=job.created_at,
    )

    if job.status == ExportStatus.COMPLETED:
        response.format = job.format
        response.size_bytes = job.size_bytes
        response.completed_at = job.completed_at
    elif job.status == ExportStatus.FAILED:
        response.error = job.error_message
        response.completed_at = job.completed_at

    return response


@router.get("/{job_id}/download")
def download_export(
    job_id: str,
    tracker: ExportJobTracker = Depends(get_export_tracker),
):
    """
    Download the exported file.

    Returns 404 if the job is unknown or its file is not ready yet.
    """
    try:
        job = tracker.get_artifact(job_id)
    except ExportNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Export file not found",
        )

    return FileResponse(
        path=str(job.file_path),
        media_type=job.format.media_type,
        filename=job.download_name,
    )


@router.get("", response_model=PaginatedExportListResponse)
def list_exports(
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(10, ge=1, le=100, alias="perPage", description="Items per page"),
    status_filter: Optional[ExportStatus] = Query(None, alias="status", description="Filter by status"),
    tracker: ExportJobTracker = Depends(get_export_tracker),
):
    """
    List export jobs, newest first.

    Useful for showing export history in UI.
    """
    jobs = tracker.list_jobs(status=status_filter)
    total_items = len(jobs)

    offset = (page - 1) * per_page
    items = [
        ExportListItem(
            job_id=job.id,
            format=job.format,
            status=job.status,
            file_name=job.download_name,
            size_bytes=job.size_bytes,
            created_at=job.created_at,
            completed_at=job.completed_at,
        )
        for job in jobs[offset:offset + per_page]
    ]

    total_pages = math.ceil(total_items / per_page) if per_page > 0 else 0

    return PaginatedExportListResponse(
        items=items,
        total_items=total_items,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
    )


@router.delete("/{job_id}")
def delete_export(
    job_id: str,
    tracker: ExportJobTracker = Depends(get_export_tracker),
):
    """
    Delete a finished export job and its file.

    Jobs still pending or processing cannot be deleted.
    """
    try:
        tracker.delete_job(job_id)
    except ExportNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidExportTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    logger.info(f"Deleted export job {job_id}")

    return {"message": f"Export job {job_id} deleted successfully"}
