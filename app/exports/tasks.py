### app/exports/tasks.py

"""
Export Job Processing

The job body runs the aggregation and the writer for one export job and
records the outcome with the tracker. It is dispatched either through
FastAPI background tasks or through the Celery task below; both share the
exports directory, so status checks work the same way.
"""

from typing import Any, Callable, Dict, Optional

from celery import shared_task
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import SessionLocal
from app.exports.aggregator import YouthExportAggregator
from app.exports.builders.youth_builder import RELATED_COLLECTIONS
from app.exports.exceptions import ExportError, ExportNotFoundError, ExportValidationError
from app.exports.models import ExportStatus
from app.exports.schemas import YouthExportRequest
from app.exports.tracker import ExportJobTracker
from app.exports.writers import ExportFileWriter, ExportMetadata
from app.utils.logger import get_logger

logger = get_logger(__name__)


def build_export_metadata(request: YouthExportRequest) -> ExportMetadata:
    """Describe a request for the Export Info sheet."""
    return ExportMetadata(
        filters=request.filters.applied(),
        include={
            collection.key: getattr(request.include, collection.include_flag)
            for collection in RELATED_COLLECTIONS
        },
        sort_by=request.sort_by,
        sort_direction=request.sort_direction,
    )


def _load_request(data: Dict[str, Any]) -> YouthExportRequest:
    try:
        return YouthExportRequest.model_validate(data)
    except ValidationError as e:
        raise ExportValidationError(f"Stored export request is invalid: {e}") from e


def run_export_job(
    job_id: str,
    session_factory: Callable[[], Session] = SessionLocal,
    tracker: Optional[ExportJobTracker] = None,
    writer: Optional[ExportFileWriter] = None,
) -> Dict[str, Any]:
    """
    Generate the export file for a job and record the result.

    This function:
    1. Loads the job manifest and its request
    2. Aggregates the matching youth profiles
    3. Writes the file to a staging path
    4. Publishes it (completed) or records the error (failed)

    Failures never propagate; they end up in the job's failed status.

    Args:
        job_id: Export job ID
        session_factory: Creates the database session for this job
        tracker: Job tracker (defaults to the configured exports directory)
        writer: File writer

    Returns:
        dict: Result summary
    """
    tracker = tracker or ExportJobTracker(settings.exports_path)
    writer = writer or ExportFileWriter()

    try:
        job = tracker.get_job(job_id)
    except ExportNotFoundError:
        logger.error(f"Export job {job_id} not found")
        return {"status": "error", "job_id": job_id, "message": "Export job not found"}

    # Redelivered task for a finished job: report the recorded outcome
    if job.status.is_terminal:
        logger.info(f"Export job {job_id} already {job.status.value}, skipping")
        if job.status == ExportStatus.COMPLETED:
            return {
                "status": "success",
                "job_id": job_id,
                "record_count": None,
                "file_path": str(job.file_path),
            }
        return {"status": "failed", "job_id": job_id, "error": job.error_message}

    logger.info(
        f"Starting export job {job_id}: format={job.format.value}, filename={job.filename}"
    )

    db = session_factory()
    try:
        request = _load_request(job.request)

        if job.status == ExportStatus.PENDING:
            tracker.mark_processing(job_id)

        documents = YouthExportAggregator(db).aggregate(request)

        staged = tracker.staging_path(job_id, job.format)
        record_count = writer.write(documents, staged, job.format, build_export_metadata(request))
        file_path = tracker.mark_completed(job_id, staged)

        logger.info(
            f"Export job {job_id} completed: "
            f"{record_count} records exported to {file_path}"
        )
        return {
            "status": "success",
            "job_id": job_id,
            "record_count": record_count,
            "file_path": str(file_path),
        }

    except Exception as e:
        logger.error(f"Error in run_export_job for job {job_id}: {e}", exc_info=True)

        try:
            tracker.mark_failed(job_id, str(e))
        except ExportError as mark_error:
            logger.error(f"Failed to record export failure for job {job_id}: {mark_error}")

        return {"status": "failed", "job_id": job_id, "error": str(e)}

    finally:
        db.close()


@shared_task(name="exports.export_youth_data_async", bind=True)
def export_youth_data_async(self, job_id: str):
    """
    Celery task running an export job on a worker.

    Args:
        job_id: Export job ID created by the API

    Returns:
        dict: Result summary
    """
    logger.info(f"Celery task {self.request.id} picked up export job {job_id}")

    result = run_export_job(job_id)

    if result["status"] != "success":
        # Re-raise to mark task as failed in Celery
        raise ExportError(result.get("error") or result.get("message"))

    return result
