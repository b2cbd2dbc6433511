### app/exports/tracker.py

"""
Filesystem-backed export job tracker.

Every state transition creates a file named after the job id; nothing is
rewritten in place, and status is reconstructed from which files exist:

    <id>.job          manifest, created when the id is allocated   -> pending
    <id>.processing   written before any query runs                -> processing
    <id>.<ext>        finished export (json, xlsx or csv)          -> completed
    <id>.error        failure message                              -> failed

Any process sharing the exports directory can therefore answer status and
download requests without holding job objects in memory.
"""

import json
import os
import re
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from app.exports.exceptions import ExportNotFoundError, InvalidExportTransitionError
from app.exports.models import ExportFormat, ExportJob, ExportStatus
from app.exports.schemas import DEFAULT_FILENAME, YouthExportRequest
from app.utils.logger import get_logger

logger = get_logger(__name__)

MANIFEST_SUFFIX = ".job"
PROCESSING_SUFFIX = ".processing"
ERROR_SUFFIX = ".error"
STAGING_SUFFIX = ".part"
TEMP_SUFFIX = ".tmp"

JOB_ID_PATTERN = re.compile(r"^\d{1,32}$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _mtime(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)


class ExportJobTracker:
    """
    Allocates export job ids and records their lifecycle as files.
    """

    def __init__(self, exports_dir: Union[str, Path]):
        self.exports_dir = Path(exports_dir)
        self.exports_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _path(self, job_id: str, suffix: str) -> Path:
        # Ids are digits only, which also keeps them inside exports_dir
        if not JOB_ID_PATTERN.match(str(job_id)):
            raise ExportNotFoundError(job_id)
        return self.exports_dir / f"{job_id}{suffix}"

    def artifact_path(self, job_id: str, export_format: ExportFormat) -> Path:
        return self._path(job_id, f".{ExportFormat(export_format).extension}")

    def staging_path(self, job_id: str, export_format: ExportFormat) -> Path:
        """Where a writer should put the file before it is published."""
        return self._path(job_id, f".{ExportFormat(export_format).extension}{STAGING_SUFFIX}")

    def _new_job_id(self) -> str:
        return str(time.time_ns() // 1_000_000)

    def _publish(self, target: Path, content: str) -> None:
        """
        Create target with its full content in one step.

        The content goes to a temp file first and is hard-linked into place,
        so readers never see a partially written file. Raises
        FileExistsError if target already exists.
        """
        fd, tmp_name = tempfile.mkstemp(dir=self.exports_dir, suffix=TEMP_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                tmp_file.write(content)
            os.link(tmp_name, target)
        finally:
            os.unlink(tmp_name)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def create_job(self, request: YouthExportRequest) -> ExportJob:
        """
        Allocate a job id and write its manifest (status pending).

        The manifest is created exclusively; if the timestamp id is taken
        the id is bumped until a free one is found.
        """
        created_at = _utcnow()
        manifest = {
            "format": request.format.value,
            "filename": request.filename,
            "createdAt": created_at.isoformat(),
            "request": request.model_dump(mode="json", by_alias=True),
        }

        job_id = self._new_job_id()
        while True:
            try:
                self._publish(self._path(job_id, MANIFEST_SUFFIX), json.dumps(manifest))
                break
            except FileExistsError:
                job_id = str(int(job_id) + 1)

        logger.info(
            "Created export job",
            job_id=job_id,
            format=request.format.value,
            filename=request.filename,
        )
        return ExportJob(
            id=job_id,
            format=request.format,
            status=ExportStatus.PENDING,
            filename=request.filename,
            created_at=created_at,
            request=manifest["request"],
        )

    def mark_processing(self, job_id: str) -> None:
        """pending -> processing"""
        job = self.get_job(job_id)
        if job.status != ExportStatus.PENDING:
            raise InvalidExportTransitionError(
                f"Export job '{job_id}' cannot start processing from status {job.status.value}"
            )
        try:
            self._publish(self._path(job_id, PROCESSING_SUFFIX), _utcnow().isoformat())
        except FileExistsError as e:
            raise InvalidExportTransitionError(f"Export job '{job_id}' is already processing") from e
        logger.info("Export job processing", job_id=job_id)

    def mark_completed(self, job_id: str, staged_file: Union[str, Path]) -> Path:
        """
        processing -> completed

        Publishes the staged file under <id>.<ext>; the rename is the
        transition, so a half-written file is never reported as completed.
        """
        job = self.get_job(job_id)
        if job.status != ExportStatus.PROCESSING:
            raise InvalidExportTransitionError(
                f"Export job '{job_id}' cannot complete from status {job.status.value}"
            )
        final_path = self.artifact_path(job_id, job.format)
        os.replace(staged_file, final_path)
        logger.info("Export job completed", job_id=job_id, path=str(final_path))
        return final_path

    def mark_failed(self, job_id: str, message: str) -> None:
        """processing -> failed, persisting the error message."""
        job = self.get_job(job_id)
        if job.status.is_terminal:
            raise InvalidExportTransitionError(
                f"Export job '{job_id}' already finished with status {job.status.value}"
            )
        staged = self.staging_path(job_id, job.format)
        if staged.exists():
            staged.unlink()
        try:
            self._publish(self._path(job_id, ERROR_SUFFIX), message or "Unknown error")
        except FileExistsError as e:
            raise InvalidExportTransitionError(f"Export job '{job_id}' already failed") from e
        logger.warning("Export job failed", job_id=job_id, error=message)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read_manifest(self, job_id: str) -> Optional[dict]:
        path = self._path(job_id, MANIFEST_SUFFIX)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as manifest_file:
            return json.load(manifest_file)

    def get_job(self, job_id: str) -> ExportJob:
        """
        Reconstruct a job from its files.

        Raises:
            ExportNotFoundError: If no file exists for the id.
        """
        job_id = str(job_id)
        manifest = self._read_manifest(job_id)

        artifact = None
        for export_format in ExportFormat:
            candidate = self.artifact_path(job_id, export_format)
            if candidate.exists():
                artifact = (export_format, candidate)
                break

        error_path = self._path(job_id, ERROR_SUFFIX)
        processing_path = self._path(job_id, PROCESSING_SUFFIX)

        if manifest is None and artifact is None and not error_path.exists():
            raise ExportNotFoundError(job_id)

        if manifest is not None:
            export_format = ExportFormat(manifest["format"])
            created_at = datetime.fromisoformat(manifest["createdAt"])
            filename = manifest.get("filename") or DEFAULT_FILENAME
            request = manifest.get("request") or {}
        else:
            # Manifest lost; fall back to what the artifacts tell us
            export_format = artifact[0] if artifact else ExportFormat.JSON
            created_at = _mtime(artifact[1] if artifact else error_path)
            filename = DEFAULT_FILENAME
            request = {}

        job = ExportJob(
            id=job_id,
            format=export_format,
            status=ExportStatus.PENDING,
            filename=filename,
            created_at=created_at,
            request=request,
        )

        if artifact is not None:
            job.status = ExportStatus.COMPLETED
            job.format = artifact[0]
            job.file_path = artifact[1]
            job.size_bytes = artifact[1].stat().st_size
            job.completed_at = _mtime(artifact[1])
        elif error_path.exists():
            job.status = ExportStatus.FAILED
            job.error_message = error_path.read_text(encoding="utf-8")
            job.completed_at = _mtime(error_path)
        elif processing_path.exists():
            job.status = ExportStatus.PROCESSING

        return job

    def get_status(self, job_id: str) -> ExportStatus:
        return self.get_job(job_id).status

    def get_artifact(self, job_id: str) -> ExportJob:
        """
        A completed job with its file.

        Raises:
            ExportNotFoundError: If the job is unknown or has no file yet.
        """
        job = self.get_job(job_id)
        if job.status != ExportStatus.COMPLETED or job.file_path is None:
            raise ExportNotFoundError(job_id)
        return job

    def list_jobs(self, status: Optional[ExportStatus] = None) -> List[ExportJob]:
        """All jobs with a manifest, newest first."""
        job_ids = [
            path.name[: -len(MANIFEST_SUFFIX)]
            for path in self.exports_dir.glob(f"*{MANIFEST_SUFFIX}")
            if JOB_ID_PATTERN.match(path.name[: -len(MANIFEST_SUFFIX)])
        ]
        jobs = []
        for job_id in sorted(job_ids, key=int, reverse=True):
            try:
                jobs.append(self.get_job(job_id))
            except (ValueError, KeyError) as e:
                # Unreadable manifest; the job cannot be described, so leave it out
                logger.warning(f"Skipping export job {job_id} with unreadable manifest: {e}")
        if status is not None:
            jobs = [job for job in jobs if job.status == status]
        return jobs

    def delete_job(self, job_id: str) -> None:
        """
        Remove every file of a finished job.

        Raises:
            InvalidExportTransitionError: If the job is still pending or processing.
        """
        job = self.get_job(job_id)
        if not job.status.is_terminal:
            raise InvalidExportTransitionError(
                f"Export job '{job_id}' is still {job.status.value} and cannot be deleted"
            )

        suffixes = [MANIFEST_SUFFIX, PROCESSING_SUFFIX, ERROR_SUFFIX]
        for export_format in ExportFormat:
            suffixes.append(f".{export_format.extension}")
            suffixes.append(f".{export_format.extension}{STAGING_SUFFIX}")

        for suffix in suffixes:
            path = self._path(job_id, suffix)
            if path.exists():
                path.unlink()
                logger.info(f"Deleted export file: {path}")

        logger.info("Deleted export job", job_id=job_id)
