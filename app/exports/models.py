### app/exports/models.py

"""
Export job model.

Jobs are not database rows: their state is recorded as files in the exports
directory (see app/exports/tracker.py) so that any process sharing that
directory can answer status and download requests.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum as PyEnum
from pathlib import Path
from typing import Any, Dict, Optional


class ExportStatus(str, PyEnum):
    """Export job status enumeration"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExportStatus.COMPLETED, ExportStatus.FAILED)


class ExportFormat(str, PyEnum):
    """Export file format enumeration"""
    JSON = "json"
    XLSX = "xlsx"
    CSV = "csv"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self]


MEDIA_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.CSV: "text/csv",
}


@dataclass
class ExportJob:
    """
    Snapshot of an export job reconstructed from its filesystem artifacts.

    `request` holds the validated export request as plain JSON data so the
    job body can be re-run from the manifest alone.
    """

    id: str
    format: ExportFormat
    status: ExportStatus
    filename: str
    created_at: datetime
    request: Dict[str, Any] = field(default_factory=dict)
    file_path: Optional[Path] = None
    size_bytes: Optional[int] = None
    error_message: Optional[str] = None
    completed_at: Optional[datetime] = None

    @property
    def download_name(self) -> str:
        """Filename suggested to the client: <basename>-<jobId>.<ext>"""
        return f"{self.filename}-{self.id}.{self.format.extension}"

    def __repr__(self):
        return (
            f"<ExportJob(id={self.id}, format={self.format.value}, "
            f"status={self.status.value})>"
        )
