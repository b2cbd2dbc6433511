# app/exports/exceptions.py

class ExportError(Exception):
    """Base exception for all export pipeline errors."""
    pass

class ExportValidationError(ExportError):
    """Raised when an export request is malformed."""
    pass

class AggregationError(ExportError):
    """Raised when the primary or a related-collection query fails."""
    def __init__(self, stage: str, reason: str):
        self.stage = stage
        self.reason = reason
        super().__init__(f"Failed to load {stage} for export: {reason}")

class SerializationError(ExportError):
    """Raised when an export file cannot be written."""
    def __init__(self, export_format: str, reason: str):
        self.export_format = export_format
        self.reason = reason
        super().__init__(f"Failed to write {export_format} export: {reason}")

class ExportNotFoundError(ExportError):
    """Raised when a job id has no artifacts in the exports directory."""
    def __init__(self, job_id: str = None):
        self.job_id = job_id
        if job_id:
            super().__init__(f"Export job '{job_id}' not found.")
        else:
            super().__init__("Export job not found.")

class InvalidExportTransitionError(ExportError):
    """Raised for illegal job state transitions."""
    pass
