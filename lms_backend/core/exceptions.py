"""
Error taxonomy for the progress / certificate pipeline.

Services raise these; routes map them to HTTP responses through the
exception handlers registered in main.py.
"""


class PipelineError(Exception):
    """Base pipeline error."""

    def __init__(self, message: str, code: str = "pipeline_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidInput(PipelineError):
    """Missing/malformed identifiers or out-of-range values. Raised before any write."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, "invalid_input")


class DependencyUnavailable(PipelineError):
    """Catalog, user or course lookup failed; nothing was written."""

    def __init__(self, message: str = "A required dependency is unavailable"):
        super().__init__(message, "dependency_unavailable")


class StorageConflict(PipelineError):
    """
    Uniqueness violation on insert. Resolved internally into an idempotent
    result and never surfaced to callers of the public operations.
    """

    def __init__(self, message: str = "Record already exists"):
        super().__init__(message, "storage_conflict")


class StorageFailure(PipelineError):
    """Any other storage error. Not retried in-process."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, "storage_failure")


class PartialSweepFailure(PipelineError):
    """One or more courses failed during a reconciliation sweep."""

    def __init__(self, report, message: str = "Reconciliation sweep finished with course failures"):
        self.report = report
        super().__init__(message, "partial_sweep_failure")
