"""
Failures of one analysis attempt.

Every error carries a single human readable ``message`` for the page and the
HTTP status the service answers with. All of them are terminal for the
attempt that raised them.
"""

from __future__ import annotations


def _limit_label(limit_bytes: int) -> str:
    mib = 1024 * 1024
    if limit_bytes >= mib and limit_bytes % mib == 0:
        return f"{limit_bytes // mib}MB"
    return f"{limit_bytes} bytes"


class AnalysisError(Exception):
    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidFileType(AnalysisError):
    http_status = 400

    def __init__(self, mime_type: str | None) -> None:
        super().__init__("Please select a PDF, PNG, JPG, or JPEG file.")
        self.mime_type = mime_type


class FileTooLarge(AnalysisError):
    http_status = 400

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(f"File size must be less than {_limit_label(limit_bytes)}.")
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class NoFileSelected(AnalysisError):
    http_status = 400

    def __init__(self) -> None:
        super().__init__("Please select a file first.")


class AnalysisInProgress(AnalysisError):
    http_status = 409

    def __init__(self) -> None:
        super().__init__("An analysis is already running. Wait for it to finish.")


class MissingConfiguration(AnalysisError):
    http_status = 503

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            "Please configure your Azure credentials first (missing: " + ", ".join(missing) + ")."
        )
        self.missing = missing


class SubmitFailed(AnalysisError):
    http_status = 502

    def __init__(self, status_code: int, reason: str = "") -> None:
        detail = f"{status_code} {reason}".strip()
        super().__init__(f"Failed to analyze document: API call failed: {detail}")
        self.status_code = status_code


class MissingOperationLocation(AnalysisError):
    http_status = 502

    def __init__(self) -> None:
        super().__init__("Failed to analyze document: No operation location returned from API")


class PollFailed(AnalysisError):
    http_status = 502

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Failed to analyze document: Failed to get results: {status_code}")
        self.status_code = status_code


class AnalysisFailed(AnalysisError):
    http_status = 502

    def __init__(self, detail: str | None = None) -> None:
        message = "Failed to analyze document: Document analysis failed"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class AnalysisTimedOut(AnalysisError):
    http_status = 504

    def __init__(self, attempts: int) -> None:
        super().__init__("Failed to analyze document: Analysis timed out")
        self.attempts = attempts


class NetworkError(AnalysisError):
    http_status = 502

    def __init__(self, detail: str) -> None:
        super().__init__(f"Failed to analyze document: {detail}")
