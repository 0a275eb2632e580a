from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from pydantic import ValidationError

from .client import DocumentIntelligenceClient
from .config import Settings, ensure_configured
from .errors import AnalysisError, AnalysisFailed, AnalysisInProgress, NoFileSelected
from .jobs import BUSY_STATUSES, AnalysisJob, PageStatus, SelectedFile
from .render import RenderedResult, render_result
from .validation import validate_file


logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Failed to analyze document: unexpected error"


@dataclass(frozen=True)
class PageState:
    status: PageStatus
    file: SelectedFile | None
    attempts: int
    error: str | None
    result: RenderedResult | None

    @property
    def busy(self) -> bool:
        return self.status in BUSY_STATUSES


class PageController:
    """
    Owns the current selection and the currently displayed result or error.

    Each selection or analysis bumps a generation counter. A poll loop that
    belongs to an older generation keeps running until it terminates on its
    own, but whatever it produces is dropped instead of reaching the page.
    """

    def __init__(self, settings: Settings, client: DocumentIntelligenceClient | None = None) -> None:
        self._settings = settings
        self._client = client
        self._lock = threading.Lock()
        self._generation = 0
        self._status: PageStatus = "idle"
        self._file: SelectedFile | None = None
        self._attempts = 0
        self._error: str | None = None
        self._result: RenderedResult | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def snapshot(self) -> PageState:
        with self._lock:
            return PageState(
                status=self._status,
                file=self._file,
                attempts=self._attempts,
                error=self._error,
                result=self._result,
            )

    def select_file(self, name: str, size_bytes: int, mime_type: str | None, data: bytes = b"") -> SelectedFile:
        with self._lock:
            # Abandon whatever job was running for the previous selection.
            self._generation += 1
            self._error = None
            self._result = None
            self._attempts = 0
            try:
                selected = validate_file(
                    name, size_bytes, mime_type, data, max_bytes=self._settings.max_upload_bytes
                )
            except AnalysisError as e:
                self._file = None
                self._status = "idle"
                self._error = e.message
                logger.info("selection rejected name=%s reason=%s", name, type(e).__name__)
                raise
            self._file = selected
            self._status = "file_selected"
        logger.info("selection accepted name=%s bytes=%d type=%s", name, size_bytes, selected.mime_type)
        return selected

    def analyze(self) -> RenderedResult:
        with self._lock:
            if self._file is None:
                err = NoFileSelected()
                self._error = err.message
                raise err
            if self._status in BUSY_STATUSES:
                raise AnalysisInProgress()
            self._generation += 1
            generation = self._generation
            selected = self._file
            self._status = "submitting"
            self._attempts = 0
            self._error = None
            self._result = None

        try:
            ensure_configured(self._settings)
            client = self._client or DocumentIntelligenceClient.from_settings(self._settings)
            payload = client.analyze(selected.data, on_status=lambda job: self._on_status(generation, job))
            try:
                rendered = render_result(payload)
            except ValidationError as e:
                raise AnalysisFailed("unexpected result format") from e
        except AnalysisError as e:
            self._finish(generation, error=e.message)
            raise
        except Exception:
            logger.exception("analysis crashed generation=%d", generation)
            self._finish(generation, error=UNEXPECTED_ERROR_MESSAGE)
            raise

        self._finish(generation, result=rendered)
        return rendered

    def _on_status(self, generation: int, job: AnalysisJob) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._status = "polling"
            self._attempts = job.attempts

    def _finish(self, generation: int, *, result: RenderedResult | None = None, error: str | None = None) -> None:
        with self._lock:
            if generation != self._generation:
                logger.info("discarding outcome of abandoned analysis generation=%d", generation)
                return
            if error is not None:
                self._status = "error"
                self._error = error
            else:
                self._status = "rendered"
                self._result = result
