from __future__ import annotations

import http.client
import json
import logging
import time
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from pydantic import ValidationError

from .config import Settings, ensure_configured, is_http_url
from .errors import (
    AnalysisFailed,
    AnalysisTimedOut,
    MissingOperationLocation,
    NetworkError,
    PollFailed,
    SubmitFailed,
)
from .jobs import AnalysisJob, job_status_from_remote
from .models import OperationStatus


logger = logging.getLogger(__name__)

StatusCallback = Callable[[AnalysisJob], None]

_TRANSPORT_ERRORS = (URLError, OSError, http.client.HTTPException)


class DocumentIntelligenceClient:
    """
    Minimal REST client for the Document Intelligence analyze operation.

    One POST starts the job; the Operation-Location it returns is then polled
    at a fixed interval until the job is terminal or the attempt budget is
    spent. Nothing is retried: every non-2xx answer ends the attempt.
    """

    def __init__(
        self,
        *,
        endpoint: str,
        api_key: str,
        model_id: str = "prebuilt-document",
        api_version: str = "2023-07-31",
        poll_interval_seconds: float = 2.0,
        max_poll_attempts: int = 30,
        timeout_seconds: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.model_id = model_id
        self.api_version = api_version
        self.poll_interval_seconds = poll_interval_seconds
        self.max_poll_attempts = max_poll_attempts
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep

    @classmethod
    def from_settings(cls, cfg: Settings, **kwargs: Any) -> "DocumentIntelligenceClient":
        ensure_configured(cfg)
        return cls(
            endpoint=cfg.azure_endpoint,
            api_key=cfg.azure_api_key,
            model_id=cfg.model_id,
            api_version=cfg.api_version,
            poll_interval_seconds=cfg.poll_interval_seconds,
            max_poll_attempts=cfg.max_poll_attempts,
            timeout_seconds=cfg.request_timeout_seconds,
            **kwargs,
        )

    @property
    def analyze_url(self) -> str:
        model = quote(self.model_id, safe="-_.")
        return (
            f"{self.endpoint}/formrecognizer/documentModels/{model}:analyze"
            f"?api-version={quote(self.api_version, safe='-')}"
        )

    def submit(self, data: bytes) -> AnalysisJob:
        logger.info("submit model=%s bytes=%d", self.model_id, len(data))
        try:
            req = Request(
                self.analyze_url,
                data=data,
                method="POST",
                headers={
                    "Content-Type": "application/octet-stream",
                    "Ocp-Apim-Subscription-Key": self.api_key,
                },
            )
            with urlopen(req, timeout=self.timeout_seconds) as resp:
                status = resp.status
                reason = getattr(resp, "reason", "") or ""
                operation_location = resp.headers.get("Operation-Location")
        except HTTPError as e:
            logger.warning("submit failed status=%s", e.code)
            raise SubmitFailed(e.code, str(e.reason or "")) from e
        except ValueError as e:
            # urllib rejects endpoints without an http(s) scheme.
            raise NetworkError(f"invalid endpoint URL: {e}") from e
        except _TRANSPORT_ERRORS as e:
            logger.warning("submit transport error: %s", e)
            raise NetworkError(f"{type(e).__name__}: {e}") from e

        if not 200 <= status < 300:
            raise SubmitFailed(status, reason)
        if not operation_location:
            raise MissingOperationLocation()
        if not is_http_url(operation_location):
            logger.warning("submit returned unusable operation location=%r", operation_location)
            raise MissingOperationLocation()

        logger.info("submit accepted status=%s", status)
        return AnalysisJob(status_url=operation_location)

    def _fetch_status(self, job: AnalysisJob) -> OperationStatus:
        try:
            req = Request(job.status_url, method="GET", headers={"Ocp-Apim-Subscription-Key": self.api_key})
            with urlopen(req, timeout=self.timeout_seconds) as resp:
                status = resp.status
                body = resp.read()
        except HTTPError as e:
            raise PollFailed(e.code) from e
        except ValueError as e:
            raise NetworkError(f"invalid status URL: {e}") from e
        except _TRANSPORT_ERRORS as e:
            raise NetworkError(f"{type(e).__name__}: {e}") from e

        if not 200 <= status < 300:
            raise PollFailed(status)
        try:
            return OperationStatus.model_validate(json.loads(body))
        except (ValueError, ValidationError) as e:
            raise AnalysisFailed("unreadable status response") from e

    def poll(self, job: AnalysisJob, on_status: StatusCallback | None = None) -> dict[str, Any]:
        while job.attempts < self.max_poll_attempts:
            payload = self._fetch_status(job)
            job.attempts += 1
            job.status = job_status_from_remote(payload.status)
            logger.debug("poll attempt=%d status=%s", job.attempts, payload.status)

            if job.status == "succeeded":
                job.result = payload.analyzeResult or {}
            if on_status is not None:
                on_status(job)

            if job.status == "succeeded":
                logger.info("analysis succeeded after attempts=%d", job.attempts)
                return job.result
            if job.status == "failed":
                detail = payload.error.message if payload.error else None
                logger.warning("analysis failed attempt=%d detail=%s", job.attempts, detail)
                raise AnalysisFailed(detail)

            if job.attempts < self.max_poll_attempts:
                self._sleep(self.poll_interval_seconds)

        logger.warning("analysis timed out after attempts=%d", job.attempts)
        raise AnalysisTimedOut(job.attempts)

    def analyze(self, data: bytes, on_status: StatusCallback | None = None) -> dict[str, Any]:
        job = self.submit(data)
        if on_status is not None:
            on_status(job)
        return self.poll(job, on_status=on_status)
