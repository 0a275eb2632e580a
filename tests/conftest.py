"""Shared fakes for the Document Intelligence REST calls."""

from __future__ import annotations

import json
from email.message import Message

import pytest

from docinsight.config import Settings
from docinsight.jobs import AnalysisJob


ENDPOINT = "https://unit-test.cognitiveservices.azure.com/"
API_KEY = "unit-test-key"
OPERATION_URL = "https://unit-test.cognitiveservices.azure.com/formrecognizer/documentModels/prebuilt-document/analyzeResults/abc?api-version=2023-07-31"


class FakeResponse:
    def __init__(self, status: int = 200, headers: dict | None = None, body: bytes = b"") -> None:
        self.status = status
        self.reason = "OK"
        self.headers = Message()
        for k, v in (headers or {}).items():
            self.headers[k] = v
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class ScriptedUrlopen:
    """Replays a fixed list of responses (or exceptions) and records each request."""

    def __init__(self, *steps) -> None:
        self.steps = list(steps)
        self.requests = []

    def __call__(self, req, timeout=None):
        self.requests.append(req)
        if not self.steps:
            raise AssertionError(f"unexpected request to {req.full_url}")
        step = self.steps.pop(0)
        if isinstance(step, BaseException):
            raise step
        return step


def accepted(location: str | None = OPERATION_URL) -> FakeResponse:
    headers = {"Operation-Location": location} if location else {}
    return FakeResponse(status=202, headers=headers)


def status_body(status: str, **extra) -> FakeResponse:
    return FakeResponse(status=200, body=json.dumps({"status": status, **extra}).encode())


@pytest.fixture
def configured_settings() -> Settings:
    return Settings(
        azure_endpoint=ENDPOINT,
        azure_api_key=API_KEY,
        poll_interval_seconds=0,
        max_poll_attempts=30,
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


class FakeClient:
    """Stands in for DocumentIntelligenceClient; ``during`` runs while the job is polling."""

    def __init__(self, payload=None, error=None, during=None):
        self.payload = payload if payload is not None else {}
        self.error = error
        self.during = during
        self.calls = []

    def analyze(self, data, on_status=None):
        self.calls.append(data)
        if on_status is not None:
            on_status(AnalysisJob(status_url="https://status", attempts=1))
        if self.during is not None:
            self.during()
        if self.error is not None:
            raise self.error
        return self.payload
