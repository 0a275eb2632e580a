from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


JobStatus = Literal["running", "succeeded", "failed"]

# Page-level lifecycle driven by PageController.
PageStatus = Literal["idle", "file_selected", "submitting", "polling", "rendered", "error"]

BUSY_STATUSES: frozenset[str] = frozenset({"submitting", "polling"})


@dataclass(frozen=True)
class SelectedFile:
    name: str
    size_bytes: int
    mime_type: str
    data: bytes = field(default=b"", repr=False)


@dataclass
class AnalysisJob:
    status_url: str
    status: JobStatus = "running"
    result: dict[str, Any] | None = None
    attempts: int = 0


def job_status_from_remote(remote_status: str | None) -> JobStatus:
    # notStarted, running and anything unknown all mean "keep polling".
    if remote_status == "succeeded":
        return "succeeded"
    if remote_status == "failed":
        return "failed"
    return "running"
