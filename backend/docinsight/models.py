from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# Remote payloads (Document Intelligence REST API). Only the fields we render
# are declared; everything else the service sends is kept but ignored.


class DocumentElement(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: str | None = None


class DocumentKeyValuePair(BaseModel):
    model_config = ConfigDict(extra="allow")

    key: DocumentElement | None = None
    value: DocumentElement | None = None


class AnalyzeResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    keyValuePairs: list[DocumentKeyValuePair] | None = None
    content: str | None = None


class ServiceError(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: str | None = None
    message: str | None = None


class OperationStatus(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str | None = None
    analyzeResult: dict[str, Any] | None = None
    error: ServiceError | None = None


# Service API


class FilePreviewResponse(BaseModel):
    name: str
    sizeBytes: int
    sizeLabel: str
    mimeType: str


class KeyValueResponse(BaseModel):
    key: str
    value: str


class AnalyzeResponse(BaseModel):
    keyValuePairs: list[KeyValueResponse] = Field(default_factory=list)
    content: str | None = None
    html: str = ""


class PageStateResponse(BaseModel):
    status: str
    busy: bool
    file: FilePreviewResponse | None = None
    attempts: int = 0
    error: str | None = None
    result: AnalyzeResponse | None = None
