from __future__ import annotations

import asyncio
import json
import logging
import os
import sys

import uvicorn
from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, StreamingResponse

from .config import settings
from .controller import PageController, PageState
from .errors import AnalysisError
from .jobs import SelectedFile
from .models import AnalyzeResponse, FilePreviewResponse, PageStateResponse
from .render import RenderedResult
from .validation import format_file_size


logging.basicConfig(stream=sys.stdout, level=logging.DEBUG if settings.debug_logs else logging.INFO)
logger = logging.getLogger(__name__)

_STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")

app = FastAPI(title=settings.api_title)

controller = PageController(settings)


def get_controller() -> PageController:
    return controller


def _preview(selected: SelectedFile) -> FilePreviewResponse:
    return FilePreviewResponse(
        name=selected.name,
        sizeBytes=selected.size_bytes,
        sizeLabel=format_file_size(selected.size_bytes),
        mimeType=selected.mime_type,
    )


def _analyze_response(rendered: RenderedResult) -> AnalyzeResponse:
    return AnalyzeResponse.model_validate(rendered.to_dict())


def _state_response(state: PageState) -> PageStateResponse:
    return PageStateResponse(
        status=state.status,
        busy=state.busy,
        file=_preview(state.file) if state.file else None,
        attempts=state.attempts,
        error=state.error,
        result=_analyze_response(state.result) if state.result else None,
    )


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
    with open(os.path.join(_STATIC_DIR, "index.html"), "r", encoding="utf-8") as f:
        return HTMLResponse(f.read())


@app.post("/v1/selection", response_model=FilePreviewResponse)
async def select_file(
    file: UploadFile = File(...), ctrl: PageController = Depends(get_controller)
) -> FilePreviewResponse:
    # Read one byte past the limit so oversized uploads are still rejected as too large.
    data = await file.read(ctrl.settings.max_upload_bytes + 1)
    try:
        selected = ctrl.select_file(
            name=file.filename or "document",
            size_bytes=len(data),
            mime_type=file.content_type,
            data=data,
        )
    except AnalysisError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message) from e
    return _preview(selected)


@app.post("/v1/analyze", response_model=AnalyzeResponse)
def analyze(ctrl: PageController = Depends(get_controller)) -> AnalyzeResponse:
    # Blocking submit + poll; FastAPI runs sync endpoints in its threadpool.
    try:
        rendered = ctrl.analyze()
    except AnalysisError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message) from e
    return _analyze_response(rendered)


@app.get("/v1/state", response_model=PageStateResponse)
def page_state(ctrl: PageController = Depends(get_controller)) -> PageStateResponse:
    return _state_response(ctrl.snapshot())


@app.get("/v1/state/events")
async def page_state_events(request: Request, ctrl: PageController = Depends(get_controller)) -> StreamingResponse:
    """
    Server-Sent Events (SSE): streams page state while an analysis is running
    and closes once the page is no longer busy.
    """

    async def gen():
        yield "retry: 1000\n\n"

        while True:
            if await request.is_disconnected():
                return

            state = ctrl.snapshot()
            payload = _state_response(state).model_dump()
            yield f"data: {json.dumps(payload)}\n\n"

            if not state.busy:
                return

            await asyncio.sleep(0.5)

    return StreamingResponse(gen(), media_type="text/event-stream")


def run() -> None:
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    run()
