from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from backend directory so ALLOWED_ORIGINS etc. are available
load_dotenv(Path(__file__).resolve().parent / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from cache.disk_cache import get_cached_logbook, set_cached_logbook
from models import LogbookExportRequest
from reporting.logbook_builder import (
    LogbookInputError,
    build_logbook_html,
    generate_logbook,
    html_to_pdf,
    logbook_filename,
    parse_field_ids,
    select_custom_fields,
)

# Version for /health (Render sets RENDER_GIT_COMMIT)
VERSION = (os.environ.get("RENDER_GIT_COMMIT") or "").strip() or "unknown"

_LOG = logging.getLogger("uvicorn.error")

app = FastAPI(title="Logbook Export Backend", version="0.1.0")

# CORS: use ALLOWED_ORIGINS env (comma-separated) if set, else default
_origins_env = os.environ.get("ALLOWED_ORIGINS", "").strip()
if _origins_env:
    ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()]
else:
    ALLOWED_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Logbook-Pages", "X-Request-Id"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        _LOG.info(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.0f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestLogMiddleware)


@app.on_event("startup")
def startup_log() -> None:
    _LOG.info("Logbook backend starting version=%s origins=%s", VERSION, ",".join(ALLOWED_ORIGINS))


@app.get("/health")
def health():
    return {"status": "ok", "version": VERSION}


@app.get("/health/pdf")
def health_pdf():
    """
    Runtime check for Playwright PDF dependencies.
    Returns 200 only when Chromium can launch successfully.
    """
    try:
        from playwright.sync_api import sync_playwright
    except ImportError:
        raise HTTPException(status_code=503, detail="Playwright is not installed.")

    try:
        with sync_playwright() as p:
            browser = p.chromium.launch()
            page = browser.new_page()
            page.set_content("<html><body>ok</body></html>")
            browser.close()
    except Exception as e:
        msg = str(e)[:500]
        raise HTTPException(
            status_code=503,
            detail=f"Playwright runtime unavailable: {msg}",
        ) from e

    return {"status": "ok", "pdf_runtime": "ready"}


def _export_inputs(req: LogbookExportRequest, fields: Optional[str]):
    selected_ids = parse_field_ids(fields) if fields else None
    try:
        custom_fields = select_custom_fields(req.custom_fields, selected_ids)
    except LogbookInputError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return req.flights, custom_fields


@app.post("/logbook/preview", response_class=HTMLResponse)
def logbook_preview(req: LogbookExportRequest, fields: Optional[str] = None) -> HTMLResponse:
    """
    Return the logbook as print HTML (no Playwright required).
    `fields` optionally selects custom field ids (comma-separated, at most 3).
    """
    flights, custom_fields = _export_inputs(req, fields)
    try:
        document = generate_logbook(flights, custom_fields)
    except LogbookInputError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return HTMLResponse(build_logbook_html(document), headers={"X-Logbook-Pages": str(len(document.pages))})


@app.post("/logbook/pdf")
def logbook_pdf(req: LogbookExportRequest, fields: Optional[str] = None) -> Response:
    """
    Render the logbook PDF: Page A + Page B per 24 flights, totals carried forward.
    Flights must already be in chronological order. Uses the disk cache when the
    same flights and custom fields were rendered before.
    """
    flights, custom_fields = _export_inputs(req, fields)
    if not flights:
        raise HTTPException(status_code=404, detail="No flights to export")

    try:
        document = generate_logbook(flights, custom_fields)
    except LogbookInputError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    headers = {
        "Content-Disposition": f'attachment; filename="{logbook_filename()}"',
        "X-Logbook-Pages": str(len(document.pages)),
    }
    cache_payload = {
        "flights": [f.model_dump(mode="json") for f in flights],
        "custom_fields": [cf.model_dump(mode="json") for cf in custom_fields],
    }
    cached_pdf = get_cached_logbook(cache_payload)
    if cached_pdf is not None:
        _LOG.info("[logbook] cache hit pages=%d", len(document.pages))
        return Response(content=cached_pdf, media_type="application/pdf", headers=headers)

    try:
        pdf_bytes = html_to_pdf(build_logbook_html(document))
    except ImportError:
        raise HTTPException(
            status_code=503,
            detail="Playwright is required for PDF. Install: pip install playwright && playwright install chromium. Use POST /logbook/preview for HTML without Playwright.",
        )
    except Exception as e:
        _LOG.exception("[logbook] PDF generation failed: %s", e)
        raise HTTPException(
            status_code=503,
            detail="PDF generation runtime unavailable. Use POST /logbook/preview to get HTML instead.",
        ) from e

    set_cached_logbook(cache_payload, pdf_bytes)
    return Response(content=pdf_bytes, media_type="application/pdf", headers=headers)
