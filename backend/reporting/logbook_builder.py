"""
Logbook PDF builder.

Splits a chronological flight list into 24-row spreads, draws Page A and
Page B for each spread as inline SVG, and prints the resulting HTML to PDF via
Playwright. Totals are folded strictly in spread order: every spread starts
from the previous spread's cumulative snapshot.
"""
from __future__ import annotations

import html
import logging
import os
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from engine.totals import CategoryTotals, fold_spreads
from models import MAX_CUSTOM_FIELDS, CustomFieldDefinition, FlightRecord

from .logbook_geometry import LogbookLayout, plan_geometry
from .logbook_pages import LogbookPage, draw_page_a, draw_page_b, draw_placeholder_page

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Pilot Logbook"
_DEFAULT_PDF_TIMEOUT_MS = 30000


def pdf_timeout_ms(raw: Optional[str] = None) -> int:
    """Playwright set_content timeout; unreadable values fall back to the default."""
    value = os.getenv("LOGBOOK_PDF_TIMEOUT_MS", "") if raw is None else raw
    try:
        return max(1000, int(str(value).strip()))
    except ValueError:
        if str(value).strip():
            logger.warning("[logbook] ignoring LOGBOOK_PDF_TIMEOUT_MS=%r, using %d", value, _DEFAULT_PDF_TIMEOUT_MS)
        return _DEFAULT_PDF_TIMEOUT_MS


_PDF_TIMEOUT_MS = pdf_timeout_ms()


class LogbookInputError(ValueError):
    """Input that cannot be rendered at all (wrong shape), raised before drawing starts."""


@dataclass
class LogbookSpread:
    spread_no: int
    flights: List[FlightRecord]
    brought_forward: CategoryTotals
    cumulative: CategoryTotals


@dataclass
class LogbookDocument:
    layout: LogbookLayout
    custom_fields: List[CustomFieldDefinition]
    pages: List[LogbookPage] = field(default_factory=list)
    spreads: List[LogbookSpread] = field(default_factory=list)
    title: str = DEFAULT_TITLE

    @property
    def total_spreads(self) -> int:
        return len(self.spreads)

    @property
    def final_totals(self) -> CategoryTotals:
        if not self.spreads:
            return CategoryTotals.zero(self.custom_fields)
        return self.spreads[-1].cumulative


def parse_field_ids(raw: Optional[str]) -> List[str]:
    """Comma-separated custom field ids (query-string form), blanks dropped, at most three."""
    if not raw:
        return []
    ids = [part.strip() for part in str(raw).split(",")]
    return [i for i in ids if i][:MAX_CUSTOM_FIELDS]


def select_custom_fields(
    fields: Optional[Iterable[Any]],
    selected_ids: Optional[Sequence[str]] = None,
) -> List[CustomFieldDefinition]:
    """
    Custom fields to render, in the order given. When selected_ids is set only
    those ids are kept. Anything past the third field is dropped with a warning
    rather than rejected.
    """
    out: List[CustomFieldDefinition] = []
    wanted = {str(i) for i in selected_ids} if selected_ids is not None else None
    for item in fields or []:
        try:
            cf = item if isinstance(item, CustomFieldDefinition) else CustomFieldDefinition.model_validate(item)
        except ValidationError as e:
            raise LogbookInputError(f"invalid custom field definition: {item!r}") from e
        if wanted is not None and cf.id not in wanted:
            continue
        if any(existing.id == cf.id for existing in out):
            continue
        out.append(cf)
    if len(out) > MAX_CUSTOM_FIELDS:
        logger.warning(
            "[logbook] %d custom fields supplied, rendering first %d dropped=%s",
            len(out),
            MAX_CUSTOM_FIELDS,
            [cf.id for cf in out[MAX_CUSTOM_FIELDS:]],
        )
    return out[:MAX_CUSTOM_FIELDS]


def _coerce_flights(flights: Any) -> List[FlightRecord]:
    if flights is None:
        raise LogbookInputError("flights must be a list of flight records, got None")
    if isinstance(flights, (str, bytes, Mapping)) or not isinstance(flights, Iterable):
        raise LogbookInputError(f"flights must be a list of flight records, got {type(flights).__name__}")
    out: List[FlightRecord] = []
    for idx, item in enumerate(flights):
        if isinstance(item, FlightRecord):
            out.append(item)
        elif isinstance(item, Mapping):
            try:
                out.append(FlightRecord.model_validate(dict(item)))
            except ValidationError as e:
                raise LogbookInputError(f"flight #{idx + 1} could not be read: {e.error_count()} error(s)") from e
        else:
            raise LogbookInputError(f"flight #{idx + 1} is {type(item).__name__}, expected a mapping")
    return out


def chunk_spreads(flights: Sequence[FlightRecord], rows_per_spread: int) -> List[List[FlightRecord]]:
    size = max(1, rows_per_spread)
    return [list(flights[i : i + size]) for i in range(0, len(flights), size)]


def generate_logbook(
    flights: Any,
    custom_fields: Optional[Iterable[Any]] = None,
    layout: Optional[LogbookLayout] = None,
) -> LogbookDocument:
    records = _coerce_flights(flights)
    fields = select_custom_fields(custom_fields)
    active_layout = layout or LogbookLayout()
    document = LogbookDocument(layout=active_layout, custom_fields=fields)

    if not records:
        document.pages.append(draw_placeholder_page(active_layout))
        logger.info("[logbook] no flights, placeholder page only")
        return document

    geometry = plan_geometry(len(fields), active_layout)
    chunks = chunk_spreads(records, active_layout.rows_per_spread)
    total_spreads = len(chunks)

    # One accumulation per spread, shared by both pages.
    snapshots = fold_spreads(chunks, fields)
    for spread_no, (chunk, (brought_forward, cumulative)) in enumerate(zip(chunks, snapshots), start=1):
        document.spreads.append(
            LogbookSpread(
                spread_no=spread_no,
                flights=chunk,
                brought_forward=brought_forward,
                cumulative=cumulative,
            )
        )
        document.pages.append(
            draw_page_a(chunk, geometry, cumulative, spread_no=spread_no, total_spreads=total_spreads)
        )
        document.pages.append(
            draw_page_b(
                chunk,
                geometry,
                brought_forward,
                cumulative,
                fields,
                spread_no=spread_no,
                total_spreads=total_spreads,
            )
        )

    logger.info(
        "[logbook] flights=%d spreads=%d pages=%d custom_fields=%d",
        len(records),
        total_spreads,
        len(document.pages),
        len(fields),
    )
    return document


def _logbook_css(layout: LogbookLayout) -> str:
    return f"""
    @page {{ size: {layout.page_width}pt {layout.page_height}pt; margin: 0; }}
    html, body {{ margin: 0; padding: 0; background: #fff; }}
    .logbook-page {{
      width: {layout.page_width}pt;
      height: {layout.page_height}pt;
      overflow: hidden;
      break-after: page;
      page-break-after: always;
    }}
    .logbook-page svg {{ display: block; }}
    @media print {{
      .logbook-page:last-child {{ break-after: auto; page-break-after: auto; }}
    }}
    """


def build_logbook_html(document: LogbookDocument) -> str:
    sections = "".join(
        f'<section class="logbook-page" data-kind="{html.escape(page.kind)}" '
        f'data-label="{html.escape(page.label, quote=True)}">{page.svg}</section>'
        for page in document.pages
    )
    return f"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>{html.escape(document.title)}</title>
  <style>{_logbook_css(document.layout)}</style>
</head>
<body>
  {sections}
</body>
</html>
    """.strip()


def html_to_pdf(html_content: str) -> bytes:
    """Print logbook HTML with Chromium; page size comes from the CSS @page rule."""
    from playwright.sync_api import sync_playwright

    with sync_playwright() as p:
        browser = p.chromium.launch()
        try:
            page = browser.new_page()
            page.set_content(html_content, wait_until="load", timeout=_PDF_TIMEOUT_MS)
            page.emulate_media(media="print")
            pdf_bytes = page.pdf(
                print_background=True,
                prefer_css_page_size=True,
                margin={"top": "0in", "bottom": "0in", "left": "0in", "right": "0in"},
            )
        finally:
            browser.close()
    return pdf_bytes


def render_logbook_pdf(
    flights: Any,
    custom_fields: Optional[Iterable[Any]] = None,
    layout: Optional[LogbookLayout] = None,
) -> bytes:
    start = time.perf_counter()
    document = generate_logbook(flights, custom_fields, layout=layout)
    pdf_bytes = html_to_pdf(build_logbook_html(document))
    logger.info(
        "[logbook] PDF render duration=%.2fs pages=%d bytes=%d",
        time.perf_counter() - start,
        len(document.pages),
        len(pdf_bytes),
    )
    return pdf_bytes


def logbook_filename(today: Optional[date] = None) -> str:
    return f"logbook-{(today or date.today()).isoformat()}.pdf"
