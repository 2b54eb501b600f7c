"""
Page A (flight details) and Page B (hours breakdown) of a logbook spread.

Each function draws one physical page in a fixed order: headers, the ruled
24-row grid, the flights of the spread, then the footer totals. Both pages of
a spread receive the same brought-forward and cumulative snapshots.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from engine.totals import (
    INSTRUMENT_BUCKETS,
    MULTI_ENGINE_BUCKETS,
    SINGLE_ENGINE_BUCKETS,
    CategoryTotals,
)
from models import CustomFieldDefinition, FlightRecord

from .format_utils import format_date, format_hours_cell, format_hours_footer, format_year, truncate
from .logbook_geometry import DividerTier, GridDescriptor, LogbookGeometry, LogbookLayout
from .svg_canvas import SvgCanvas

DETAILS_MAX_CHARS = 60
TEXT_OFFSET = 4.0
NO_FLIGHTS_MESSAGE = "No flights to export"

PAGE_B_FIXED_LABELS = (
    "DUAL", "PIC", "DUAL", "PIC",
    "DUAL", "PIC", "CO-PILOT", "COMM'D\nPRACTICE",
    "DUAL", "PIC", "CO-PILOT", "COMM'D\nPRACTICE",
    "ACTUAL", "SIMULATED", "GROUND",
)


@dataclass
class LogbookPage:
    svg: str
    kind: str
    label: str
    spread_no: int = 0


def page_label(spread_no: int, side: str, total_spreads: int) -> str:
    return f"Page {spread_no}{side} of {total_spreads}"


def _draw_grid(canvas: SvgCanvas, grid: GridDescriptor, left: float, right: float, shade_color: str) -> None:
    # Shading first so the rules stay on top.
    for i in grid.shaded_rows():
        canvas.rect(
            left,
            grid.row_top(i) - grid.rule_offset,
            right - left,
            grid.row_height,
            fill=shade_color,
            css_class="row-shade",
        )
    for y in grid.boundaries():
        canvas.line(left, y, right, y, width=0.5, css_class="row-rule")


def _draw_page_number(canvas: SvgCanvas, layout: LogbookLayout, label: str) -> None:
    canvas.text(
        label,
        layout.content_right - 80,
        layout.page_height - layout.margin_bottom,
        width=80,
        size=9,
        align="right",
        css_class="page-label",
    )


def draw_page_a(
    flights: Sequence[FlightRecord],
    geometry: LogbookGeometry,
    cumulative: CategoryTotals,
    *,
    spread_no: int,
    total_spreads: int,
) -> LogbookPage:
    layout = geometry.layout
    cols = geometry.page_a
    canvas = SvgCanvas(layout.page_width, layout.page_height, layout.font_family)
    left, right = cols.table_left, cols.table_right
    top = layout.margin_top

    year = format_year(flights[0].flight_date) if flights else ""
    canvas.text("Year", left, top, size=13, bold=True)
    canvas.text(year, left, top + 15, size=15, bold=True, css_class="year")

    main_y = top + 20
    type_col, reg_col = cols.column("type"), cols.column("registration")
    canvas.text("Aircraft", type_col.x, main_y, width=type_col.width + reg_col.width, size=11, bold=True, align="center")
    for key, label in (("pic", "Pilot in Command"), ("copilot", "Co-pilot or Student"), ("details", "Details of Flight")):
        col = cols.column(key)
        canvas.text(label, col.x, main_y, width=col.width, size=11, bold=True, align="center", css_class="group-label")

    label_y = top + 35
    for key, label in (("date", "Date"), ("type", "Type"), ("registration", "Reg'n")):
        col = cols.column(key)
        canvas.text(label, col.x + 2, label_y, width=col.width - 4, size=9, bold=True, css_class="column-label")

    table_top = label_y + 15
    canvas.line(left, table_top, right, table_top, width=1, css_class="header-rule")
    canvas.text(
        "Totals brought forward",
        right - 200,
        table_top + 5,
        width=200,
        size=9,
        italic=True,
        align="right",
        css_class="brought-forward-label",
    )

    grid = layout.grid(table_top + 5 + layout.row_height)
    _draw_grid(canvas, grid, left, right, layout.shade_color)

    # Outer, PIC, co-pilot and details dividers run up into the group header;
    # date/type/registration dividers stop at the table top under "Aircraft".
    header_row_y = top + 15
    for index, x in enumerate(cols.positions):
        start_y = header_row_y if index >= 3 else table_top
        canvas.line(x, start_y, x, grid.last_rule, width=0.5, css_class="column-rule")

    for index, flight in enumerate(flights[: grid.rows]):
        text_y = grid.row_top(index) + TEXT_OFFSET
        canvas.begin_group("flight-row", row=index + 1)
        values = (
            ("date", format_date(flight.flight_date)),
            ("type", flight.aircraft_type),
            ("registration", flight.registration),
            ("pic", flight.pilot_in_command),
            ("copilot", flight.copilot_student),
            ("details", truncate(flight.flight_details, DETAILS_MAX_CHARS)),
        )
        for key, value in values:
            col = cols.column(key)
            canvas.text(value, col.x + 2, text_y, width=col.width - 4, size=9, css_class=f"cell-{key}")
        canvas.end_group()

    y = grid.bottom + 2
    canvas.line(left, y, right, y, width=1, css_class="totals-rule")
    y += 10

    canvas.text("Total flight experience:", left, y, size=10)
    totals_x = left + 200
    rows = (
        ("Aeroplane", cumulative.aeroplane_total, 70, "total-aeroplane", False),
        ("Helicopter", cumulative.helicopter_total, 70, "total-helicopter", False),
        ("Simulator (not in total)", cumulative.simulator_total, 120, "total-simulator", False),
        ("Grand Total", cumulative.grand_total, 70, "total-grand", True),
    )
    first_y = y
    for offset, (label, hours, value_dx, css, bold_label) in enumerate(rows):
        row_y = first_y + offset * 12
        canvas.text(label, totals_x, row_y, size=10, bold=bold_label)
        canvas.text(format_hours_footer(hours), totals_x + value_dx, row_y, size=10, bold=True, css_class=css)
    grand_y = first_y + 3 * 12

    cert_x = totals_x + 180
    canvas.text("Entries certified correct", cert_x, grand_y - 36, size=9, css_class="certification")
    canvas.text("Signature ______________________", cert_x, grand_y - 16, size=9)
    canvas.text("Date ________________", cert_x + 220, grand_y - 16, size=9)

    label = page_label(spread_no, "a", total_spreads)
    _draw_page_number(canvas, layout, label)
    return LogbookPage(svg=canvas.to_svg(), kind="page_a", label=label, spread_no=spread_no)


def page_b_column_labels(custom_fields: Sequence[CustomFieldDefinition]) -> List[str]:
    return [*PAGE_B_FIXED_LABELS, *(cf.label.upper() for cf in custom_fields)]


def flight_hours_cells(flight: FlightRecord, custom_fields: Sequence[CustomFieldDefinition]) -> List[str]:
    """Page B data cells; engine-type columns are blank unless the flight used that engine type."""
    cells = [
        format_hours_cell(flight.hours(source)) if flight.is_single_engine else ""
        for _, source in SINGLE_ENGINE_BUCKETS
    ]
    cells.extend(
        format_hours_cell(flight.hours(source)) if flight.is_multi_engine else ""
        for _, source in MULTI_ENGINE_BUCKETS
    )
    cells.extend(format_hours_cell(flight.hours(source)) for _, source in INSTRUMENT_BUCKETS)
    cells.extend(format_hours_cell(flight.custom_value(cf.id)) for cf in custom_fields)
    return cells


def _draw_column_index(canvas: SvgCanvas, geometry: LogbookGeometry, y: float, size: float) -> None:
    cols = geometry.page_b
    for i in range(cols.total_columns):
        canvas.text(
            str(i + 1),
            cols.column_x(i),
            y,
            width=cols.column_width,
            size=size,
            align="center",
            css_class="column-index",
        )


def draw_page_b(
    flights: Sequence[FlightRecord],
    geometry: LogbookGeometry,
    brought_forward: CategoryTotals,
    cumulative: CategoryTotals,
    custom_fields: Sequence[CustomFieldDefinition],
    *,
    spread_no: int,
    total_spreads: int,
) -> LogbookPage:
    layout = geometry.layout
    cols = geometry.page_b
    fields = list(custom_fields)[: cols.custom_columns]
    canvas = SvgCanvas(layout.page_width, layout.page_height, layout.font_family)
    left, right = cols.left, cols.table_right
    top = layout.margin_top

    for group in cols.sections:
        canvas.text(
            group.label,
            cols.column_x(group.start),
            top,
            width=cols.span_width(group.span),
            size=9,
            bold=True,
            align="center",
            css_class="section-label",
        )
    for group in cols.day_night:
        canvas.text(
            group.label,
            cols.column_x(group.start),
            top + 12,
            width=cols.span_width(group.span),
            size=8,
            bold=True,
            align="center",
            css_class="sub-section-label",
        )

    label_y = top + 24
    for i, label in enumerate(page_b_column_labels(fields)):
        lines = label.split("\n")
        # Two-line labels start a little higher to stay inside the header band.
        line_y = label_y - 3 if len(lines) > 1 else label_y
        for line in lines:
            canvas.text(
                line,
                cols.column_x(i),
                line_y,
                width=cols.column_width,
                size=7,
                bold=True,
                align="center",
                css_class="column-label",
            )
            line_y += 8

    _draw_column_index(canvas, geometry, label_y + 15, size=8)

    table_top = label_y + 27
    canvas.line(left, table_top, right, table_top, width=1, css_class="header-rule")

    bf_y = table_top + 3
    for i, hours in enumerate(brought_forward.hours_columns(fields)):
        canvas.text(
            format_hours_cell(hours),
            cols.column_x(i),
            bf_y + TEXT_OFFSET,
            width=cols.column_width,
            size=8,
            align="center",
            css_class="brought-forward",
        )

    grid = layout.grid(bf_y + layout.row_height)
    _draw_grid(canvas, grid, left, right, layout.shade_color)

    tier_start = {
        DividerTier.SECTION: top + 10,
        DividerTier.DAY_NIGHT: top + 22,
        DividerTier.COLUMN: top + 34,
    }
    for x, tier in zip(cols.positions, cols.divider_tiers):
        canvas.line(x, tier_start[tier], x, grid.last_rule, width=0.5, css_class=f"column-rule {tier.value}")

    for index, flight in enumerate(flights[: grid.rows]):
        text_y = grid.row_top(index) + TEXT_OFFSET
        canvas.begin_group("flight-row", row=index + 1)
        for i, cell in enumerate(flight_hours_cells(flight, fields)):
            canvas.text(
                cell,
                cols.column_x(i),
                text_y,
                width=cols.column_width,
                size=8,
                align="center",
                css_class=f"cell-{i + 1}",
            )
        canvas.end_group()

    y = grid.bottom + 2
    canvas.line(left, y, right, y, width=1, css_class="totals-rule")
    y += 5
    for i, hours in enumerate(cumulative.hours_columns(fields)):
        canvas.text(
            format_hours_footer(hours),
            cols.column_x(i),
            y,
            width=cols.column_width,
            size=7,
            bold=True,
            align="center",
            css_class="cumulative-total",
        )
    _draw_column_index(canvas, geometry, y + 12, size=7)

    label = page_label(spread_no, "b", total_spreads)
    _draw_page_number(canvas, layout, label)
    return LogbookPage(svg=canvas.to_svg(), kind="page_b", label=label, spread_no=spread_no)


def draw_placeholder_page(layout: LogbookLayout, message: str = NO_FLIGHTS_MESSAGE) -> LogbookPage:
    canvas = SvgCanvas(layout.page_width, layout.page_height, layout.font_family)
    canvas.text(message, 100, 100, size=14, css_class="placeholder")
    return LogbookPage(svg=canvas.to_svg(), kind="placeholder", label=message)
