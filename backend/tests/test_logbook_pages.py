from __future__ import annotations

import re
from datetime import date, timedelta

from engine.totals import CategoryTotals, accumulate
from models import CustomFieldDefinition, FlightRecord
from reporting.logbook_geometry import plan_geometry
from reporting.logbook_pages import (
    draw_page_a,
    draw_page_b,
    draw_placeholder_page,
    flight_hours_cells,
    page_b_column_labels,
)

NVG = CustomFieldDefinition(id="1", label="nvg")


def _flight(i: int, engine: str = "Single Engine", **kw) -> FlightRecord:
    values = dict(
        flight_date=date(2023, 3, 1) + timedelta(days=i),
        aircraft_type="AS350",
        registration=f"ZK-H{i:02d}",
        pilot_in_command="SELF",
        copilot_student="J. Bloggs",
        flight_details="Training circuits",
        aircraft_category="Helicopter",
        engine_type=engine,
        flight_time_hours=1.2,
        day_dual=0.4,
        day_pic=0.8,
        day_sic=0.6,
        day_cmnd_practice=0.2,
        instrument_hours=0.3,
        custom_field_values={"1": 0.7},
    )
    values.update(kw)
    return FlightRecord(**values)


def _page_a(flights, fields=()):
    geometry = plan_geometry(len(fields))
    cumulative = accumulate(flights, CategoryTotals.zero(fields), fields)
    return draw_page_a(flights, geometry, cumulative, spread_no=1, total_spreads=2)


def _page_b(flights, fields=(), brought_forward=None):
    geometry = plan_geometry(len(fields))
    bf = brought_forward or CategoryTotals.zero(fields)
    cumulative = accumulate(flights, bf, fields)
    return draw_page_b(flights, geometry, bf, cumulative, list(fields), spread_no=1, total_spreads=2)


def _row_cells(svg: str, row: int) -> str:
    match = re.search(rf'<g class="flight-row" data-row="{row}">(.*?)</g>', svg)
    assert match, f"row {row} not drawn"
    return match.group(1)


def _texts(svg: str, css_class: str) -> list[str]:
    return re.findall(rf'<text class="{css_class}"[^>]*>([^<]*)</text>', svg)


def test_page_a_full_spread_fills_every_row():
    page = _page_a([_flight(i) for i in range(24)])
    assert page.svg.count('class="flight-row"') == 24
    assert page.svg.count('class="row-rule"') == 25


def test_page_a_partial_spread_still_draws_full_grid():
    page = _page_a([_flight(i) for i in range(5)])
    assert page.svg.count('class="flight-row"') == 5
    assert page.svg.count('class="row-rule"') == 25
    assert page.svg.count('class="row-shade"') == 12


def test_page_a_headers_and_label():
    page = _page_a([_flight(0)])
    for label in ("Aircraft", "Pilot in Command", "Co-pilot or Student", "Details of Flight", "Totals brought forward"):
        assert label in page.svg
    assert "Reg&#x27;n" in page.svg
    assert _texts(page.svg, "year") == ["2023"]
    assert page.label == "Page 1a of 2"
    assert page.kind == "page_a"


def test_page_a_row_content_and_details_truncated():
    details = "Night cross-country with two unplanned diversions and a precautionary landing"
    page = _page_a([_flight(0, flight_details=details)])
    cells = _row_cells(page.svg, 1)
    assert ">Mar-01<" in cells
    assert ">ZK-H00<" in cells
    assert ">J. Bloggs<" in cells
    assert details[:57] + "..." in cells
    assert details not in cells


def test_page_a_footer_totals_show_zero_as_0_0():
    page = _page_a([_flight(i, flight_time_hours=1.5) for i in range(2)])
    assert _texts(page.svg, "total-helicopter") == ["3.0"]
    assert _texts(page.svg, "total-aeroplane") == ["0.0"]
    assert _texts(page.svg, "total-simulator") == ["0.0"]
    assert _texts(page.svg, "total-grand") == ["3.0"]
    assert "Simulator (not in total)" in page.svg
    assert "Entries certified correct" in page.svg


def test_page_a_column_rules_reach_different_heights():
    page = _page_a([_flight(0)])
    rules = re.findall(r'<line class="column-rule" x1="[^"]+" y1="([^"]+)"', page.svg)
    # date/type/registration dividers start at the table top, the rest at the header row
    assert rules == ["90", "90", "90", "55", "55", "55", "55"]


def test_flight_hours_cells_single_engine_leaves_multi_engine_blank():
    cells = flight_hours_cells(_flight(0, engine="Single Engine"), [NVG])
    assert cells[:4] == ["0.4", "0.8", "", ""]
    assert cells[4:12] == [""] * 8
    assert cells[12:15] == ["0.3", "", ""]
    assert cells[15] == "0.7"


def test_flight_hours_cells_multi_engine_leaves_single_engine_blank():
    cells = flight_hours_cells(_flight(0, engine="Multi Engine"), [NVG])
    assert cells[:4] == [""] * 4
    assert cells[4:8] == ["0.4", "0.8", "0.6", "0.2"]
    assert cells[12] == "0.3"
    assert cells[15] == "0.7"


def test_flight_hours_cells_unknown_engine_keeps_instrument_and_custom():
    cells = flight_hours_cells(_flight(0, engine="Rotary"), [NVG])
    assert cells[:12] == [""] * 12
    assert cells[12] == "0.3"
    assert cells[15] == "0.7"


def test_page_b_headers_and_column_index():
    page = _page_b([_flight(0)], [NVG])
    for label in ("SINGLE-ENGINE", "MULTI-ENGINE", "INSTRUMENT", "OTHER", "CO-PILOT", "SIMULATED", "NVG"):
        assert f">{label}<" in page.svg
    assert "COMM&#x27;D" in page.svg and ">PRACTICE<" in page.svg
    index = _texts(page.svg, "column-index")
    assert index == [str(i) for i in range(1, 17)] * 2
    assert page.label == "Page 1b of 2"


def test_page_b_without_custom_fields_has_no_other_group():
    page = _page_b([_flight(0)])
    assert ">OTHER<" not in page.svg
    assert _texts(page.svg, "column-index")[-1] == "15"


def test_page_b_rows_leave_other_engine_columns_blank():
    page = _page_b([_flight(0, engine="Single Engine"), _flight(1, engine="Multi Engine")], [NVG])
    se_row = _row_cells(page.svg, 1)
    me_row = _row_cells(page.svg, 2)
    for col in range(5, 13):
        assert f'class="cell-{col}"' not in se_row
    assert 'class="cell-1"' in se_row
    for col in range(1, 5):
        assert f'class="cell-{col}"' not in me_row
    assert 'class="cell-5"' in me_row
    assert 'class="cell-13"' in se_row and 'class="cell-13"' in me_row
    assert 'class="cell-16"' in se_row and 'class="cell-16"' in me_row


def test_page_b_grid_is_fixed_for_partial_spread():
    page = _page_b([_flight(i) for i in range(5)])
    assert page.svg.count('class="flight-row"') == 5
    assert page.svg.count('class="row-rule"') == 25
    assert page.svg.count('class="row-shade"') == 12


def test_page_b_footer_always_shows_0_0_and_brought_forward_suppresses_zero():
    page = _page_b([_flight(0, engine="Single Engine")], [NVG])
    totals = _texts(page.svg, "cumulative-total")
    assert len(totals) == 16
    assert totals[0] == "0.4"
    assert totals[4] == "0.0"
    assert totals[15] == "0.7"
    # first spread: nothing brought forward, so no values in that row
    assert _texts(page.svg, "brought-forward") == []


def test_page_b_brought_forward_row_shows_previous_snapshot():
    previous = accumulate([_flight(i) for i in range(3)], CategoryTotals.zero([NVG]), [NVG])
    page = _page_b([_flight(10)], [NVG], brought_forward=previous)
    bf = _texts(page.svg, "brought-forward")
    assert "1.2" in bf  # se day dual 3 x 0.4
    assert "2.1" in bf  # NVG 3 x 0.7


def test_page_b_divider_rules_use_three_heights():
    page = _page_b([_flight(0)], [NVG])
    tops = {
        tier: set(re.findall(rf'<line class="column-rule {tier}" x1="[^"]+" y1="([^"]+)"', page.svg))
        for tier in ("section", "day_night", "column")
    }
    assert tops == {"section": {"50"}, "day_night": {"62"}, "column": {"74"}}


def test_page_b_column_labels_upper_case_custom():
    labels = page_b_column_labels([NVG])
    assert len(labels) == 16
    assert labels[-1] == "NVG"


def test_placeholder_page():
    page = draw_placeholder_page(plan_geometry(0).layout)
    assert "No flights to export" in page.svg
    assert page.kind == "placeholder"
