"""
Fixed page geometry for the two-page logbook spread.

All measurements are PDF points (1/72 in). Geometry is planned once per
document from a LogbookLayout value object and shared by every spread.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from models import MAX_CUSTOM_FIELDS

# Page B: 4 single-engine + 8 multi-engine + 3 instrument columns
SINGLE_ENGINE_COLUMNS = 4
MULTI_ENGINE_COLUMNS = 8
INSTRUMENT_COLUMNS = 3
FIXED_HOURS_COLUMNS = SINGLE_ENGINE_COLUMNS + MULTI_ENGINE_COLUMNS + INSTRUMENT_COLUMNS


def _default_page_a_widths() -> Dict[str, float]:
    return {"date": 55.0, "type": 50.0, "registration": 60.0, "pic": 95.0, "copilot": 95.0}


@dataclass(frozen=True)
class LogbookLayout:
    page_width: float = 841.89
    page_height: float = 595.28
    margin_top: float = 40.0
    margin_bottom: float = 40.0
    margin_left: float = 50.0
    margin_right: float = 50.0
    row_height: float = 17.0
    rows_per_spread: int = 24
    page_a_widths: Dict[str, float] = field(default_factory=_default_page_a_widths)
    hours_column_width: float = 43.0
    shade_color: str = "#f0f0f0"
    font_family: str = "Helvetica, Arial, sans-serif"

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_right(self) -> float:
        return self.page_width - self.margin_right

    def grid(self, top: float) -> "GridDescriptor":
        return GridDescriptor(top=top, rows=self.rows_per_spread, row_height=self.row_height)


@dataclass(frozen=True)
class GridDescriptor:
    """
    The ruled data area of a page: always `rows` rows, however many flights
    the spread holds. `top` is where the first row's text band starts; rules
    sit 3pt above each band.
    """
    top: float
    rows: int
    row_height: float
    rule_offset: float = 3.0

    def row_top(self, index: int) -> float:
        return self.top + index * self.row_height

    def boundaries(self) -> List[float]:
        return [self.row_top(i) - self.rule_offset for i in range(self.rows + 1)]

    def shaded_rows(self) -> List[int]:
        return [i for i in range(self.rows) if i % 2 == 1]

    @property
    def bottom(self) -> float:
        return self.row_top(self.rows)

    @property
    def last_rule(self) -> float:
        return self.bottom - self.rule_offset


@dataclass(frozen=True)
class ColumnSpan:
    key: str
    x: float
    width: float

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class PageAGeometry:
    columns: Tuple[ColumnSpan, ...]
    positions: Tuple[float, ...]

    def column(self, key: str) -> ColumnSpan:
        for col in self.columns:
            if col.key == key:
                return col
        raise KeyError(key)

    @property
    def table_left(self) -> float:
        return self.positions[0]

    @property
    def table_right(self) -> float:
        return self.positions[-1]


class DividerTier(str, Enum):
    SECTION = "section"
    DAY_NIGHT = "day_night"
    COLUMN = "column"


@dataclass(frozen=True)
class HeaderGroup:
    label: str
    start: int
    span: int


@dataclass(frozen=True)
class PageBGeometry:
    left: float
    column_width: float
    custom_columns: int
    positions: Tuple[float, ...]
    divider_tiers: Tuple[DividerTier, ...]
    sections: Tuple[HeaderGroup, ...]
    day_night: Tuple[HeaderGroup, ...]

    @property
    def total_columns(self) -> int:
        return FIXED_HOURS_COLUMNS + self.custom_columns

    @property
    def table_right(self) -> float:
        return self.positions[-1]

    @property
    def table_width(self) -> float:
        return self.column_width * self.total_columns

    def column_x(self, index: int) -> float:
        return self.left + index * self.column_width

    def span_width(self, span: int) -> float:
        return self.column_width * span


@dataclass(frozen=True)
class LogbookGeometry:
    layout: LogbookLayout
    page_a: PageAGeometry
    page_b: PageBGeometry


def _plan_page_a(layout: LogbookLayout) -> PageAGeometry:
    widths = dict(layout.page_a_widths)
    fixed = sum(widths.get(key, 0.0) for key in ("date", "type", "registration", "pic", "copilot"))
    widths["details"] = max(0.0, layout.content_width - fixed)

    columns: List[ColumnSpan] = []
    x = layout.margin_left
    for key in ("date", "type", "registration", "pic", "copilot", "details"):
        columns.append(ColumnSpan(key=key, x=x, width=widths.get(key, 0.0)))
        x += widths.get(key, 0.0)
    positions = tuple([layout.margin_left, *(col.right for col in columns)])
    return PageAGeometry(columns=tuple(columns), positions=positions)


def _divider_tier(index: int, total_columns: int) -> DividerTier:
    section_edges = {
        0,
        SINGLE_ENGINE_COLUMNS,
        SINGLE_ENGINE_COLUMNS + MULTI_ENGINE_COLUMNS,
        FIXED_HOURS_COLUMNS,
        total_columns,
    }
    if index in section_edges:
        return DividerTier.SECTION
    if index in (SINGLE_ENGINE_COLUMNS // 2, SINGLE_ENGINE_COLUMNS + MULTI_ENGINE_COLUMNS // 2):
        return DividerTier.DAY_NIGHT
    return DividerTier.COLUMN


def _plan_page_b(layout: LogbookLayout, custom_field_count: int) -> PageBGeometry:
    custom_columns = min(max(0, int(custom_field_count)), MAX_CUSTOM_FIELDS)
    total_columns = FIXED_HOURS_COLUMNS + custom_columns
    column_width = min(layout.hours_column_width, layout.content_width / total_columns)
    left = layout.margin_left
    positions = tuple(left + i * column_width for i in range(total_columns + 1))
    tiers = tuple(_divider_tier(i, total_columns) for i in range(total_columns + 1))

    sections = [
        HeaderGroup("SINGLE-ENGINE", 0, SINGLE_ENGINE_COLUMNS),
        HeaderGroup("MULTI-ENGINE", SINGLE_ENGINE_COLUMNS, MULTI_ENGINE_COLUMNS),
        HeaderGroup("INSTRUMENT", SINGLE_ENGINE_COLUMNS + MULTI_ENGINE_COLUMNS, INSTRUMENT_COLUMNS),
    ]
    if custom_columns:
        sections.append(HeaderGroup("OTHER", FIXED_HOURS_COLUMNS, custom_columns))

    half_se = SINGLE_ENGINE_COLUMNS // 2
    half_me = MULTI_ENGINE_COLUMNS // 2
    day_night = (
        HeaderGroup("DAY", 0, half_se),
        HeaderGroup("NIGHT", half_se, half_se),
        HeaderGroup("DAY", SINGLE_ENGINE_COLUMNS, half_me),
        HeaderGroup("NIGHT", SINGLE_ENGINE_COLUMNS + half_me, half_me),
        HeaderGroup("FLIGHT", SINGLE_ENGINE_COLUMNS + MULTI_ENGINE_COLUMNS, INSTRUMENT_COLUMNS),
    )
    return PageBGeometry(
        left=left,
        column_width=column_width,
        custom_columns=custom_columns,
        positions=positions,
        divider_tiers=tiers,
        sections=tuple(sections),
        day_night=day_night,
    )


def plan_geometry(custom_field_count: int = 0, layout: LogbookLayout | None = None) -> LogbookGeometry:
    active = layout or LogbookLayout()
    return LogbookGeometry(
        layout=active,
        page_a=_plan_page_a(active),
        page_b=_plan_page_b(active, custom_field_count),
    )
