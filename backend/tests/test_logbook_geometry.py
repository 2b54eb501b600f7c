import pytest

from reporting.logbook_geometry import (
    DividerTier,
    LogbookLayout,
    plan_geometry,
)


def test_default_layout_is_a4_landscape():
    layout = LogbookLayout()
    assert (layout.page_width, layout.page_height) == (841.89, 595.28)
    assert (layout.margin_top, layout.margin_bottom, layout.margin_left, layout.margin_right) == (40, 40, 50, 50)
    assert layout.row_height == 17
    assert layout.rows_per_spread == 24
    assert layout.content_width == pytest.approx(741.89)


def test_page_a_details_takes_remaining_width():
    geometry = plan_geometry(0)
    page_a = geometry.page_a
    assert [c.key for c in page_a.columns] == ["date", "type", "registration", "pic", "copilot", "details"]
    assert page_a.column("details").width == pytest.approx(741.89 - 355)
    assert page_a.positions[0] == 50
    assert page_a.positions[-1] == pytest.approx(791.89)
    assert len(page_a.positions) == 7


def test_page_b_fixed_columns_use_nominal_width():
    page_b = plan_geometry(0).page_b
    assert page_b.total_columns == 15
    assert page_b.column_width == 43
    assert len(page_b.positions) == 16
    assert [g.label for g in page_b.sections] == ["SINGLE-ENGINE", "MULTI-ENGINE", "INSTRUMENT"]


def test_page_b_columns_shrink_to_fit_three_custom_fields():
    page_b = plan_geometry(3).page_b
    assert page_b.total_columns == 18
    assert page_b.column_width == pytest.approx(741.89 / 18)
    assert page_b.table_right == pytest.approx(791.89)
    assert page_b.sections[-1].label == "OTHER"
    assert page_b.sections[-1].span == 3


def test_page_b_caps_custom_columns_at_three():
    assert plan_geometry(5).page_b.total_columns == 18
    assert plan_geometry(-2).page_b.total_columns == 15


def test_page_b_divider_tiers():
    tiers = plan_geometry(2).page_b.divider_tiers
    assert len(tiers) == 18
    for i in (0, 4, 12, 15, 17):
        assert tiers[i] == DividerTier.SECTION
    for i in (2, 8):
        assert tiers[i] == DividerTier.DAY_NIGHT
    for i in (1, 3, 5, 6, 7, 9, 10, 11, 13, 14, 16):
        assert tiers[i] == DividerTier.COLUMN


def test_grid_descriptor_always_has_fixed_rows():
    layout = LogbookLayout()
    grid = layout.grid(112)
    assert len(grid.boundaries()) == 25
    assert grid.boundaries()[0] == 109
    assert grid.shaded_rows() == list(range(1, 24, 2))
    assert grid.bottom == 112 + 24 * 17
