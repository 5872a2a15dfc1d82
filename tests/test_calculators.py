"""
Unit tests for the distortion, area and quick-tool calculators
"""
import pytest

from services.area_service import MAX_ROWS, AreaRow, AreaSheet, calculate_areas
from services.distortion_service import DEFAULT_TABLE, DistortionEntry, DistortionTable, calculate_distortion
from services.unit_service import dpi_to_lpi, inch_to_mm, lpi_to_dpi, mm_to_inch


def test_seed_table_has_sixteen_entries():
    assert len(DEFAULT_TABLE) == 16
    assert DistortionTable().find(2.54).k == 15.16


def test_distortion_for_2_54mm_plate():
    result = calculate_distortion(1000, 2.54)
    assert result.matched
    assert result.difference == pytest.approx(1.516)
    assert result.coefficient == pytest.approx(98.484)
    assert result.plate_length == pytest.approx(984.84)


def test_distortion_accepts_numeric_strings():
    assert calculate_distortion("1000", "2.54").coefficient == pytest.approx(98.484)


def test_distortion_thickness_match_tolerates_float_noise():
    assert calculate_distortion(500, 0.1 + 0.66).matched


@pytest.mark.parametrize("length,thickness", [
    (1000, 2.55),
    ("abc", 2.54),
    (1000, None),
    (0, 2.54),
    (-10, 2.54),
    ("inf", 2.54),
    ("-inf", 2.54),
    ("nan", 2.54),
    (1000, "nan"),
    (1e-320, 2.54),
])
def test_distortion_without_match_returns_zeros(length, thickness):
    result = calculate_distortion(length, thickness)
    assert not result.matched
    assert (result.coefficient, result.plate_length, result.difference) == (0, 0, 0)


def test_distortion_uses_edited_table():
    table = DistortionTable([DistortionEntry(1.0, 10.0, 0.0)])
    result = calculate_distortion(200, 1.0, table)
    assert result.difference == pytest.approx(5.0)
    assert result.plate_length == pytest.approx(190.0)


def test_distortion_table_editing():
    table = DistortionTable()
    table.add_entry()
    assert len(table) == 17
    assert table.entries[-1] == DistortionEntry(0.0, 0.0, 0.0)

    table.update_entry(16, "thickness", 7.0)
    table.update_entry(16, "k", 43.0)
    assert table.find(7.0).k == 43.0

    with pytest.raises(ValueError):
        table.update_entry(0, "colour", 1)

    table.reset()
    assert len(table) == 16


def test_distortion_table_keeps_last_row():
    table = DistortionTable([DistortionEntry(1.14, 6.06, 1.0821)])
    assert table.remove_entry(0) is False
    assert len(table) == 1


def test_area_clean_and_bleed():
    summary = calculate_areas([
        AreaRow(1, "100", "200", "2"),
        AreaRow(2, "50", "50", "1"),
    ])
    first, second = summary.rows
    assert first.clean_area == pytest.approx(0.04)
    assert first.bleed_area == pytest.approx(112 * 212 / 1_000_000 * 2)
    assert second.bleed_area == pytest.approx(62 * 62 / 1_000_000)
    assert summary.total_clean == pytest.approx(0.0425)


def test_area_blank_cells_count_as_zero():
    row = calculate_areas([AreaRow(1, "", "abc", "1")]).rows[0]
    assert row.clean_area == 0
    assert row.bleed_area == pytest.approx(144 / 1_000_000)


@pytest.mark.parametrize("width", ["nan", "inf", "-inf"])
def test_area_non_finite_cells_count_as_zero(width):
    row = calculate_areas([AreaRow(1, width, "10", "1")]).rows[0]
    assert row.clean_area == 0
    assert row.bleed_area == pytest.approx(12 * 22 / 1_000_000)


def test_area_overflowing_row_counts_as_zero():
    summary = calculate_areas([AreaRow(1, "1e200", "1e200", "1")])
    assert (summary.rows[0].clean_area, summary.rows[0].bleed_area) == (0, 0)
    assert summary.total_clean == 0


def test_area_totals_do_not_overflow():
    rows = [AreaRow(i, "1e154", "1e154", "1e6") for i in (1, 2)]
    summary = calculate_areas(rows)
    assert summary.rows[0].clean_area > 0
    assert summary.total_clean == 0


def test_area_sheet_remove_unknown_row():
    sheet = AreaSheet()
    sheet.add_row()
    assert sheet.remove_row(99) is False
    assert [row.id for row in sheet.rows] == [1, 2]
    assert sheet.remove_row(2) is True
    assert [row.id for row in sheet.rows] == [1]


def test_area_sheet_row_limits():
    sheet = AreaSheet()
    assert sheet.remove_row(1) is False

    for _ in range(MAX_ROWS - 1):
        assert sheet.add_row()
    assert sheet.add_row() is False
    assert [row.id for row in sheet.rows] == list(range(1, MAX_ROWS + 1))

    sheet.remove_row(3)
    sheet.add_row()
    assert sheet.rows[-1].id == MAX_ROWS + 1

    sheet.update_row(1, "width", "10")
    sheet.update_row(1, "height", "10")
    assert sheet.calculate().rows[0].clean_area == pytest.approx(0.0001)

    sheet.clear()
    assert sheet.rows == [AreaRow(1)]


def test_length_conversions():
    assert mm_to_inch(25.4) == 1.0
    assert mm_to_inch("10") == pytest.approx(0.393701)
    assert inch_to_mm(2) == pytest.approx(50.8)
    assert mm_to_inch("") is None


def test_screen_conversions():
    assert lpi_to_dpi(150) == 2400
    assert dpi_to_lpi(2400) == 150.0
    assert dpi_to_lpi(1000) == 62.5
    assert lpi_to_dpi("abc") is None


@pytest.mark.parametrize("convert", [mm_to_inch, inch_to_mm, lpi_to_dpi, dpi_to_lpi])
@pytest.mark.parametrize("value", ["inf", "-inf", "nan", float("inf")])
def test_conversions_reject_non_finite(convert, value):
    assert convert(value) is None


def test_conversions_reject_overflow():
    assert inch_to_mm(1e308) is None
    assert lpi_to_dpi(1e308) is None
