"""Tests for the Excel workbook reader and template writer."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from ceisa_bridge.document import HEADER_FIELDS, SHEETS, build_document, sample_document
from ceisa_bridge.exceptions import ValidationError
from ceisa_bridge.spreadsheet import (
    REQUIRED_SHEETS,
    SHEET_COLUMNS,
    default_template_name,
    is_workbook,
    read_workbook,
    write_template,
)

MINIMAL_ROWS = {
    "MainData": [["nomorAju", "kodeKantor"], ["AJU-1", "051000"]],
    "Barang": [["seriBarang", "uraian"], [1, "KOPI"]],
    "Entitas": [["seriEntitas", "namaEntitas"], [1, "PT A"]],
    "Kemasan": [["seriKemasan"], [1]],
    "Kontainer": [["seriKontainer", "nomorKontainer"], [1, "C1"]],
    "Dokumen": [["seriDokumen"], [1]],
    "Pengangkut": [["seriPengangkut"], [1]],
}


def _workbook(path: Path, **overrides) -> Path:
    """Write a workbook with every required sheet; ``None`` leaves a sheet out."""
    sheets = {**MINIMAL_ROWS, **overrides}
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        if rows is None:
            continue
        worksheet = workbook.create_sheet(name)
        for row in rows:
            worksheet.append(row)
    workbook.save(path)
    return path


# ------------------------------------------------------------------ #
# Reading
# ------------------------------------------------------------------ #


class TestReadWorkbook:
    def test_minimal_workbook(self, tmp_path: Path) -> None:
        data = read_workbook(_workbook(tmp_path / "in.xlsx"))
        assert data["MainData"] == {"nomorAju": "AJU-1", "kodeKantor": "051000"}
        assert data["Barang"] == [{"seriBarang": 1, "uraian": "KOPI"}]
        assert data["Kontainer"] == [{"seriKontainer": 1, "nomorKontainer": "C1"}]

    def test_feeds_the_mapper(self, tmp_path: Path) -> None:
        payload = build_document(read_workbook(_workbook(tmp_path / "in.xlsx"))).to_payload()
        assert payload["nomorAju"] == "AJU-1"
        assert payload["barang"][0]["uraian"] == "KOPI"
        assert payload["entitas"][0]["namaEntitas"] == "PT A"

    def test_several_detail_rows(self, tmp_path: Path) -> None:
        rows = [["seriBarang", "uraian"], [1, "KOPI"], [2, "TEH"]]
        data = read_workbook(_workbook(tmp_path / "in.xlsx", Barang=rows))
        assert [row["uraian"] for row in data["Barang"]] == ["KOPI", "TEH"]

    def test_blank_rows_skipped(self, tmp_path: Path) -> None:
        rows = [["seriBarang", "uraian"], [1, "KOPI"], [None, "  "], [2, "TEH"]]
        data = read_workbook(_workbook(tmp_path / "in.xlsx", Barang=rows))
        assert len(data["Barang"]) == 2

    def test_blank_cells_are_none(self, tmp_path: Path) -> None:
        rows = [["seriBarang", "uraian", "merk"], [1, None, "ACME"]]
        data = read_workbook(_workbook(tmp_path / "in.xlsx", Barang=rows))
        assert data["Barang"] == [{"seriBarang": 1, "uraian": None, "merk": "ACME"}]

    def test_columns_without_header_ignored(self, tmp_path: Path) -> None:
        rows = [["seriBarang", None], [1, "stray"]]
        data = read_workbook(_workbook(tmp_path / "in.xlsx", Barang=rows))
        assert data["Barang"] == [{"seriBarang": 1}]

    def test_text_is_stripped(self, tmp_path: Path) -> None:
        rows = [[" nomorAju "], ["  AJU-9 "]]
        data = read_workbook(_workbook(tmp_path / "in.xlsx", MainData=rows))
        assert data["MainData"] == {"nomorAju": "AJU-9"}

    def test_date_cells_become_iso_dates(self, tmp_path: Path) -> None:
        rows = [["tanggalAju", "tanggalTiba"], [datetime(2024, 1, 2, 9, 30), date(2024, 1, 5)]]
        data = read_workbook(_workbook(tmp_path / "in.xlsx", MainData=rows))
        assert data["MainData"] == {"tanggalAju": "2024-01-02", "tanggalTiba": "2024-01-05"}

    def test_missing_sheets(self, tmp_path: Path) -> None:
        path = _workbook(tmp_path / "in.xlsx", Kemasan=None, Dokumen=None)
        with pytest.raises(ValidationError, match="missing required sheets: Kemasan, Dokumen"):
            read_workbook(path)

    def test_main_data_needs_exactly_one_row(self, tmp_path: Path) -> None:
        rows = [["nomorAju"], ["AJU-1"], ["AJU-2"]]
        path = _workbook(tmp_path / "in.xlsx", MainData=rows)
        with pytest.raises(ValidationError, match="exactly one data row, found 2"):
            read_workbook(path)

    def test_empty_sheet(self, tmp_path: Path) -> None:
        path = _workbook(tmp_path / "in.xlsx", Dokumen=[])
        with pytest.raises(ValidationError, match="sheet Dokumen is empty"):
            read_workbook(path)

    def test_header_only_sheet(self, tmp_path: Path) -> None:
        path = _workbook(tmp_path / "in.xlsx", Kemasan=[["seriKemasan"]])
        with pytest.raises(ValidationError, match="at least header and one data row"):
            read_workbook(path)

    def test_sheet_with_only_blank_rows(self, tmp_path: Path) -> None:
        path = _workbook(tmp_path / "in.xlsx", Kemasan=[["seriKemasan"], [None], [""]])
        with pytest.raises(ValidationError, match="sheet Kemasan contains no valid data rows"):
            read_workbook(path)

    def test_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="File not found"):
            read_workbook(tmp_path / "missing.xlsx")

    def test_not_a_workbook(self, tmp_path: Path) -> None:
        path = tmp_path / "fake.xlsx"
        path.write_text("nomorAju,kodeKantor\n", encoding="utf-8")
        with pytest.raises(ValidationError, match="failed to open Excel file") as exc_info:
            read_workbook(path)
        assert exc_info.value.exit_code == 2


class TestIsWorkbook:
    @pytest.mark.parametrize("name", ["a.xlsx", "b.XLSX", "c.xlsm"])
    def test_workbook_suffixes(self, name: str) -> None:
        assert is_workbook(Path(name))

    @pytest.mark.parametrize("name", ["a.json", "b.xls", "c"])
    def test_other_suffixes(self, name: str) -> None:
        assert not is_workbook(Path(name))


# ------------------------------------------------------------------ #
# Template
# ------------------------------------------------------------------ #


class TestTemplate:
    def test_default_name(self) -> None:
        assert default_template_name(date(2024, 3, 7)) == "customs_data_template_20240307.xlsx"

    def test_every_sheet_and_column(self, tmp_path: Path) -> None:
        path = write_template(tmp_path / "template.xlsx")
        workbook = load_workbook(path)
        assert workbook.sheetnames == list(REQUIRED_SHEETS)
        for sheet, columns in SHEET_COLUMNS.items():
            header = [cell.value for cell in workbook[sheet][1]]
            assert header == list(columns)
            assert workbook[sheet]["A1"].font.bold

    def test_main_data_columns_are_header_fields(self) -> None:
        assert SHEET_COLUMNS["MainData"] == HEADER_FIELDS
        assert "barangTarif" not in SHEET_COLUMNS["Barang"]
        assert "seriBarang" in SHEET_COLUMNS["Barang"]

    def test_sample_rows_written(self, tmp_path: Path) -> None:
        workbook = load_workbook(write_template(tmp_path / "template.xlsx"))
        assert workbook["MainData"].max_row == 2
        assert workbook["Barang"].max_row == 3
        assert workbook["Entitas"].max_row == 3

    def test_template_reads_back_as_sample(self, tmp_path: Path) -> None:
        document = build_document(read_workbook(write_template(tmp_path / "template.xlsx")))
        payload = document.to_payload()
        expected = sample_document().to_payload()

        for name in HEADER_FIELDS:
            assert payload[name] == expected[name], name
        for key in SHEETS.values():
            assert len(payload[key]) == len(expected[key])
        assert payload["kontainer"] == expected["kontainer"]
        assert payload["barang"][1]["uraian"] == "SAMPLE COMPUTER ACCESSORIES"
        assert payload["barang"][0]["barangTarif"] == []

    def test_custom_document(self, tmp_path: Path) -> None:
        document = build_document({"nomorAju": "AJU-7", "barang": [{"seriBarang": 1}]})
        path = write_template(tmp_path / "mine.xlsx", document)
        workbook = load_workbook(path)
        column = HEADER_FIELDS.index("nomorAju") + 1
        assert workbook["MainData"].cell(row=2, column=column).value == "AJU-7"
        assert workbook["Barang"].max_row == 2
        assert workbook["Entitas"].max_row == 1
