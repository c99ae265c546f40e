"""Tests for the structural mapper that builds the customs document."""

from __future__ import annotations

import json

import pytest

from ceisa_bridge.document import (
    HEADER_FIELDS,
    SHEETS,
    Barang,
    CustomsDocument,
    Kontainer,
    build_document,
    sample_document,
    to_json_string,
)
from ceisa_bridge.exceptions import ValidationError


def _spreadsheet(**sheets) -> dict:
    data = {
        "MainData": {"nomorAju": "AJU-1", "kodeKantor": "051000", "notAHeader": "x"},
    }
    data.update(sheets)
    return data


class TestSpreadsheetShape:
    def test_header_fields_copied(self) -> None:
        payload = build_document(_spreadsheet()).to_payload()
        assert payload["nomorAju"] == "AJU-1"
        assert payload["kodeKantor"] == "051000"

    def test_unknown_main_data_keys_dropped(self) -> None:
        payload = build_document(_spreadsheet()).to_payload()
        assert "notAHeader" not in payload

    def test_sheets_become_lists(self) -> None:
        document = build_document(
            _spreadsheet(Barang=[{"seriBarang": 1}], Kontainer=[{"nomorKontainer": "C1"}])
        )
        assert document.barang == [Barang(seri_barang=1)]
        assert document.kontainer == [Kontainer(nomor_kontainer="C1")]
        assert document.entitas == []

    def test_all_lists_present(self) -> None:
        payload = build_document(_spreadsheet()).to_payload()
        for key in SHEETS.values():
            assert payload[key] == []

    def test_non_object_rows_skipped(self) -> None:
        document = build_document(_spreadsheet(Barang=[{"seriBarang": 1}, "junk", 3, None]))
        assert len(document.barang) == 1
        assert document.barang[0].seri_barang == 1

    def test_non_list_sheet_ignored(self) -> None:
        assert build_document(_spreadsheet(Dokumen="not a list")).dokumen == []

    def test_main_data_not_an_object(self) -> None:
        with pytest.raises(ValidationError, match="MainData is not a valid object"):
            build_document({"MainData": ["a"]})

    def test_header_values_untouched(self) -> None:
        data = {"MainData": {"cif": 1234567.89, "seri": 1, "flagVd": "Y"}}
        payload = build_document(data).to_payload()
        assert payload["cif"] == 1234567.89
        assert payload["seri"] == 1
        assert payload["flagVd"] == "Y"

    def test_blank_cells_fall_back_to_defaults(self) -> None:
        data = _spreadsheet(Barang=[{"seriBarang": 2, "uraian": None, "bruto": ""}])
        (barang,) = build_document(data).to_payload()["barang"]
        assert barang["seriBarang"] == 2
        assert barang["uraian"] == ""
        assert barang["bruto"] == 0


class TestFormShape:
    def test_known_fields_kept(self) -> None:
        data = {"nomorAju": "AJU-2", "barang": [{"seriBarang": 1, "uraian": "KOPI"}]}
        payload = build_document(data).to_payload()
        assert payload["nomorAju"] == "AJU-2"
        assert payload["barang"][0]["seriBarang"] == 1
        assert payload["barang"][0]["uraian"] == "KOPI"
        assert payload["pengangkut"] == []

    def test_unknown_keys_dropped(self) -> None:
        data = {
            "nomorAju": "X",
            "unknownField": 1,
            "custom": {"nested": True},
            "barang": [{"seriBarang": 1, "warna": "merah"}],
        }
        payload = build_document(data).to_payload()
        assert payload["nomorAju"] == "X"
        assert "unknownField" not in payload
        assert "custom" not in payload
        assert "warna" not in payload["barang"][0]

    def test_values_coerced_to_field_types(self) -> None:
        data = {
            "kodeKantor": 51000,
            "bruto": "12.5",
            "seri": "3",
            "barang": [{"seriBarang": "1", "posTarif": 8471301000, "jumlahKemasan": 10.0}],
        }
        payload = build_document(data).to_payload()
        assert payload["kodeKantor"] == "51000"
        assert payload["bruto"] == 12.5
        assert payload["seri"] == 3
        barang = payload["barang"][0]
        assert barang["seriBarang"] == 1
        assert barang["posTarif"] == "8471301000"
        assert barang["jumlahKemasan"] == 10

    def test_snake_case_keys_accepted(self) -> None:
        document = build_document({"nomor_aju": "AJU-4", "kode_kantor": "040300"})
        assert document.nomor_aju == "AJU-4"
        assert document.to_payload()["kodeKantor"] == "040300"

    def test_uncoercible_value(self) -> None:
        with pytest.raises(ValidationError, match="invalid document") as exc_info:
            build_document({"bruto": "heavy"})
        assert exc_info.value.exit_code == 2

    def test_uncoercible_row_value(self) -> None:
        with pytest.raises(ValidationError, match="invalid document"):
            build_document({"barang": [{"seriBarang": "first"}]})

    def test_malformed_list(self) -> None:
        with pytest.raises(ValidationError, match="invalid document"):
            build_document({"barang": "not a list"})

    def test_not_an_object(self) -> None:
        with pytest.raises(ValidationError, match="document must be a JSON object, got list") as exc_info:
            build_document([1, 2])
        assert exc_info.value.exit_code == 2


class TestCustomsDocument:
    def test_nomor_aju(self) -> None:
        assert CustomsDocument(nomorAju="AJU-3").nomor_aju == "AJU-3"
        assert CustomsDocument().nomor_aju == ""

    def test_payload_has_fixed_schema(self) -> None:
        payload = CustomsDocument(nomorAju="AJU-3").to_payload()
        assert list(payload) == [*HEADER_FIELDS, *SHEETS.values()]
        assert payload["nomorAju"] == "AJU-3"
        assert payload["kodeKantor"] == ""
        assert payload["cif"] == 0

    def test_header_keys_are_camel_case(self) -> None:
        assert "nomorAju" in HEADER_FIELDS
        assert "nomorBc11" in HEADER_FIELDS
        assert "flagVd" in HEADER_FIELDS
        assert all("_" not in name for name in HEADER_FIELDS)

    def test_unset_optional_row_fields_left_out(self) -> None:
        document = CustomsDocument(entitas=[{"namaEntitas": "PT A"}])
        entitas = document.to_payload()["entitas"][0]
        assert entitas["namaEntitas"] == "PT A"
        assert "nibEntitas" not in entitas

    def test_to_json_string(self) -> None:
        text = to_json_string(CustomsDocument(nomorAju="AJU-é"))
        assert json.loads(text)["nomorAju"] == "AJU-é"
        assert "AJU-é" in text


class TestSampleDocument:
    def test_has_every_header_field(self) -> None:
        payload = sample_document().to_payload()
        for name in HEADER_FIELDS:
            assert name in payload

    def test_has_detail_rows(self) -> None:
        document = sample_document()
        assert len(document.barang) == 2
        assert document.entitas and document.kemasan and document.kontainer
        assert document.dokumen and document.pengangkut

    def test_nested_tariff_rows(self) -> None:
        barang = sample_document().to_payload()["barang"][0]
        assert barang["barangTarif"][0]["seriBarang"] == 1
        assert barang["barangDokumen"] == []

    def test_round_trips_through_mapper(self) -> None:
        payload = sample_document().to_payload()
        assert build_document(payload).to_payload() == payload
