"""Structural mapper -- builds the CEISA customs JSON document.

Input arrives in one of two shapes:

**Spreadsheet shape** -- one key per workbook sheet, as produced by
:func:`ceisa_bridge.spreadsheet.read_workbook`::

    {"MainData": {"nomorAju": "...", "kodeKantor": "...", ...},
     "Barang": [{...}, ...], "Entitas": [...], "Kemasan": [...],
     "Kontainer": [...], "Dokumen": [...], "Pengangkut": [...]}

Only the header fields (:data:`HEADER_FIELDS`) are taken from ``MainData``;
each sheet becomes the matching lowercase list and rows that are not
objects are skipped.

**Form shape** -- the document itself, already using the output keys.

Either way the result is a :class:`CustomsDocument`. Every model here has a
fixed schema: unknown keys are dropped, blank cells fall back to the field
default, and values are coerced to the field type (``"12.5"`` becomes
``12.5``, a numeric ``kodeKantor`` becomes a string). A value that cannot be
coerced is a :class:`~ceisa_bridge.exceptions.ValidationError`.
:meth:`~CustomsDocument.to_payload` always emits every header field and
every detail list.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ceisa_bridge.exceptions import ValidationError

MAIN_DATA_KEY = "MainData"

SHEETS: dict[str, str] = {
    "Barang": "barang",
    "Entitas": "entitas",
    "Kemasan": "kemasan",
    "Kontainer": "kontainer",
    "Dokumen": "dokumen",
    "Pengangkut": "pengangkut",
}
"""Workbook sheet name -> document list key."""


class DocumentModel(BaseModel):
    """Base for every part of the document: camelCase keys, fixed schema."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data

    def to_payload(self) -> dict[str, Any]:
        """The wire mapping; optional fields that were never set are left out."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ------------------------------------------------------------------ #
# Detail rows
# ------------------------------------------------------------------ #


class BarangDokumen(DocumentModel):
    seri_dokumen: str = ""


class BarangTarif(DocumentModel):
    jumlah_satuan: float = 0
    kode_fasilitas_tarif: str = ""
    kode_jenis_pungutan: str = ""
    kode_jenis_tarif: str = ""
    nilai_bayar: float = 0
    nilai_fasilitas: float = 0
    seri_barang: int = 0
    tarif: float = 0
    tarif_fasilitas: Optional[float] = None
    jumlah_kemasan: Optional[int] = None
    kode_kemasan: Optional[str] = None
    kode_komoditi_cukai: Optional[str] = None
    kode_satuan_barang: Optional[str] = None
    kode_sub_komoditi_cukai: Optional[str] = None
    nilai_sudah_dilunasi: Optional[float] = None


class BarangVd(DocumentModel):
    jenis_tarif: str = ""
    tarif: float = 0
    nilai_barang: float = 0
    nilai_bayar: float = 0
    kode_fasilitas: str = ""
    nilai_fasilitas: float = 0


class Barang(DocumentModel):
    """One line of goods (sheet ``Barang``)."""

    asuransi: float = 0
    bruto: float = 0
    cif: float = 0
    cif_rupiah: float = 0
    diskon: float = 0
    fob: float = 0
    freight: float = 0
    harga_ekspor: float = 0
    harga_patokan: float = 0
    harga_penyerahan: float = 0
    harga_perolehan: float = 0
    harga_satuan: float = 0
    hje_cukai: float = 0
    isi_per_kemasan: float = 0
    jumlah_bahan_baku: float = 0
    jumlah_dilekatkan: float = 0
    jumlah_kemasan: int = 0
    jumlah_pita_cukai: int = 0
    jumlah_realisasi: float = 0
    jumlah_satuan: float = 0
    kapasitas_silinder: float = 0
    kode_jenis_kemasan: str = ""
    kode_kondisi_barang: str = ""
    kode_negara_asal: str = ""
    kode_satuan_barang: str = ""
    merk: str = ""
    ndpbm: float = 0
    netto: float = 0
    nilai_barang: float = 0
    nilai_dana_sawit: float = 0
    nilai_devisa: float = 0
    nilai_tambah: float = 0
    pernyataan_lartas: str = ""
    persentase_impor: float = 0
    pos_tarif: str = ""
    saldo_akhir: float = 0
    saldo_awal: float = 0
    seri_barang: int = 0
    seri_barang_dok_asal: int = 0
    seri_ijin: int = 0
    tahun_pembuatan: int = 0
    tarif_cukai: float = 0
    tipe: str = ""
    uraian: str = ""
    volume: float = 0
    barang_dokumen: list[BarangDokumen] = Field(default_factory=list)
    barang_tarif: list[BarangTarif] = Field(default_factory=list)
    barang_vd: list[BarangVd] = Field(default_factory=list)
    barang_spek_khusus: list[Any] = Field(default_factory=list)
    barang_pemilik: list[Any] = Field(default_factory=list)


class Entitas(DocumentModel):
    """A party to the declaration (importer, seller, owner...)."""

    alamat_entitas: str = ""
    kode_entitas: str = ""
    nama_entitas: str = ""
    seri_entitas: int = 0
    kode_jenis_api: Optional[str] = None
    kode_jenis_identitas: Optional[str] = None
    kode_status: Optional[str] = None
    nib_entitas: Optional[str] = None
    nomor_identitas: Optional[str] = None
    kode_negara: Optional[str] = None


class Kemasan(DocumentModel):
    jumlah_kemasan: int = 0
    kode_jenis_kemasan: str = ""
    merk_kemasan: str = ""
    seri_kemasan: int = 0


class Kontainer(DocumentModel):
    kode_jenis_kontainer: str = ""
    kode_tipe_kontainer: str = ""
    kode_ukuran_kontainer: str = ""
    nomor_kontainer: str = ""
    seri_kontainer: int = 0


class Dokumen(DocumentModel):
    id_dokumen: str = ""
    kode_dokumen: str = ""
    kode_fasilitas: str = ""
    nomor_dokumen: str = ""
    seri_dokumen: int = 0
    tanggal_dokumen: str = ""
    nama_fasilitas: Optional[str] = None


class Pengangkut(DocumentModel):
    kode_bendera: str = ""
    nama_pengangkut: str = ""
    nomor_pengangkut: str = ""
    kode_cara_angkut: str = ""
    seri_pengangkut: int = 0


# ------------------------------------------------------------------ #
# Document
# ------------------------------------------------------------------ #


class DocumentHeader(DocumentModel):
    """Declaration header (sheet ``MainData``). Dates are ``YYYY-MM-DD`` strings."""

    asal_data: str = ""
    asuransi: float = 0
    biaya_pengurang: float = 0
    biaya_tambahan: float = 0
    bruto: float = 0
    cif: float = 0
    disclaimer: str = ""
    flag_vd: str = ""
    fob: float = 0
    freight: float = 0
    harga_penyerahan: float = 0
    id_pengguna: str = ""
    jabatan_ttd: str = ""
    jumlah_kontainer: int = 0
    jumlah_tanda_pengaman: int = 0
    kode_asuransi: str = ""
    kode_cara_bayar: str = ""
    kode_dokumen: str = ""
    kode_incoterm: str = ""
    kode_jenis_impor: str = ""
    kode_jenis_nilai: str = ""
    kode_jenis_prosedur: str = ""
    kode_kantor: str = ""
    kode_pel_muat: str = ""
    kode_pel_transit: str = ""
    kode_pel_tujuan: str = ""
    kode_tps: str = ""
    kode_tutup_pu: str = ""
    kode_valuta: str = ""
    kota_ttd: str = ""
    nama_ttd: str = ""
    ndpbm: float = 0
    netto: float = 0
    nilai_barang: float = 0
    nilai_incoterm: float = 0
    nilai_maklon: float = 0
    nomor_aju: str = ""
    nomor_bc11: str = ""
    pos_bc11: str = ""
    seri: int = 0
    sub_pos_bc11: str = ""
    tanggal_aju: str = ""
    tanggal_bc11: str = ""
    tanggal_tiba: str = ""
    tanggal_ttd: str = ""
    total_dana_sawit: float = 0
    volume: float = 0
    vd: float = 0


class CustomsDocument(DocumentHeader):
    """The customs declaration: header fields followed by the six detail lists."""

    barang: list[Barang] = Field(default_factory=list)
    entitas: list[Entitas] = Field(default_factory=list)
    kemasan: list[Kemasan] = Field(default_factory=list)
    kontainer: list[Kontainer] = Field(default_factory=list)
    dokumen: list[Dokumen] = Field(default_factory=list)
    pengangkut: list[Pengangkut] = Field(default_factory=list)


HEADER_FIELDS: tuple[str, ...] = tuple(to_camel(name) for name in DocumentHeader.model_fields)
"""Header keys copied from ``MainData``, in document order."""

ROW_MODELS: dict[str, type[DocumentModel]] = {
    "Barang": Barang,
    "Entitas": Entitas,
    "Kemasan": Kemasan,
    "Kontainer": Kontainer,
    "Dokumen": Dokumen,
    "Pengangkut": Pengangkut,
}
"""Workbook sheet name -> row model."""


def build_document(data: Any) -> CustomsDocument:
    """Map a spreadsheet- or form-shaped mapping into a :class:`CustomsDocument`.

    Raises:
        ValidationError: If *data* or ``MainData`` is not an object, or a
            value cannot be coerced to its field type.
    """
    if not isinstance(data, dict):
        raise ValidationError(f"document must be a JSON object, got {type(data).__name__}")
    if MAIN_DATA_KEY in data:
        return _from_spreadsheet(data)
    return _validate(data)


def _from_spreadsheet(data: dict[str, Any]) -> CustomsDocument:
    main = data[MAIN_DATA_KEY]
    if not isinstance(main, dict):
        raise ValidationError("MainData is not a valid object")

    header = {name: main[name] for name in HEADER_FIELDS if name in main}
    lists = {key: _rows(data.get(sheet)) for sheet, key in SHEETS.items()}
    return _validate({**header, **lists})


def _rows(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]


def _validate(data: dict[str, Any]) -> CustomsDocument:
    try:
        return CustomsDocument.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(f"invalid document: {exc}") from exc


def to_json_string(document: CustomsDocument) -> str:
    """Render *document* as indented JSON."""
    return json.dumps(document.to_payload(), indent=2, ensure_ascii=False)


def sample_document() -> CustomsDocument:
    """A complete example declaration, useful for trying out a downstream API."""
    date = "2021-12-25"
    return CustomsDocument(
        asal_data="S",
        bruto=350.71,
        cif=1234567.89,
        disclaimer="1",
        flag_vd="Y",
        id_pengguna="ABCDE",
        jabatan_ttd="MANAGER",
        jumlah_kontainer=1,
        kode_asuransi="LN",
        kode_cara_bayar="2",
        kode_dokumen="20",
        kode_incoterm="CIF",
        kode_jenis_impor="1",
        kode_jenis_nilai="KMD",
        kode_jenis_prosedur="1",
        kode_kantor="051000",
        kode_pel_muat="CNHSK",
        kode_pel_transit="CNHSK",
        kode_pel_tujuan="IDJBK",
        kode_tps="TPS1",
        kode_tutup_pu="11",
        kode_valuta="CNY",
        kota_ttd="JAKARTA",
        nama_ttd="AGUS",
        ndpbm=1234.56,
        netto=342.71,
        nomor_aju="301017INA9G220220525000025",
        nomor_bc11="000001",
        pos_bc11="0001",
        seri=1,
        sub_pos_bc11="000001",
        tanggal_aju=date,
        tanggal_bc11=date,
        tanggal_tiba=date,
        tanggal_ttd=date,
        barang=[
            _sample_barang(1, bruto=175.35, cif=617283.95, cif_rupiah=9259259.25,
                           harga_satuan=61728.395, pos_tarif="8471.30.10.00",
                           tipe="SAMPLE TYPE A", uraian="SAMPLE COMPUTER PARTS"),
            _sample_barang(2, bruto=175.36, cif=617283.94, cif_rupiah=9259259.1,
                           harga_satuan=61728.394, pos_tarif="8471.30.20.00",
                           tipe="SAMPLE TYPE B", uraian="SAMPLE COMPUTER ACCESSORIES"),
        ],
        entitas=[
            Entitas(alamat_entitas="JL. RAYA JAKARTA NO. 123", kode_entitas="1",
                    nama_entitas="PT. SAMPLE IMPORTER", seri_entitas=1),
            Entitas(alamat_entitas="JL. RAYA SURABAYA NO. 456", kode_entitas="2",
                    nama_entitas="PT. SAMPLE EXPORTER", seri_entitas=2),
        ],
        kemasan=[
            Kemasan(jumlah_kemasan=10, kode_jenis_kemasan="BX",
                    merk_kemasan="SAMPLE BOX", seri_kemasan=1),
        ],
        kontainer=[
            Kontainer(kode_jenis_kontainer="FCL", kode_tipe_kontainer="DC",
                      kode_ukuran_kontainer="20", nomor_kontainer="SAMPLE123456789",
                      seri_kontainer=1),
        ],
        dokumen=[
            Dokumen(id_dokumen="DOC001", kode_dokumen="705", kode_fasilitas="01",
                    nomor_dokumen="SAMPLE/DOC/001", seri_dokumen=1, tanggal_dokumen=date),
        ],
        pengangkut=[
            Pengangkut(kode_bendera="ID", nama_pengangkut="SAMPLE SHIPPING LINE",
                       nomor_pengangkut="SAMPLE001", kode_cara_angkut="1",
                       seri_pengangkut=1),
        ],
    )


def _sample_barang(
    seri: int,
    bruto: float,
    cif: float,
    cif_rupiah: float,
    harga_satuan: float,
    pos_tarif: str,
    tipe: str,
    uraian: str,
) -> Barang:
    return Barang(
        seri_barang=seri,
        bruto=bruto,
        cif=cif,
        cif_rupiah=cif_rupiah,
        harga_satuan=harga_satuan,
        isi_per_kemasan=1,
        jumlah_kemasan=10,
        jumlah_satuan=10,
        kode_jenis_kemasan="BX",
        kode_kondisi_barang="1",
        kode_negara_asal="CN",
        kode_satuan_barang="PCE",
        merk="SAMPLE BRAND",
        ndpbm=1234.56,
        netto=round(bruto - 4.0, 2),
        pernyataan_lartas="TIDAK ADA",
        persentase_impor=100,
        pos_tarif=pos_tarif,
        tahun_pembuatan=2023,
        tipe=tipe,
        uraian=uraian,
        barang_tarif=[
            BarangTarif(jumlah_satuan=10, kode_fasilitas_tarif="00", kode_jenis_pungutan="1",
                        kode_jenis_tarif="1", nilai_bayar=harga_satuan, seri_barang=seri,
                        tarif=10),
        ],
    )
