"""Excel workbook input and template output.

A declaration workbook has one sheet per part of the document: ``MainData``
with a header row and exactly one data row, and ``Barang``, ``Entitas``,
``Kemasan``, ``Kontainer``, ``Dokumen`` and ``Pengangkut`` with a header row
and one or more data rows. The first row of every sheet names the columns
with the document's camelCase keys.

:func:`read_workbook` turns such a workbook into the spreadsheet-shaped
mapping :func:`~ceisa_bridge.document.build_document` accepts.
:func:`write_template` produces a workbook with every sheet and column,
pre-filled with the sample declaration.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Optional, get_origin
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from ceisa_bridge.document import (
    HEADER_FIELDS,
    MAIN_DATA_KEY,
    ROW_MODELS,
    SHEETS,
    CustomsDocument,
    sample_document,
)
from ceisa_bridge.exceptions import ValidationError

logger = logging.getLogger(__name__)

WORKBOOK_SUFFIXES = (".xlsx", ".xlsm")
REQUIRED_SHEETS: tuple[str, ...] = (MAIN_DATA_KEY, *SHEETS)


def _scalar_columns(model: type[BaseModel]) -> tuple[str, ...]:
    """Columns a row model can take from a single cell (nested lists excluded)."""
    return tuple(
        to_camel(name)
        for name, field in model.model_fields.items()
        if get_origin(field.annotation) is not list
    )


SHEET_COLUMNS: dict[str, tuple[str, ...]] = {
    MAIN_DATA_KEY: HEADER_FIELDS,
    **{sheet: _scalar_columns(model) for sheet, model in ROW_MODELS.items()},
}
"""Template column headers per sheet."""


def is_workbook(path: Path) -> bool:
    """True if *path* names an Excel workbook by its extension."""
    return path.suffix.lower() in WORKBOOK_SUFFIXES


# ------------------------------------------------------------------ #
# Reading
# ------------------------------------------------------------------ #


def read_workbook(path: Path) -> dict[str, Any]:
    """Parse a declaration workbook into the spreadsheet-shaped mapping.

    Args:
        path: The ``.xlsx`` file to read.

    Returns:
        ``{"MainData": {...}, "Barang": [{...}, ...], ...}``. Empty cells are
        ``None``; date cells become ``YYYY-MM-DD`` strings.

    Raises:
        ValidationError: If the file cannot be opened, a required sheet is
            missing, a sheet has no data rows, or ``MainData`` does not have
            exactly one data row.
    """
    if not path.is_file():
        raise ValidationError(f"File not found: {path}")
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, OSError, KeyError) as exc:
        raise ValidationError(f"failed to open Excel file {path}: {exc}") from exc

    try:
        missing = [name for name in REQUIRED_SHEETS if name not in workbook.sheetnames]
        if missing:
            raise ValidationError(f"missing required sheets: {', '.join(missing)}")

        data: dict[str, Any] = {}
        for name in REQUIRED_SHEETS:
            rows = _sheet_rows(name, workbook[name].iter_rows(values_only=True))
            if name == MAIN_DATA_KEY:
                if len(rows) != 1:
                    raise ValidationError(
                        f"MainData sheet should contain exactly one data row, found {len(rows)}"
                    )
                data[name] = rows[0]
            else:
                data[name] = rows
    finally:
        workbook.close()

    logger.info(
        "Read workbook %s (%s)",
        path,
        ", ".join(f"{sheet}={len(data[sheet])}" for sheet in SHEETS),
    )
    return data


def _sheet_rows(name: str, cells: Iterable[tuple[Any, ...]]) -> list[dict[str, Any]]:
    rows = list(cells)
    if not rows:
        raise ValidationError(f"sheet {name} is empty")
    if len(rows) < 2:
        raise ValidationError(f"sheet {name} should contain at least header and one data row")

    headers = [str(cell).strip() if cell is not None else "" for cell in rows[0]]
    result = [_row_to_dict(headers, row) for row in rows[1:] if not _is_empty_row(row)]
    if not result:
        raise ValidationError(f"sheet {name} contains no valid data rows")
    return result


def _row_to_dict(headers: list[str], row: tuple[Any, ...]) -> dict[str, Any]:
    return {
        header: _cell_value(row[i] if i < len(row) else None)
        for i, header in enumerate(headers)
        if header
    }


def _cell_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return value.strip()
    return value


def _is_empty_row(row: tuple[Any, ...]) -> bool:
    return all(cell is None or (isinstance(cell, str) and not cell.strip()) for cell in row)


# ------------------------------------------------------------------ #
# Template
# ------------------------------------------------------------------ #


def default_template_name(today: Optional[date] = None) -> str:
    """``customs_data_template_YYYYMMDD.xlsx`` for *today*."""
    return f"customs_data_template_{(today or date.today()):%Y%m%d}.xlsx"


def write_template(path: Path, document: Optional[CustomsDocument] = None) -> Path:
    """Write a declaration workbook to *path*.

    Every sheet gets its header row; the data rows come from *document*,
    which defaults to :func:`~ceisa_bridge.document.sample_document`.

    Returns:
        The path written.

    Raises:
        OSError: If the file cannot be written.
    """
    if document is None:
        document = sample_document()
    payload = document.to_payload()

    workbook = Workbook()
    workbook.remove(workbook.active)
    bold = Font(bold=True)

    for sheet, columns in SHEET_COLUMNS.items():
        worksheet = workbook.create_sheet(sheet)
        worksheet.append(list(columns))
        for cell in worksheet[1]:
            cell.font = bold
        if sheet == MAIN_DATA_KEY:
            records = [payload]
        else:
            records = payload[SHEETS[sheet]]
        for record in records:
            worksheet.append([record.get(column) for column in columns])

    workbook.save(path)
    logger.info("Wrote template workbook %s", path)
    return path
