"""Document commands -- preview the customs JSON document, write the workbook template.

``generate`` runs the structural mapper on a JSON file or Excel workbook and
prints the resulting document without sending it; ``--sample`` prints a
complete example declaration instead. ``--output`` writes the document to a
file.

``template`` writes an Excel workbook with every sheet and column, filled
with the sample declaration, ready to be edited and passed to ``send``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ceisa_bridge.exceptions import BridgeError
from ceisa_bridge.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE
from ceisa_bridge.output import error, format_response, info, success


def generate_command(
    file: Optional[Path] = typer.Argument(
        None, help="JSON document (form or spreadsheet shape) or .xlsx workbook."
    ),
    sample: bool = typer.Option(False, "--sample", help="Print the sample document."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the document to this file instead of stdout."
    ),
) -> None:
    """Map a document and print the result.

    Example::

        ceisa-bridge generate upload.json --json > bc20.json
        ceisa-bridge generate upload.xlsx --output bc20.json
        ceisa-bridge generate --sample --output sample.json
    """
    from ceisa_bridge.commands.session import fail
    from ceisa_bridge.commands.submit import load_document_input
    from ceisa_bridge.document import build_document, sample_document, to_json_string

    if sample == (file is not None):
        error("Pass either a FILE or --sample.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    try:
        document = sample_document() if sample else build_document(load_document_input(file))
    except BridgeError as exc:
        raise fail(exc) from None

    if output is not None:
        try:
            output.write_text(to_json_string(document) + "\n", encoding="utf-8")
        except OSError as exc:
            error(f"Cannot write {output}: {exc}")
            raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None
        success(f"Document written to {output}")
    else:
        format_response(document.to_payload())

    if document.nomor_aju:
        info(f"nomorAju: {document.nomor_aju} ({len(document.barang)} barang)")


def template_command(
    output: Optional[Path] = typer.Argument(
        None, help="Workbook to write (default: customs_data_template_YYYYMMDD.xlsx)."
    ),
) -> None:
    """Write the Excel input template.

    Example::

        ceisa-bridge template
        ceisa-bridge template declarations/bc20.xlsx
    """
    from ceisa_bridge.spreadsheet import default_template_name, is_workbook, write_template

    target = output or Path(default_template_name())
    if not is_workbook(target):
        error(f"Template must be an .xlsx file: {target}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    try:
        write_template(target)
    except OSError as exc:
        error(f"Cannot write {target}: {exc}")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None
    success(f"Template written to {target}")
    format_response({"path": str(target)})
