"""ceisa_bridge -- Build CEISA customs JSON documents and submit them downstream.

The package maps form- or spreadsheet-shaped mappings into the CEISA customs
JSON document and forwards that document to a downstream customs API. Every
submission is authenticated with one of several strategies (none, API key,
HTTP Basic, OAuth2 bearer, or the legacy key-and/or-basic combination).

The OAuth2 strategy is backed by a short-lived bearer credential acquired from
the CEISA login endpoint and renewed transparently before it expires.

Typical workflow::

    ceisa-bridge config set api.endpoint https://customs.example/api/submit
    ceisa-bridge generate document.json        # preview the mapped document
    ceisa-bridge send document.json --dry-run  # check what would be sent
    ceisa-bridge send document.json

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware settings and credential source resolution.
    document: Structural mapper producing the customs JSON document.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting and logging setup.
"""

__version__ = "1.0.0"
