"""Config commands -- view and modify persisted settings.

Provides the ``ceisa-bridge config`` sub-command group for reading,
updating, and resetting :class:`~ceisa_bridge.models.Settings`. Secrets
are configured as credential sources (``env:VAR``, ``file:/path`` or
``prompt``) and never stored in the file.
"""

from __future__ import annotations

import typer

from ceisa_bridge.exit_codes import EXIT_INVALID_USAGE
from ceisa_bridge.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Include environment overrides (CEISA_*).",
    ),
) -> None:
    """Show current settings.

    Example::

        ceisa-bridge config show
        ceisa-bridge config show --effective --json
    """
    from ceisa_bridge.commands.session import fail
    from ceisa_bridge.config import load_settings, resolve_settings, settings_path
    from ceisa_bridge.exceptions import BridgeError

    try:
        settings = resolve_settings() if effective else load_settings()
    except BridgeError as exc:
        raise fail(exc) from None
    info(f"Settings file: {settings_path()}")
    format_response(settings.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Setting key (dot notation, e.g., 'api.endpoint')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a setting.

    The value is coerced to the existing field's type (bool, int, or str)
    and the result is validated before saving.

    Raises:
        typer.Exit: With code 2 if the key path is invalid, the value
            cannot be coerced, or validation fails.

    Example::

        ceisa-bridge config set api.endpoint https://customs.example/api
        ceisa-bridge config set api.auth_type oauth2
        ceisa-bridge config set oauth.password_source env:CEISA_PW
    """
    from ceisa_bridge.commands.session import fail
    from ceisa_bridge.config import load_settings, save_settings
    from ceisa_bridge.exceptions import BridgeError
    from ceisa_bridge.models import Settings

    try:
        settings = load_settings()
    except BridgeError as exc:
        raise fail(exc) from None
    data = settings.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid setting key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown setting key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    else:
        coerced = value  # type: ignore[assignment]

    target[final_key] = coerced

    try:
        new_settings = Settings.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_settings(new_settings)
    stored = new_settings.model_dump(mode="json")
    for k in keys:
        stored = stored[k]
    success(f"Set {key} = {stored}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset settings to defaults. Asks for confirmation unless ``--force``.

    Example::

        ceisa-bridge --force config reset
    """
    from ceisa_bridge.config import save_settings
    from ceisa_bridge.models import Settings

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all settings to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_settings(Settings())
    success("Settings reset to defaults.")
