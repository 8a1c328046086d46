"""Command-line interface for pastebin-agent.

Responsibilities:
- Expose user-facing commands for common Pastebin API calls.
- Resolve configuration and credentials into a rate-limited `PastebinAgent`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

import typer

from .agent.http_agent import PastebinAgent
from .agent.rate_limiter import RateLimitMode
from .cli_rendering import echo_paste_list, echo_user_details, exit_with_command_error
from .config import AgentConfig, ConfigLoader, RuntimeConfigSources
from .credentials import CredentialStore, create_credential_store
from .errors import CommandError, UnsupportedRateLimitModeError
from .parsing import normalize_optional_string
from .telemetry.logger import RequestLogger

app = typer.Typer(
    name="pastebin-agent",
    no_args_is_help=True,
    help="Rate-limited Pastebin API client.",
)

_VISIBILITY_CODES = {"public": "0", "unlisted": "1", "private": "2"}
_EXPIRE_CODES = frozenset({"N", "10M", "1H", "1D", "1W", "2W", "1M", "6M", "1Y"})

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="YAML config file with agent settings."),
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option("--api-key", help="Pastebin developer API key (overrides stored/env values)."),
]
ModeOption = Annotated[
    str | None,
    typer.Option("--rate-limit-mode", help="Rate-limit mode: burst, none, or pace."),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log request and rate-limit events to stderr."),
]


def _load_yaml_config(config_path: Path | None) -> AgentConfig | None:
    """Load a YAML config file when requested and map failures to command errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise CommandError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise CommandError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _secure_runtime_values(store: CredentialStore) -> dict[str, str]:
    """Collect stored credentials when secure storage is usable."""

    if not store.is_available():
        return {}
    values: dict[str, str] = {}
    stored_api_key = store.get_api_key()
    if stored_api_key is not None:
        values["api_key"] = stored_api_key
    stored_user_key = store.get_user_key()
    if stored_user_key is not None:
        values["user_key"] = stored_user_key
    return values


def _resolve_agent_config(
    config_file: Path | None,
    api_key: str | None,
    rate_limit_mode: str | None,
    credential_store: CredentialStore,
) -> AgentConfig:
    """Resolve effective agent config from YAML/env defaults and CLI overrides."""

    try:
        base_config = _load_yaml_config(config_file) or ConfigLoader.from_env()
        if rate_limit_mode is not None:
            base_config.rate_limit_mode = RateLimitMode.parse(rate_limit_mode)
    except UnsupportedRateLimitModeError as exc:
        raise CommandError(
            stage="config",
            detail=str(exc),
            hint="Pass `--rate-limit-mode burst|none|pace`.",
        ) from exc
    except ValueError as exc:
        raise CommandError(
            stage="config",
            detail=f"Invalid environment configuration: {exc}",
            hint="Check `PASTEBIN_*` environment variables.",
        ) from exc

    runtime_cli_values: dict[str, str] = {}
    normalized_api_key = normalize_optional_string(api_key)
    if normalized_api_key is not None:
        runtime_cli_values["api_key"] = normalized_api_key

    base_config.runtime_sources = RuntimeConfigSources(
        cli=runtime_cli_values,
        secure=_secure_runtime_values(credential_store),
        env=os.environ,
    )
    return base_config


def _create_agent(
    config_file: Path | None,
    api_key: str | None,
    rate_limit_mode: str | None,
    request_logger: RequestLogger,
) -> PastebinAgent:
    """Create a configured agent or raise a config-stage command error."""

    config = _resolve_agent_config(
        config_file, api_key, rate_limit_mode, create_credential_store()
    )
    try:
        return config.create_agent(request_logger=request_logger)
    except ValueError as exc:
        raise CommandError(
            stage="config",
            detail=str(exc),
            hint=(
                "Set `PASTEBIN_API_KEY`, pass `--api-key`, or store one with "
                "`pastebin-agent credentials --set-api-key`."
            ),
        ) from exc


def _request_logger(verbose: bool) -> RequestLogger:
    return RequestLogger(level="INFO" if verbose else "WARNING")


@app.command("login")
def login_command(
    username: Annotated[str, typer.Argument(help="Pastebin account name.")],
    password: Annotated[
        str,
        typer.Option(prompt=True, hide_input=True, help="Pastebin account password."),
    ],
    store_user_key: Annotated[
        bool,
        typer.Option(
            "--store-user-key/--no-store-user-key",
            help="Persist the returned user key in secure credential storage.",
        ),
    ] = True,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    rate_limit_mode: ModeOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Log in and obtain a session user key."""

    request_logger = _request_logger(verbose)
    try:
        agent = _create_agent(config_file, api_key, rate_limit_mode, request_logger)
        user_key = agent.authenticate(username, password)
        if store_user_key:
            try:
                create_credential_store().set_user_key(user_key)
            except Exception as exc:
                raise CommandError(
                    stage="credentials",
                    detail=f"Failed to store user key securely: {exc}",
                    hint=(
                        "Install and configure a keyring backend, or rerun with "
                        "`--no-store-user-key` and export `PASTEBIN_USER_KEY`."
                    ),
                ) from exc
    except Exception as exc:
        exit_with_command_error("login", exc)
    finally:
        request_logger.close()

    typer.echo(f"Logged in as {username}.")
    if store_user_key:
        typer.echo("Stored user key in secure credential storage.")
    else:
        typer.echo(f"User key: {user_key}")


@app.command("paste")
def paste_command(
    source: Annotated[
        Path | None,
        typer.Argument(help="File to upload; reads stdin when omitted."),
    ] = None,
    name: Annotated[str | None, typer.Option("--name", help="Paste title.")] = None,
    syntax: Annotated[
        str | None,
        typer.Option("--format", help="Syntax highlighting format, e.g. `python`."),
    ] = None,
    visibility: Annotated[
        str,
        typer.Option("--visibility", help="public, unlisted, or private."),
    ] = "unlisted",
    expire: Annotated[
        str,
        typer.Option("--expire", help="Expiry code: N, 10M, 1H, 1D, 1W, 2W, 1M, 6M, 1Y."),
    ] = "N",
    guest: Annotated[
        bool,
        typer.Option("--guest", help="Do not attach the stored user key."),
    ] = False,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    rate_limit_mode: ModeOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Create a paste from a file or stdin and print its URL."""

    request_logger = _request_logger(verbose)
    try:
        visibility_code = _VISIBILITY_CODES.get(visibility.strip().lower())
        if visibility_code is None:
            raise CommandError(
                stage="input",
                detail=f"Unsupported visibility `{visibility}`.",
                hint="Use one of: public, unlisted, private.",
            )
        expire_code = expire.strip().upper()
        if expire_code not in _EXPIRE_CODES:
            raise CommandError(
                stage="input",
                detail=f"Unsupported expiry `{expire}`.",
                hint="Use one of: " + ", ".join(sorted(_EXPIRE_CODES)) + ".",
            )
        if source is None:
            code = typer.get_text_stream("stdin").read()
        else:
            code = source.read_text(encoding="utf-8")
        if not code.strip():
            raise CommandError(stage="input", detail="Paste content is empty.")

        agent = _create_agent(config_file, api_key, rate_limit_mode, request_logger)
        if guest:
            agent.user_key = None
        paste_url = agent.post_option(
            "paste",
            {
                "api_paste_code": code,
                "api_paste_name": normalize_optional_string(name),
                "api_paste_format": normalize_optional_string(syntax),
                "api_paste_private": visibility_code,
                "api_paste_expire_date": expire_code,
            },
        )
    except Exception as exc:
        exit_with_command_error("paste", exc)
    finally:
        request_logger.close()

    typer.echo(paste_url.strip())


@app.command("list")
def list_command(
    limit: Annotated[
        int,
        typer.Option("--limit", min=1, max=1000, help="Maximum number of pastes to list."),
    ] = 50,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    rate_limit_mode: ModeOption = None,
    verbose: VerboseOption = False,
) -> None:
    """List pastes of the logged-in user."""

    request_logger = _request_logger(verbose)
    try:
        agent = _create_agent(config_file, api_key, rate_limit_mode, request_logger)
        _require_login(agent)
        result = agent.post_and_return_xml("list", {"api_results_limit": limit})
    except Exception as exc:
        exit_with_command_error("list", exc)
    finally:
        request_logger.close()

    echo_paste_list(result)


@app.command("delete")
def delete_command(
    paste_key: Annotated[str, typer.Argument(help="Key of the paste to delete.")],
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    rate_limit_mode: ModeOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Delete a paste owned by the logged-in user."""

    request_logger = _request_logger(verbose)
    try:
        agent = _create_agent(config_file, api_key, rate_limit_mode, request_logger)
        _require_login(agent)
        response = agent.post_option("delete", {"api_paste_key": paste_key})
    except Exception as exc:
        exit_with_command_error("delete", exc)
    finally:
        request_logger.close()

    typer.echo(response.strip())


@app.command("raw")
def raw_command(
    paste_key: Annotated[str, typer.Argument(help="Key of the paste to fetch.")],
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    rate_limit_mode: ModeOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print the raw content of a paste owned by the logged-in user."""

    request_logger = _request_logger(verbose)
    try:
        agent = _create_agent(config_file, api_key, rate_limit_mode, request_logger)
        _require_login(agent)
        content = agent.post_option("show_paste", {"api_paste_key": paste_key})
    except Exception as exc:
        exit_with_command_error("raw", exc)
    finally:
        request_logger.close()

    typer.echo(content, nl=False)


@app.command("user")
def user_command(
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    rate_limit_mode: ModeOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show account details of the logged-in user."""

    request_logger = _request_logger(verbose)
    try:
        agent = _create_agent(config_file, api_key, rate_limit_mode, request_logger)
        _require_login(agent)
        result = agent.post_and_return_xml("userdetails")
    except Exception as exc:
        exit_with_command_error("user", exc)
    finally:
        request_logger.close()

    echo_user_details(result)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for a developer API key and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option("--clear-api-key", help="Remove the stored developer API key."),
    ] = False,
    clear_user_key: Annotated[
        bool,
        typer.Option("--clear-user-key", help="Remove the stored session user key (log out)."),
    ] = False,
) -> None:
    """Inspect, store, or clear credentials in secure storage."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            CommandError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one API key action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "Pastebin developer API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                CommandError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                CommandError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")

    if clear_api_key:
        if credential_store.clear_api_key():
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")

    if clear_user_key:
        if credential_store.clear_user_key():
            typer.echo("Stored user key cleared from secure credential storage.")
        else:
            typer.echo("No stored user key found in secure credential storage.")

    if set_api_key or clear_api_key or clear_user_key:
        return

    available = credential_store.is_available()
    typer.echo(f"Secure credential storage: {'available' if available else 'unavailable'}")
    if not available:
        return
    api_key_status = "present" if credential_store.get_api_key() is not None else "not set"
    user_key_status = "present" if credential_store.get_user_key() is not None else "not set"
    typer.echo(f"Stored API key: {api_key_status}")
    typer.echo(f"Stored user key: {user_key_status}")


def _require_login(agent: PastebinAgent) -> None:
    """Fail before any request when a command needs a session user key."""

    if not agent.authenticated:
        raise CommandError(
            stage="auth",
            detail="This command requires a logged-in user.",
            hint="Run `pastebin-agent login <username>` first or set `PASTEBIN_USER_KEY`.",
        )


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
