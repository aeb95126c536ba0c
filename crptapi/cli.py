"""Command-line interface for the CRPT client.

Responsibilities:
- Expose user-facing commands for document registration.
- Convert CLI arguments and config files into `CrptApiConfig`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from .api.crpt_client import CrptApi, CrptApiError
from .cli_rendering import echo_config, echo_response, exit_with_command_error
from .config import ConfigLoader, CrptApiConfig
from .encoding import build_create_document_payload, encode
from .errors import AcquireCancelledError, CommandStageError, InvalidConfigurationError
from .models.datatypes import Document, sample_document
from .parsing import normalize_optional_string
from .telemetry.logger import RequestLogger

app = typer.Typer(
    name="crptapi",
    no_args_is_help=True,
    help="CRPT document registration CLI.",
)


def _load_config(
    config_path: Path | None,
    time_unit: str | None = None,
    request_limit: int | None = None,
    base_url: str | None = None,
) -> CrptApiConfig:
    """Load YAML or environment config and apply explicit CLI overrides."""

    try:
        if config_path is None:
            loaded = ConfigLoader.from_env()
        else:
            loaded = ConfigLoader.from_yaml(config_path)
        return loaded.with_overrides(
            time_unit=time_unit,
            request_limit=request_limit,
            base_url=base_url,
        )
    except FileNotFoundError as exc:
        raise CommandStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except InvalidConfigurationError as exc:
        raise CommandStageError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Fix config file, `CRPT_*` environment values, or CLI options and rerun.",
        ) from exc


def _load_document(document_path: Path) -> Document:
    """Read and parse a document JSON file into the document schema."""

    try:
        raw_text = document_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CommandStageError(
            stage="document",
            detail=f"Document file not found: `{document_path}`.",
            hint="Run `crptapi sample-document --out doc.json` for a template.",
        ) from exc
    try:
        return Document.from_payload(json.loads(raw_text))
    except (json.JSONDecodeError, ValueError) as exc:
        raise CommandStageError(
            stage="document",
            detail=f"Invalid document file `{document_path}`: {exc}",
            hint="Compare the file against `crptapi sample-document` output.",
        ) from exc


def _resolve_signature(signature: str | None, signature_file: Path | None) -> str:
    """Resolve exactly one signature source into a non-empty string."""

    if signature is not None and signature_file is not None:
        raise CommandStageError(
            stage="signature",
            detail="`--signature` and `--signature-file` cannot be used together.",
            hint="Pass the signature inline or from a file, not both.",
        )
    if signature_file is not None:
        try:
            signature = signature_file.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CommandStageError(
                stage="signature",
                detail=f"Signature file not found: `{signature_file}`.",
            ) from exc
    resolved = normalize_optional_string(signature)
    if resolved is None:
        raise CommandStageError(
            stage="signature",
            detail="No document signature provided.",
            hint="Pass `--signature <text>` or `--signature-file <path>`.",
        )
    return resolved


@app.command("create-document")
def create_document_command(
    document_path: Annotated[
        Path,
        typer.Argument(help="Path to document JSON in CRPT wire format."),
    ],
    signature: Annotated[
        str | None,
        typer.Option("--signature", help="Document signature text."),
    ] = None,
    signature_file: Annotated[
        Path | None,
        typer.Option("--signature-file", help="Read the document signature from a file."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file."),
    ] = None,
    time_unit: Annotated[
        str | None,
        typer.Option("--time-unit", help="Window unit: milliseconds, seconds, minutes, ..."),
    ] = None,
    request_limit: Annotated[
        int | None,
        typer.Option("--request-limit", help="Maximum requests per window."),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="Override the CRPT API base URL."),
    ] = None,
    acquire_timeout: Annotated[
        float | None,
        typer.Option("--acquire-timeout", help="Seconds to wait for a rate-limit permit."),
    ] = None,
) -> None:
    """Register one signed document with the CRPT API."""

    try:
        config = _load_config(config_file, time_unit, request_limit, base_url)
        document = _load_document(document_path)
        resolved_signature = _resolve_signature(signature, signature_file)
        client = CrptApi.from_config(config, logger=RequestLogger())
        try:
            response = client.create_document(
                document,
                resolved_signature,
                acquire_timeout=acquire_timeout,
            )
        except AcquireCancelledError as exc:
            raise CommandStageError(
                stage="throttle",
                detail=f"No request permit was granted: {exc}",
                hint="Increase `--acquire-timeout` or `--request-limit`.",
            ) from exc
        except CrptApiError as exc:
            raise CommandStageError(
                stage="request",
                detail=str(exc),
                hint="Check network access to the CRPT API and retry.",
            ) from exc
    except Exception as exc:
        exit_with_command_error("create-document", exc)

    echo_response(response)
    if not response.ok:
        exit_with_command_error(
            "create-document",
            CommandStageError(
                stage="response",
                detail=f"CRPT API returned HTTP {response.status_code}.",
            ),
        )


@app.command("sample-document")
def sample_document_command(
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Write the sample document JSON to this path."),
    ] = None,
) -> None:
    """Print or write an example document in CRPT wire format."""

    payload_text = json.dumps(sample_document().to_payload(), ensure_ascii=False, indent=2)
    if out is None:
        typer.echo(payload_text)
        return
    try:
        out.write_text(payload_text + "\n", encoding="utf-8")
    except OSError as exc:
        exit_with_command_error(
            "sample-document",
            CommandStageError(stage="write", detail=f"Failed to write `{out}`: {exc}"),
        )
    typer.echo(f"Sample document: {out}")


@app.command("show-config")
def show_config_command(
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file."),
    ] = None,
) -> None:
    """Show the resolved client configuration."""

    try:
        config = _load_config(config_file)
    except Exception as exc:
        exit_with_command_error("show-config", exc)
    echo_config(config)


@app.command("encode-document")
def encode_document_command(
    document_path: Annotated[
        Path,
        typer.Argument(help="Path to document JSON in CRPT wire format."),
    ],
    signature: Annotated[
        str,
        typer.Option("--signature", help="Document signature text."),
    ],
) -> None:
    """Print the exact request body `create-document` would send."""

    try:
        document = _load_document(document_path)
        body = encode(build_create_document_payload(document, _resolve_signature(signature, None)))
    except Exception as exc:
        exit_with_command_error("encode-document", exc)
    typer.echo(body.decode("utf-8"))


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
