import asyncio
import json
import logging
import os
import sys

import typer
from dotenv import load_dotenv

from fuelscan.integrations.ocr import OCREngine, TextExtractor
from fuelscan.integrations.secrets import DotenvSecretStore, SecretStore
from fuelscan.models import PrefillData, Provider, ReceiptImage, ScanResult
from fuelscan.orchestrator import ReceiptParser, default_routes
from fuelscan.workflow import NO_CREDENTIAL_GUIDANCE, ScanWorkflow

load_dotenv()

app = typer.Typer(no_args_is_help=True)
keys_app = typer.Typer(no_args_is_help=True, help="Manage provider API keys.")
app.add_typer(keys_app, name="keys")


@app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging"
    ),
):
    """Fuelscan CLI tool."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def get_secret_store() -> SecretStore:
    """Secret store at FUELSCAN_ENV_FILE (default: .env)."""
    return DotenvSecretStore(os.getenv("FUELSCAN_ENV_FILE", ".env"))


def build_receipt_parser(secret_store: SecretStore) -> ReceiptParser:
    routes = default_routes(
        claude_model=os.getenv("FUELSCAN_CLAUDE_MODEL"),
        chatgpt_model=os.getenv("FUELSCAN_CHATGPT_MODEL"),
    )
    return ReceiptParser(secret_store, routes)


def build_text_extractor() -> TextExtractor:
    return OCREngine()


def cli_progress(event_type: str, message: str):
    """Callback to handle progress events and output to CLI."""
    if "error" in event_type:
        typer.echo(message, err=True)
    else:
        typer.echo(message)


def format_prefill(prefill: PrefillData) -> str:
    def fmt(value: float | None) -> str:
        return "-" if value is None else f"{value:g}"

    return (
        f"Gallons: {fmt(prefill.gallons)}\n"
        f"Price per gallon: {fmt(prefill.price_per_gallon)}\n"
        f"Total cost: {fmt(prefill.total_cost)}"
    )


def parse_provider(value: str) -> Provider:
    try:
        return Provider(value.lower())
    except ValueError as e:
        choices = ", ".join(p.value for p in Provider)
        raise typer.BadParameter(f"Unknown provider '{value}'. Use one of: {choices}") from e


def load_image(path: str) -> ReceiptImage:
    try:
        return ReceiptImage.from_path(path)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def scan(
    image: str = typer.Argument(..., help="Path to a receipt photo"),
    as_json: bool = typer.Option(
        False, "--json", help="Print the prefill data as JSON"
    ),
):
    """Scan a fuel receipt photo and print the prefill values."""
    secret_store = get_secret_store()
    receipt_parser = build_receipt_parser(secret_store)

    if not receipt_parser.has_any_credential():
        typer.echo(NO_CREDENTIAL_GUIDANCE, err=True)
        raise typer.Exit(code=1)

    workflow = ScanWorkflow(
        text_extractor=build_text_extractor(),
        receipt_parser=receipt_parser,
        on_progress=None if as_json else cli_progress,
    )

    receipt_image = load_image(image)
    while True:
        result: ScanResult = asyncio.run(workflow.scan(receipt_image))
        prefill = result.prefill
        if result.succeeded and prefill is not None:
            break

        if as_json:
            typer.echo(result.error_message, err=True)
        if not sys.stdin.isatty() or not typer.confirm(
            "Discard image and try another?", default=False
        ):
            workflow.dismiss()
            raise typer.Exit(code=1)

        workflow.discard_and_retry()
        receipt_image = load_image(typer.prompt("Path to another receipt photo"))

    if as_json:
        typer.echo(json.dumps(prefill.model_dump()))
    else:
        typer.echo(format_prefill(prefill))


@keys_app.command("show")
def keys_show():
    """Show the masked API key for each provider."""
    secret_store = get_secret_store()
    for provider in Provider:
        masked = secret_store.masked_display(provider)
        typer.echo(f"{provider.display_name}: {masked or 'not set'}")


@keys_app.command("set")
def keys_set(
    provider: str = typer.Argument(..., help="claude or chatgpt"),
    key: str = typer.Argument(..., help="API key; an empty string removes it"),
):
    """Store an API key for a provider."""
    selected = parse_provider(provider)
    secret_store = get_secret_store()
    if not secret_store.set(selected, key):
        typer.echo(f"Failed to save {selected.display_name} API key", err=True)
        raise typer.Exit(code=1)
    masked = secret_store.masked_display(selected)
    typer.echo(f"{selected.display_name}: {masked or 'not set'}")


@keys_app.command("delete")
def keys_delete(provider: str = typer.Argument(..., help="claude or chatgpt")):
    """Remove the stored API key for a provider."""
    selected = parse_provider(provider)
    if not get_secret_store().delete(selected):
        typer.echo(f"Failed to delete {selected.display_name} API key", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Removed {selected.display_name} API key")


def main():
    app()


if __name__ == "__main__":
    main()
