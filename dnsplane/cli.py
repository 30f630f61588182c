"""CLI entry point for dnsplane."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dnsplane import __version__
from dnsplane.commands import crypto, provider, record
from dnsplane.config import load_settings
from dnsplane.providers import SUPPORTED_PROVIDERS, ProviderFactory
from dnsplane.providers.factory import PROVIDER_CLASSES
from dnsplane.providers.unimplemented import UnimplementedProvider

app = typer.Typer(
    name="dnsplane",
    help="Manage DNS records across cloud DNS providers.",
    no_args_is_help=True,
)
console = Console()

# Register sub-commands
app.add_typer(provider.app, name="provider", help="Manage provider accounts")
app.add_typer(record.app, name="record", help="Manage DNS records")
app.add_typer(crypto.app, name="crypto", help="Seal and open credential envelopes")


def setup_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else load_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.command()
def types() -> None:
    """List supported provider types and their features."""
    factory = ProviderFactory()

    table = Table()
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Record types")
    table.add_column("TTL", justify="right")
    table.add_column("Batch")
    table.add_column("Lines")

    for provider_type in SUPPORTED_PROVIDERS:
        features = factory.features(provider_type)
        implemented = not issubclass(PROVIDER_CLASSES[provider_type], UnimplementedProvider)
        table.add_row(
            provider_type,
            "[green]ready[/green]" if implemented else "[dim]planned[/dim]",
            ", ".join(features.supported_record_types),
            f"{features.min_ttl}-{features.max_ttl}",
            "✓" if features.supports_batch else "",
            "✓" if features.supports_line_types else "",
        )

    console.print(table)


@app.command()
def version() -> None:
    """Show the dnsplane version."""
    console.print(f"dnsplane v{__version__}")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """dnsplane - one API over many DNS providers."""
    setup_logging(verbose)


if __name__ == "__main__":
    app()
