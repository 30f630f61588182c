"""Provider registration commands."""

import typer
from rich.console import Console
from rich.table import Table

from dnsplane.config import (
    ProviderEntry,
    RegistryFile,
    load_registry,
    load_settings,
    save_registry,
)
from dnsplane.context import Context
from dnsplane.crypto import CryptoService
from dnsplane.errors import DNSPlaneError
from dnsplane.providers import ProviderFactory, ProviderManager

app = typer.Typer()
console = Console()


def fail(error: DNSPlaneError) -> None:
    """Print a classified error and exit with status 1."""
    console.print(f"[red]✗[/red] {error.message} ({error.code})")
    raise typer.Exit(1)


def parse_pairs(pairs: list[str]) -> dict[str, str]:
    """Parse repeated ``key=value`` options into a config map."""
    config: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            console.print(f"[red]✗[/red] Expected key=value, got: {pair}")
            raise typer.Exit(1)
        config[key.strip()] = value
    return config


def get_crypto_service() -> CryptoService:
    """Get the crypto service keyed by DNSPLANE_ENCRYPTION_KEY."""
    settings = load_settings()

    if not settings.encryption_key:
        console.print("[red]✗[/red] Encryption key not configured")
        console.print("  Set DNSPLANE_ENCRYPTION_KEY")
        raise typer.Exit(1)

    salt = settings.kdf_salt.encode("utf-8") if settings.kdf_salt else None
    return CryptoService(settings.encryption_key, salt=salt)


def get_manager(
    registry: RegistryFile | None = None,
) -> tuple[ProviderManager, dict[str, DNSPlaneError]]:
    """Register every stored provider in a fresh manager.

    Returns the manager and the registrations that could not be loaded,
    keyed by name.
    """
    registry = registry or load_registry()
    settings = load_settings()
    crypto = get_crypto_service()
    manager = ProviderManager(retry_config=settings.retry_config())
    failures: dict[str, DNSPlaneError] = {}

    for name, entry in registry.providers.items():
        try:
            config = crypto.decrypt_json(entry.config)
            manager.register(name, entry.type, config)
        except DNSPlaneError as e:
            failures[name] = e

    return manager, failures


@app.command()
def add(
    name: str = typer.Argument(..., help="Name for this provider account"),
    provider_type: str = typer.Option(..., "--type", "-t", help="Vendor tag, e.g. cloudflare"),
    pairs: list[str] | None = typer.Option(
        None, "--set", "-s", help="Credential entry as key=value (repeatable)"
    ),
    description: str = typer.Option("", "--description", "-d", help="Free-form description"),
    is_default: bool = typer.Option(False, "--default", help="Use when no provider is given"),
    test: bool = typer.Option(False, "--test", help="Test the connection before saving"),
) -> None:
    """Register a provider and store its credentials encrypted."""
    factory = ProviderFactory()
    if not factory.is_supported(provider_type):
        console.print(f"[red]✗[/red] Unsupported DNS provider: {provider_type}")
        console.print(f"  Supported: {', '.join(factory.supported_types())}")
        raise typer.Exit(1)

    config = parse_pairs(pairs or [])
    crypto = get_crypto_service()
    manager = ProviderManager(factory=factory)

    try:
        manager.register(name, provider_type, config)
        if test:
            console.print(f"Testing connection to {provider_type}...")
            manager.test(name, Context.background())
    except DNSPlaneError as e:
        fail(e)
    finally:
        manager.close()

    registry = load_registry()
    if is_default:
        for entry in registry.providers.values():
            entry.is_default = False
    registry.providers[name] = ProviderEntry(
        type=provider_type,
        config=crypto.encrypt_json(config),
        description=description,
        is_default=is_default,
    )
    path = save_registry(registry)

    console.print(f"[green]✓[/green] Provider '{name}' ({provider_type}) saved to {path.name}")


@app.command("list")
def list_providers() -> None:
    """List registered providers."""
    registry = load_registry()

    if not registry.providers:
        console.print("No providers registered. Run 'dnsplane provider add' first.")
        return

    table = Table()
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Default")
    table.add_column("Description")

    for name, entry in registry.providers.items():
        table.add_row(name, entry.type, "✓" if entry.is_default else "", entry.description)

    console.print(table)


@app.command()
def test(
    name: str | None = typer.Argument(None, help="Provider to test (all if omitted)"),
) -> None:
    """Test provider connections."""
    registry = load_registry()

    if name is not None and name not in registry.providers:
        console.print(f"[red]✗[/red] Provider '{name}' not found")
        raise typer.Exit(1)

    manager, failures = get_manager(registry)
    try:
        if name is not None:
            if name in failures:
                fail(failures[name])
            try:
                manager.test(name)
            except DNSPlaneError as e:
                fail(e)
            console.print(f"[green]✓[/green] {name}: connection ok")
            return

        results: dict[str, DNSPlaneError | None] = dict(failures)
        results.update(manager.test_all())
    finally:
        manager.close()

    table = Table()
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Result")

    for provider_name, error in sorted(results.items()):
        entry = registry.providers[provider_name]
        if error is None:
            table.add_row(provider_name, entry.type, "[green]ok[/green]")
        else:
            table.add_row(provider_name, entry.type, f"[red]{error.message}[/red]")

    console.print(table)

    if any(error is not None for error in results.values()):
        raise typer.Exit(1)


@app.command()
def remove(
    name: str = typer.Argument(..., help="Provider to remove"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Remove a registered provider."""
    registry = load_registry()

    if name not in registry.providers:
        console.print(f"[red]✗[/red] Provider '{name}' not found")
        raise typer.Exit(1)

    if not force:
        confirm = typer.confirm(f"Remove provider '{name}'?")
        if not confirm:
            raise typer.Abort()

    del registry.providers[name]
    save_registry(registry)
    console.print(f"[green]✓[/green] Provider '{name}' removed")
