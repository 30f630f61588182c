"""DNS record management commands."""

from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from dnsplane.commands.provider import fail, get_crypto_service
from dnsplane.config import load_registry, load_settings
from dnsplane.context import Context
from dnsplane.errors import BatchAddError, DNSPlaneError
from dnsplane.models import DNSRecord
from dnsplane.providers import DNSProvider, ProviderManager

app = typer.Typer()
console = Console()

T = TypeVar("T")

ProviderOption = typer.Option(
    None, "--provider", "-p", help="Registered provider (defaults to the default provider)"
)


def open_provider(name: str | None) -> tuple[ProviderManager, DNSProvider]:
    """Decrypt and register a single provider from dnsplane.yaml."""
    registry = load_registry()
    name = name or registry.default_provider()

    if name is None:
        console.print("[red]✗[/red] No provider given and no default provider set")
        console.print("  Use --provider or 'dnsplane provider add NAME --default'")
        raise typer.Exit(1)

    entry = registry.providers.get(name)
    if entry is None:
        console.print(f"[red]✗[/red] Provider '{name}' not found")
        raise typer.Exit(1)

    settings = load_settings()
    crypto = get_crypto_service()
    manager = ProviderManager(retry_config=settings.retry_config())
    try:
        manager.register(name, entry.type, crypto.decrypt_json(entry.config))
    except DNSPlaneError as e:
        manager.close()
        fail(e)

    return manager, manager.get(name)


def run(manager: ProviderManager, operation: Callable[[Context], T]) -> T:
    """Run a provider call with retries under the configured deadline."""
    ctx = Context(timeout=load_settings().request_timeout)
    try:
        return manager.retry(lambda: operation(ctx), ctx)
    except DNSPlaneError as e:
        fail(e)
    finally:
        manager.close()


def build_record(
    name: str,
    record_type: str,
    value: str,
    ttl: int,
    priority: int | None,
    weight: int | None,
    port: int | None,
    line: str,
) -> DNSRecord:
    return DNSRecord(
        name=name,
        type=record_type,
        value=value,
        ttl=ttl,
        priority=priority,
        weight=weight,
        port=port,
        line=line,
    )


def print_records(records: list[DNSRecord]) -> None:
    table = Table()
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Value")
    table.add_column("TTL", justify="right")
    table.add_column("Priority", justify="right")
    table.add_column("Status")

    for record in records:
        table.add_row(
            record.id,
            record.name,
            record.type,
            record.value,
            str(record.ttl),
            "" if record.priority is None else str(record.priority),
            record.status,
        )

    console.print(table)


@app.command("list")
def list_records(
    domain: str = typer.Argument(..., help="Apex domain, e.g. example.com"),
    provider: str | None = ProviderOption,
) -> None:
    """List DNS records of a domain."""
    manager, dns = open_provider(provider)
    records = run(manager, lambda ctx: dns.list_records(domain, ctx))

    if not records:
        console.print(f"No records found for {domain}")
        return

    print_records(records)


@app.command()
def get(
    domain: str = typer.Argument(..., help="Apex domain"),
    record_id: str = typer.Argument(..., help="Vendor record id"),
    provider: str | None = ProviderOption,
) -> None:
    """Show a single DNS record."""
    manager, dns = open_provider(provider)
    record = run(manager, lambda ctx: dns.get_record(domain, record_id, ctx))
    print_records([record])


@app.command()
def add(
    domain: str = typer.Argument(..., help="Apex domain"),
    name: str = typer.Argument(..., help="Record name relative to the domain (@ for apex)"),
    record_type: str = typer.Argument(..., help="Record type (A, CNAME, MX, ...)"),
    value: str = typer.Argument(..., help="Record value"),
    ttl: int = typer.Option(600, "--ttl", help="TTL in seconds"),
    priority: int | None = typer.Option(None, "--priority", help="MX/SRV priority"),
    weight: int | None = typer.Option(None, "--weight", help="SRV weight"),
    port: int | None = typer.Option(None, "--port", help="SRV port"),
    line: str = typer.Option("", "--line", help="Resolution line (dnspod)"),
    provider: str | None = ProviderOption,
) -> None:
    """Create a DNS record."""
    record = build_record(name, record_type, value, ttl, priority, weight, port, line)
    manager, dns = open_provider(provider)
    created = run(manager, lambda ctx: dns.add_record(domain, record, ctx))
    console.print(f"[green]✓[/green] Created {created.type} record {created.name} (id {created.id})")


@app.command()
def update(
    domain: str = typer.Argument(..., help="Apex domain"),
    record_id: str = typer.Argument(..., help="Vendor record id"),
    name: str = typer.Argument(..., help="Record name relative to the domain (@ for apex)"),
    record_type: str = typer.Argument(..., help="Record type"),
    value: str = typer.Argument(..., help="Record value"),
    ttl: int = typer.Option(600, "--ttl", help="TTL in seconds"),
    priority: int | None = typer.Option(None, "--priority", help="MX/SRV priority"),
    weight: int | None = typer.Option(None, "--weight", help="SRV weight"),
    port: int | None = typer.Option(None, "--port", help="SRV port"),
    line: str = typer.Option("", "--line", help="Resolution line (dnspod)"),
    provider: str | None = ProviderOption,
) -> None:
    """Replace every field of an existing DNS record."""
    record = build_record(name, record_type, value, ttl, priority, weight, port, line)
    manager, dns = open_provider(provider)
    run(manager, lambda ctx: dns.update_record(domain, record_id, record, ctx))
    console.print(f"[green]✓[/green] Updated record {record_id}")


@app.command()
def delete(
    domain: str = typer.Argument(..., help="Apex domain"),
    record_id: str = typer.Argument(..., help="Vendor record id"),
    provider: str | None = ProviderOption,
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a DNS record."""
    if not force:
        confirm = typer.confirm(f"Delete record {record_id} from {domain}?")
        if not confirm:
            raise typer.Abort()

    manager, dns = open_provider(provider)
    run(manager, lambda ctx: dns.delete_record(domain, record_id, ctx))
    console.print(f"[green]✓[/green] Deleted record {record_id}")


@app.command("import")
def import_records(
    domain: str = typer.Argument(..., help="Apex domain"),
    file: Path = typer.Argument(..., help="YAML file holding a list of records"),
    provider: str | None = ProviderOption,
) -> None:
    """Add every record listed in a YAML file."""
    if not file.exists():
        console.print(f"[red]✗[/red] File not found: {file}")
        raise typer.Exit(1)

    with open(file) as f:
        data = yaml.safe_load(f) or []

    if not isinstance(data, list):
        console.print("[red]✗[/red] Expected a YAML list of records")
        raise typer.Exit(1)

    try:
        records = [DNSRecord(**item) for item in data]
    except (TypeError, ValidationError) as e:
        console.print(f"[red]✗[/red] Invalid record in {file.name}: {e}")
        raise typer.Exit(1)

    manager, dns = open_provider(provider)
    ctx = Context(timeout=load_settings().request_timeout)
    try:
        added = dns.batch_add_records(domain, records, ctx)
    except BatchAddError as e:
        console.print(f"[yellow]![/yellow] Added {len(e.added)} of {len(records)} records")
        for index, error in e.failures:
            console.print(f"  [red]✗[/red] #{index} {records[index].name} {records[index].type}: {error.message}")
        raise typer.Exit(1)
    except DNSPlaneError as e:
        fail(e)
    finally:
        manager.close()

    console.print(f"[green]✓[/green] Added {len(added)} records to {domain}")
