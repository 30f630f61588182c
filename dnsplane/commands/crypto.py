"""Credential envelope commands."""

import json

import typer
from rich.console import Console

from dnsplane.commands.provider import fail, get_crypto_service, parse_pairs
from dnsplane.errors import DNSPlaneError

app = typer.Typer()
console = Console()


@app.command()
def encrypt(
    pairs: list[str] = typer.Option(
        ..., "--set", "-s", help="Credential entry as key=value (repeatable)"
    ),
) -> None:
    """Seal a credential map into an envelope."""
    crypto = get_crypto_service()
    envelope = crypto.encrypt_json(parse_pairs(pairs))
    # Plain print keeps the envelope copy-pasteable.
    print(envelope)


@app.command()
def decrypt(
    envelope: str = typer.Argument(..., help="Base64 envelope"),
) -> None:
    """Open an envelope and print the credential map as JSON."""
    crypto = get_crypto_service()
    try:
        data = crypto.decrypt_json(envelope)
    except DNSPlaneError as e:
        fail(e)
    print(json.dumps(data, indent=2, ensure_ascii=False))
