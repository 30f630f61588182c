"""dnsplane - multi-vendor DNS record management with encrypted credentials."""

__version__ = "0.1.0"
