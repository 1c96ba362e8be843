"""WHOIS domain lookup: registry and registrar queries, availability analysis, batch and pattern queries."""

__version__ = "1.0.0"