"""Mapping from top-level domains to their WHOIS servers."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from gois.errors import TldsFileError

_DEFAULT_SOURCE = "tld data"


class TLDRegistry:
    """TLD to WHOIS server table; lookups that miss may be filled in later."""

    def __init__(self, tlds: Mapping[str, str] | None = None) -> None:
        self._tlds: dict[str, str] = dict(tlds or {})

    def get_whois_server(self, tld: str) -> str | None:
        """Return the server for ``tld``, or None when it is unknown."""
        return self._tlds.get(tld)

    def set_whois_server(self, tld: str, server: str) -> None:
        """Record ``server`` as the WHOIS server of ``tld``."""
        self._tlds[tld] = server

    def get_all_tlds(self) -> list[str]:
        """Return every TLD in the table."""
        return list(self._tlds)

    def __contains__(self, tld: object) -> bool:
        return tld in self._tlds

    def __len__(self) -> int:
        return len(self._tlds)


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return f"{value:.0f}"
    if value is None:
        return "<nil>"
    if isinstance(value, Mapping):
        items = " ".join(f"{k}:{_format_value(v)}" for k, v in sorted(value.items()))
        return f"map[{items}]"
    if isinstance(value, Iterable):
        return "[" + " ".join(_format_value(v) for v in value) + "]"
    return str(value)


def _parse(data: str | bytes, source: str) -> dict[str, str]:
    try:
        raw = json.loads(data)
    except (ValueError, UnicodeDecodeError) as exc:
        raise TldsFileError(source, exc) from exc
    if not isinstance(raw, dict):
        err = ValueError("tld data must be a JSON object")
        raise TldsFileError(source, err) from err
    return {str(key): _format_value(value) for key, value in raw.items()}


def parse_tld_data(data: str | bytes) -> dict[str, str]:
    """Parse a JSON object of TLD to server entries, turning values into strings."""
    return _parse(data, _DEFAULT_SOURCE)


def load_tld_file(path: str | Path) -> TLDRegistry:
    """Build a registry from the JSON file at ``path``."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise TldsFileError(str(path), exc) from exc
    return TLDRegistry(_parse(data, str(path)))