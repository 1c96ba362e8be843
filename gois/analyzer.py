"""Classification and field extraction for WHOIS responses."""

from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class QueryResult:
    """Raw answers from the registry and the registrar WHOIS servers."""

    registry_result: str = ""
    registrar_result: str = ""


@dataclass
class DomainInfo:
    """Facts extracted from a WHOIS answer."""

    status: str
    registrar: str = ""
    creation_date: str = ""
    expiration_date: str = ""
    name_servers: list[str] = field(default_factory=list)


AVAILABLE = "available"
REGISTERED = "registered"
UNKNOWN = "unknown"

_AVAILABLE_KEYWORDS = (
    "no match",
    "not found",
    "no entries found",
    "no data found",
    "not registered",
    "available for registration",
    "status: free",
    "status: available",
    "no matching record",
    "nothing found",
    "no object found",
    "domain not found",
    "is available",
    "is free",
    "未找到",
    "无匹配",
)

_REGISTERED_KEYWORDS = (
    "registrar:",
    "registrant:",
    "creation date:",
    "created:",
    "expiration date:",
    "expires:",
    "expiry date:",
    "registry expiry date:",
    "domain status:",
    "name server:",
    "nameserver:",
    "dnssec:",
    "注册商",
    "注册人",
    "创建时间",
    "到期时间",
)


def _compile(*labels: str) -> tuple[re.Pattern[str], ...]:
    return tuple(
        re.compile(rf"{label}:\s*(.+)", re.IGNORECASE | re.MULTILINE) for label in labels
    )


_REGISTRAR = _compile("registrar", "sponsoring registrar")
_CREATION_DATE = _compile("creation date", "created", "registered on")
_EXPIRATION_DATE = _compile(
    "registry expiry date",
    "registrar registration expiration date",
    "expiration date",
    "expires",
    "expiry date",
)
_NAME_SERVER = _compile("name server", "nameserver", "nserver")


def _first_match(patterns: tuple[re.Pattern[str], ...], text: str) -> str:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return ""


class Analyzer:
    """Decides whether a domain is free and pulls common fields from WHOIS text."""

    def __init__(self) -> None:
        self.available_keywords = tuple(k.lower() for k in _AVAILABLE_KEYWORDS)
        self.registered_keywords = tuple(k.lower() for k in _REGISTERED_KEYWORDS)

    @staticmethod
    def _extraction_text(result: QueryResult) -> str:
        return result.registrar_result + "\n" + result.registry_result

    def get_domain_status(self, result: QueryResult | None) -> str:
        """Return "available", "registered" or "unknown"."""
        if result is None:
            return UNKNOWN
        combined = (result.registry_result + "\n" + result.registrar_result).lower()
        if not combined.strip():
            return UNKNOWN

        available = sum(1 for k in self.available_keywords if k in combined)
        registered = sum(1 for k in self.registered_keywords if k in combined)

        if available > 0 and registered == 0:
            return AVAILABLE
        if registered > 0:
            return REGISTERED
        return UNKNOWN

    def extract_registrar(self, result: QueryResult | None) -> str:
        """Return the registrar name, or an empty string."""
        if result is None:
            return ""
        return _first_match(_REGISTRAR, self._extraction_text(result))

    def extract_creation_date(self, result: QueryResult | None) -> str:
        """Return the creation date as written, or an empty string."""
        if result is None:
            return ""
        return _first_match(_CREATION_DATE, self._extraction_text(result))

    def extract_expiration_date(self, result: QueryResult | None) -> str:
        """Return the expiration date as written, or an empty string."""
        if result is None:
            return ""
        return _first_match(_EXPIRATION_DATE, self._extraction_text(result))

    def extract_name_servers(self, result: QueryResult | None) -> list[str]:
        """Return name servers in order of appearance, without case-insensitive repeats."""
        if result is None:
            return []
        text = self._extraction_text(result)
        seen: set[str] = set()
        servers: list[str] = []
        for pattern in _NAME_SERVER:
            for match in pattern.finditer(text):
                server = match.group(1).strip()
                key = server.lower()
                if key not in seen:
                    seen.add(key)
                    servers.append(server)
        return servers

    def get_domain_info(self, result: QueryResult | None) -> DomainInfo:
        """Return every extracted field at once."""
        return DomainInfo(
            status=self.get_domain_status(result),
            registrar=self.extract_registrar(result),
            creation_date=self.extract_creation_date(result),
            expiration_date=self.extract_expiration_date(result),
            name_servers=self.extract_name_servers(result),
        )