"""Exception types raised by WHOIS lookups."""

from __future__ import annotations


class WhoisError(Exception):
    """Base class for every WHOIS-related failure."""

    def __init__(self, message: str, err: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.err = err
        if err is not None:
            self.__cause__ = err

    def __str__(self) -> str:
        if self.err is not None:
            return f"{self.message}: {self.err}"
        return self.message


class BadDomainError(WhoisError):
    """The domain could not be parsed into a name and a TLD."""

    def __init__(self, domain: str) -> None:
        super().__init__(f"invalid domain: {domain}")
        self.domain = domain


class NoWhoisServerFoundError(WhoisError):
    """No WHOIS server is known for a TLD."""

    def __init__(self, tld: str) -> None:
        super().__init__(f"no whois server found for TLD: {tld}")
        self.tld = tld


class SocketTimeoutError(WhoisError):
    """A WHOIS server did not answer in time."""

    def __init__(self, server: str, query: str) -> None:
        super().__init__(f"timeout querying {server} for {query}")
        self.server = server
        self.query = query


class SocketError(WhoisError):
    """A connection to a WHOIS server failed."""

    def __init__(self, server: str, query: str, err: BaseException | None) -> None:
        super().__init__(f"error querying {server} for {query}", err)
        self.server = server
        self.query = query


class TldsFileError(WhoisError):
    """The TLD to WHOIS server table could not be read."""

    def __init__(self, path: str, err: BaseException | None) -> None:
        super().__init__(f"tld data file error at {path}", err)
        self.path = path


class ProxyError(WhoisError):
    """A connection through the configured proxy failed."""

    def __init__(self, message: str, err: BaseException | None = None) -> None:
        super().__init__(f"proxy error: {message}", err)
        self.reason = message