"""WHOIS client: finds the right server for a domain and queries it over TCP."""

from __future__ import annotations

import ipaddress
import re
import socket
import time
from urllib.parse import ParseResult, SplitResult, urlsplit

from gois.analyzer import QueryResult
from gois.errors import (
    BadDomainError,
    NoWhoisServerFoundError,
    ProxyError,
    SocketError,
)
from gois.tlds import TLDRegistry

DEFAULT_WHOIS_PORT = 43
IANA_WHOIS_SERVER = "whois.iana.org"
MAX_RESPONSE_SIZE = 512 * 1024
_CHUNK_SIZE = 4096

_IANA_WHOIS = re.compile(r"^.*whois:.*$", re.IGNORECASE | re.MULTILINE)
_REGISTRAR_SERVER = (
    re.compile(r"^.*whois server.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^.*registrar whois.*$", re.IGNORECASE | re.MULTILINE),
)

# Latin-1 maps every byte, so it always succeeds after UTF-8 fails.
_ENCODINGS = ("utf-8", "iso-8859-1")


class _SocksError(OSError):
    """The SOCKS5 proxy refused or broke the handshake."""


def parse_domain(domain: str) -> tuple[str, str]:
    """Normalise ``domain`` and return it together with its top-level domain."""
    domain = domain.removeprefix("http://").removeprefix("https://")
    domain = domain.strip().lower()
    domain = domain.split("/", 1)[0]

    parts = domain.split(".")
    if len(parts) < 2 or not parts[-1]:
        raise BadDomainError(domain)
    return domain, parts[-1]


def extract_iana_whois_server(response: str) -> str | None:
    """Return the server from the first ``whois:`` line of an IANA answer."""
    match = _IANA_WHOIS.search(response)
    if match is None:
        return None
    return match.group(0).split(":")[1].strip()


def extract_registrar_server(response: str) -> str | None:
    """Return the registrar WHOIS server named in a registry answer, if any."""
    for pattern in _REGISTRAR_SERVER:
        match = pattern.search(response)
        if match is None:
            continue
        parts = match.group(0).split(":")
        if len(parts) >= 2:
            server = parts[1].strip().strip("/\\")
            if server:
                return server
    return None


def decode_response(data: bytes) -> str:
    """Decode a WHOIS answer into lines that each end with a single newline."""
    for encoding in _ENCODINGS:
        try:
            text = data.decode(encoding)
            break
        except UnicodeDecodeError:
            continue
    else:
        text = data.decode("utf-8", errors="replace")

    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return "".join(line.removesuffix("\r") + "\n" for line in lines)


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        chunk = sock.recv(size - len(buf))
        if not chunk:
            raise _SocksError("unexpected end of stream from proxy")
        buf += chunk
    return bytes(buf)


def _socks5_handshake(
    sock: socket.socket,
    host: str,
    port: int,
    credentials: tuple[str, str] | None,
) -> None:
    methods = b"\x00\x02" if credentials is not None else b"\x00"
    sock.sendall(b"\x05" + bytes([len(methods)]) + methods)
    version, method = _recv_exact(sock, 2)
    if version != 5:
        raise _SocksError(f"unexpected protocol version {version}")
    if method == 0x02 and credentials is not None:
        user, secret = (part.encode("utf-8") for part in credentials)
        sock.sendall(b"\x01" + bytes([len(user)]) + user + bytes([len(secret)]) + secret)
        _, status = _recv_exact(sock, 2)
        if status != 0:
            raise _SocksError("username/password authentication failed")
    elif method != 0x00:
        raise _SocksError("no acceptable authentication methods")

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        encoded = host.encode("idna")
        target = b"\x03" + bytes([len(encoded)]) + encoded
    else:
        target = (b"\x01" if address.version == 4 else b"\x04") + address.packed
    sock.sendall(b"\x05\x01\x00" + target + port.to_bytes(2, "big"))

    version, reply, _, address_type = _recv_exact(sock, 4)
    if version != 5:
        raise _SocksError(f"unexpected protocol version {version}")
    if reply != 0:
        raise _SocksError(f"connect request failed with code {reply}")
    if address_type == 0x01:
        _recv_exact(sock, 4)
    elif address_type == 0x03:
        _recv_exact(sock, _recv_exact(sock, 1)[0])
    elif address_type == 0x04:
        _recv_exact(sock, 16)
    else:
        raise _SocksError(f"unknown address type {address_type}")
    _recv_exact(sock, 2)


def _read_until_closed(sock: socket.socket, deadline: float) -> bytes:
    buf = bytearray()
    while len(buf) < MAX_RESPONSE_SIZE:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        try:
            sock.settimeout(remaining)
            chunk = sock.recv(_CHUNK_SIZE)
        except OSError:
            break
        if not chunk:
            break
        buf += chunk
    return bytes(buf[:MAX_RESPONSE_SIZE])


class Client:
    """Queries registry and registrar WHOIS servers, optionally through a proxy."""

    def __init__(
        self,
        timeout: float = 10.0,
        proxy: SplitResult | ParseResult | str | None = None,
        registry: TLDRegistry | None = None,
        *,
        port: int = DEFAULT_WHOIS_PORT,
        iana_server: str = IANA_WHOIS_SERVER,
    ) -> None:
        self.timeout = timeout
        self.proxy = urlsplit(proxy) if isinstance(proxy, str) else proxy
        self.registry = registry if registry is not None else TLDRegistry()
        self.port = port
        self.iana_server = iana_server

    def fetch(self, domain: str, whois_server: str | None = None) -> QueryResult:
        """Query the registry server for ``domain`` and, if it names one, the registrar."""
        normalized, tld = parse_domain(domain)
        server = whois_server or self.find_whois_server(tld)

        registry_result = self.query(normalized, server)

        registrar_result = ""
        registrar_server = extract_registrar_server(registry_result)
        if registrar_server:
            try:
                registrar_result = self.query(normalized, registrar_server)
            except SocketError:
                registrar_result = ""

        return QueryResult(registry_result=registry_result, registrar_result=registrar_result)

    def find_whois_server(self, tld: str) -> str:
        """Return the WHOIS server of ``tld``, asking IANA and caching when it is unknown."""
        server = self.registry.get_whois_server(tld)
        if server is not None:
            return server

        response = self.query(tld, self.iana_server)
        server = extract_iana_whois_server(response)
        if server is None:
            raise NoWhoisServerFoundError(tld)
        self.registry.set_whois_server(tld, server)
        return server

    def query(self, domain: str, server: str) -> str:
        """Send one WHOIS query to ``server`` and return the decoded answer."""
        try:
            sock = self._dial(server)
        except (OSError, ProxyError) as exc:
            raise SocketError(server, domain, exc) from exc

        with sock:
            deadline = time.monotonic() + self.timeout
            try:
                sock.settimeout(self.timeout)
                sock.sendall((domain + "\r\n").encode("utf-8"))
            except OSError as exc:
                raise SocketError(server, domain, exc) from exc
            data = _read_until_closed(sock, deadline)

        return decode_response(data)

    def _dial(self, host: str) -> socket.socket:
        if self.proxy is not None:
            return self._dial_with_proxy(host)
        return socket.create_connection((host, self.port), timeout=self.timeout)

    def _dial_with_proxy(self, host: str) -> socket.socket:
        proxy = self.proxy
        proxy_address = proxy.netloc.rpartition("@")[2]

        if proxy.scheme != "socks5":
            # Other proxy kinds are not tunnelled; the connection goes out directly.
            try:
                return socket.create_connection((host, self.port), timeout=self.timeout)
            except OSError as exc:
                raise ProxyError(f"failed to connect via proxy {proxy_address}", exc) from exc

        try:
            proxy_port = proxy.port
        except ValueError as exc:
            raise ProxyError("failed to create proxy dialer", exc) from exc
        if not proxy.hostname or proxy_port is None:
            err = ValueError(f"missing port in address {proxy_address}")
            raise ProxyError("failed to create proxy dialer", err) from err

        credentials = None
        if proxy.username is not None:
            credentials = (proxy.username, proxy.password or "")

        try:
            sock = socket.create_connection((proxy.hostname, proxy_port), timeout=self.timeout)
        except OSError as exc:
            raise ProxyError(f"failed to connect via proxy {proxy_address}", exc) from exc
        try:
            _socks5_handshake(sock, host, self.port, credentials)
        except OSError as exc:
            sock.close()
            raise ProxyError(f"failed to connect via proxy {proxy_address}", exc) from exc
        return sock