import asyncio
import socket
import ssl
from typing import Iterator

import asyncpg


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        yield exc
        # SQLAlchemy keeps the driver error on .orig
        exc = getattr(exc, "orig", None) or exc.__cause__ or exc.__context__


def describe_connection_error(exc: BaseException) -> str:
    """Map a connection failure to a likely cause an operator can act on."""
    for err in _exception_chain(exc):
        message = str(err).lower()
        if isinstance(err, socket.gaierror) or "name or service not known" in message or "getaddrinfo" in message:
            return "DNS resolution failed: check DB_HOST"
        if isinstance(err, ConnectionRefusedError) or "connection refused" in message:
            return "Connection refused: the server is not running or the port is blocked"
        if isinstance(err, asyncpg.InvalidPasswordError) or "password authentication failed" in message:
            return "Authentication failed: check DB_USER and DB_PASSWORD"
        if isinstance(err, asyncpg.InvalidCatalogNameError):
            return "Database does not exist: check DB_NAME"
        if isinstance(err, ssl.SSLError) or "ssl" in message:
            return "TLS negotiation failed: check DB_SSL and the server certificate"
        if isinstance(err, (asyncio.TimeoutError, TimeoutError)) or "timed out" in message:
            return "Connection timed out: the host is unreachable or a firewall drops the traffic"
    return f"Unexpected error: {exc}"
