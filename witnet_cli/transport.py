"""Line-oriented transports carrying JSON-RPC traffic to a Witnet node.

A plain ``host:port`` address opens a TCP socket that carries one JSON object
per line in each direction. ``http://`` and ``https://`` endpoints are served
by :class:`HttpConnection`, which posts every line as a request body and
queues the reply body as the matching line. There is no reconnection: once a
connection fails the invocation is over.
"""

from __future__ import annotations

import logging
import socket
from collections import deque
from typing import Deque, Optional, Protocol

import requests
from requests import RequestException

from .config import DEFAULT_CONNECT_TIMEOUT, parse_address
from .errors import ConfigurationError, ConnectError, TransportClosed

logger = logging.getLogger(__name__)


class Connection(Protocol):
    address: str

    def send(self, line: str) -> None: ...

    def receive_line(self) -> str: ...

    def close(self) -> None: ...


def _frame(line: str) -> bytes:
    # Undecodable input bytes arrive as lone surrogates and go out unchanged.
    return line.rstrip("\r\n").encode("utf-8", errors="surrogateescape") + b"\n"


class TcpConnection:
    """A single long-lived TCP stream with newline-delimited frames."""

    def __init__(self, sock: socket.socket, address: str) -> None:
        self.address = address
        self._sock = sock
        self._reader = sock.makefile("rb")
        self._closed = False

    @classmethod
    def open(cls, host: str, port: int, *, timeout: float = DEFAULT_CONNECT_TIMEOUT) -> "TcpConnection":
        address = f"{host}:{port}"
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as exc:
            raise ConnectError(address, exc) from exc
        # The connect timeout must not turn into a read deadline.
        sock.settimeout(None)
        return cls(sock, address)

    def send(self, line: str) -> None:
        if self._closed:
            raise TransportClosed(f"connection to {self.address} is closed")
        logger.debug("-> %s", line)
        try:
            self._sock.sendall(_frame(line))
        except OSError as exc:
            raise TransportClosed(f"connection to {self.address} lost while sending: {exc}") from exc

    def receive_line(self) -> str:
        if self._closed:
            raise TransportClosed(f"connection to {self.address} is closed")
        try:
            raw = self._reader.readline()
        except OSError as exc:
            raise TransportClosed(f"connection to {self.address} lost while reading: {exc}") from exc
        if not raw:
            raise TransportClosed(f"connection closed by {self.address}")
        line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        logger.debug("<- %s", line)
        return line

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._reader.close()
        finally:
            self._sock.close()
        logger.debug("Closed connection to %s", self.address)

    def __enter__(self) -> "TcpConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class HttpConnection:
    """Request/response JSON-RPC over HTTP presented as a line stream."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.address = url
        self._timeout = timeout
        self._session = session or requests.Session()
        self._replies: Deque[str] = deque()
        self._closed = False

    def send(self, line: str) -> None:
        if self._closed:
            raise TransportClosed(f"connection to {self.address} is closed")
        logger.debug("-> %s", line)
        try:
            response = self._session.post(
                self.address,
                data=_frame(line),
                headers={"content-type": "application/json"},
                # Only the connect phase is bounded; replies may take as long as the node needs.
                timeout=(self._timeout, None),
            )
        except requests.ConnectionError as exc:
            raise ConnectError(self.address, exc) from exc
        except RequestException as exc:
            raise TransportClosed(f"HTTP request to {self.address} failed: {exc}") from exc

        body = response.text.strip()
        if not body:
            raise TransportClosed(
                f"node at {self.address} returned HTTP {response.status_code} without a body"
            )
        # JSON forbids raw newlines inside strings, so dropping them keeps the reply intact.
        self._replies.append(body.replace("\r", "").replace("\n", ""))

    def receive_line(self) -> str:
        if not self._replies:
            raise TransportClosed(f"no reply pending from {self.address}")
        line = self._replies.popleft()
        logger.debug("<- %s", line)
        return line

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._session.close()

    def __enter__(self) -> "HttpConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def connect(
    address: str,
    *,
    timeout: float = DEFAULT_CONNECT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Connection:
    """Open a connection to ``address`` (``host:port`` or an HTTP(S) URL)."""

    host, port, scheme = parse_address(address)
    if host is None:
        raise ConfigurationError("no node address configured")
    if scheme:
        # Nothing is opened until the first request is posted.
        logger.info("Using HTTP endpoint %s", address)
        return HttpConnection(address, timeout=timeout, session=session)
    logger.info("Connecting to %s", address)
    connection = TcpConnection.open(host, port, timeout=timeout)
    logger.info("Connected to %s", connection.address)
    return connection
