"""Failure taxonomy shared by the Witnet CLI and its exit code mapping."""

from __future__ import annotations

from typing import Any

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_LOCAL = 2
EXIT_TRANSPORT = 3
EXIT_PROTOCOL = 4
EXIT_REMOTE = 5
EXIT_INTERRUPTED = 130

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class CLIError(RuntimeError):
    """Base class for every failure that ends a CLI invocation."""

    exit_code = EXIT_FAILURE


class ConfigurationError(CLIError):
    """Raised when configuration is invalid."""

    exit_code = EXIT_LOCAL


class LocalValidationError(CLIError):
    """Raised for bad input detected before any network I/O."""

    exit_code = EXIT_LOCAL


class InvalidArguments(LocalValidationError):
    """Raised when a command's arguments do not have the expected shape."""


class TransportError(CLIError):
    """Raised when the byte stream to the node fails."""

    exit_code = EXIT_TRANSPORT


class ConnectError(TransportError):
    """Raised when the connection to the node cannot be established.

    The OS-level cause is kept on ``errno``/``strerror`` and in the message so
    refusals and timeouts can be told apart.
    """

    def __init__(self, address: str, cause: BaseException) -> None:
        self.address = address
        self.cause = cause
        self.errno = getattr(cause, "errno", None)
        self.strerror = getattr(cause, "strerror", None) or str(cause) or type(cause).__name__
        super().__init__(f"could not connect to {address}: {self.strerror}")


class TransportClosed(TransportError):
    """Raised when the connection drops while a reply is awaited."""


class ProtocolError(CLIError):
    """Raised when a reply line is not a correlatable JSON-RPC response."""

    exit_code = EXIT_PROTOCOL

    def __init__(
        self,
        message: str,
        *,
        request_id: int | None = None,
        line: str | None = None,
        code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.request_id = request_id
        self.line = line
        self.code = code


class RemoteError(CLIError):
    """Raised when the node answers with a JSON-RPC error object."""

    exit_code = EXIT_REMOTE

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data


def exit_code_for(exc: BaseException) -> int:
    """Map an exception raised during an invocation to a process exit code."""

    if isinstance(exc, KeyboardInterrupt):
        return EXIT_INTERRUPTED
    return getattr(exc, "exit_code", EXIT_FAILURE)


def format_rpc_hint(error: RemoteError | ProtocolError | dict[str, Any] | None) -> str | None:
    """Return a short remediation hint for the standard JSON-RPC error codes.

    The server's own code and message are always reported verbatim by the
    caller; this only adds guidance for the codes a CLI user can act on.
    """

    if error is None:
        return None

    if isinstance(error, dict):
        code = error.get("code")
    else:
        code = error.code

    if code == PARSE_ERROR:
        return "The node could not parse the request as JSON."
    if code == INVALID_REQUEST:
        return "The request is not a valid JSON-RPC 2.0 object."
    if code == METHOD_NOT_FOUND:
        return "The node does not expose this method; check the node version."
    if code == INVALID_PARAMS:
        return "The node rejected the parameters; check the argument format."
    return None
