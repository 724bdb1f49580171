"""Witnet node JSON-RPC command-line client."""

from .config import NodeConfig, load_node_config
from .correlator import ResponseCorrelator, parse_response
from .epochs import EpochRange, needs_height, resolve
from .errors import (
    CLIError,
    ConfigurationError,
    ConnectError,
    InvalidArguments,
    LocalValidationError,
    ProtocolError,
    RemoteError,
    TransportClosed,
    TransportError,
)
from .model import OutputPointer, Request, Response, RpcErrorObject
from .raw import RawMultiplexer
from .render import render
from .request import RequestBuilder
from .rpc_client import WitnetRPCClient
from .transport import HttpConnection, TcpConnection, connect

__all__ = [
    "CLIError",
    "ConfigurationError",
    "ConnectError",
    "EpochRange",
    "HttpConnection",
    "InvalidArguments",
    "LocalValidationError",
    "NodeConfig",
    "OutputPointer",
    "ProtocolError",
    "RawMultiplexer",
    "RemoteError",
    "Request",
    "RequestBuilder",
    "Response",
    "ResponseCorrelator",
    "RpcErrorObject",
    "TcpConnection",
    "TransportClosed",
    "TransportError",
    "WitnetRPCClient",
    "connect",
    "load_node_config",
    "needs_height",
    "parse_response",
    "render",
    "resolve",
]
